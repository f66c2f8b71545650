"""Strict single-pass JSON parser producing a ``JsonValue`` tree."""

from __future__ import annotations

from .errors import ParseError
from .json_value import (
    FALSE,
    NULL,
    TRUE,
    JsonArray,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)

_WHITESPACE = (" ", "\t", "\n", "\r")
_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t"}
_HEX = "0123456789abcdefABCDEF"


def parse(text: str | bytes) -> JsonValue:
    return JsonParser(text).parse()


class JsonParser:
    """Recursive-descent parser over a cursor with one character of lookahead.

    Errors carry the 0-based offset plus the 1-based line and column of the
    offending character.
    """

    MAX_NESTING_LEVEL = 256

    def __init__(self, text: str | bytes):
        if isinstance(text, (bytes, bytearray)):
            text = _decode(bytes(text))
        if not isinstance(text, str):
            raise TypeError(f"cannot parse {type(text).__name__}")
        self.text = text
        self.index = 0
        self.line = 1
        self.line_start = 0
        self.nesting = 0

    @property
    def current(self) -> str | None:
        return self.text[self.index] if self.index < len(self.text) else None

    def parse(self) -> JsonValue:
        self._skip_whitespace()
        value = self._read_value()
        self._skip_whitespace()
        if self.current is not None:
            raise self._error("Unexpected character")
        return value

    # -- values -------------------------------------------------------------

    def _read_value(self) -> JsonValue:
        c = self.current
        if c == "n":
            return self._read_literal("null", NULL)
        if c == "t":
            return self._read_literal("true", TRUE)
        if c == "f":
            return self._read_literal("false", FALSE)
        if c == '"':
            return JsonString(self._read_string())
        if c == "[":
            return self._read_array()
        if c == "{":
            return self._read_object()
        if c == "-" or _is_digit(c):
            return self._read_number()
        raise self._expected("value")

    def _read_literal(self, word: str, value: JsonValue) -> JsonValue:
        self._read()
        for ch in word[1:]:
            if not self._read_char(ch):
                raise self._expected(f"'{ch}'")
        return value

    def _read_array(self) -> JsonArray:
        self._read()
        self._enter()
        array = JsonArray()
        self._skip_whitespace()
        if self._read_char("]"):
            self.nesting -= 1
            return array
        while True:
            self._skip_whitespace()
            array.add(self._read_value())
            self._skip_whitespace()
            if self._read_char(","):
                continue
            if self._read_char("]"):
                break
            raise self._expected("',' or ']'")
        self.nesting -= 1
        return array

    def _read_object(self) -> JsonObject:
        self._read()
        self._enter()
        obj = JsonObject()
        self._skip_whitespace()
        if self._read_char("}"):
            self.nesting -= 1
            return obj
        while True:
            self._skip_whitespace()
            if self.current != '"':
                raise self._expected("name")
            name = self._read_string()
            self._skip_whitespace()
            if not self._read_char(":"):
                raise self._expected("':'")
            self._skip_whitespace()
            obj.add(name, self._read_value())
            self._skip_whitespace()
            if self._read_char(","):
                continue
            if self._read_char("}"):
                break
            raise self._expected("',' or '}'")
        self.nesting -= 1
        return obj

    def _enter(self):
        self.nesting += 1
        if self.nesting > self.MAX_NESTING_LEVEL:
            raise self._error("Nesting too deep")

    def _read_string(self) -> str:
        self._read()
        chars: list[str] = []
        while True:
            c = self.current
            if c is None:
                raise self._expected("'\"'")
            if c == '"':
                self._read()
                return "".join(chars)
            if c == "\\":
                self._read()
                chars.append(self._read_escape())
            elif c < " ":
                raise self._expected("valid string character")
            else:
                chars.append(c)
                self._read()

    def _read_escape(self) -> str:
        c = self.current
        if c in _ESCAPES:
            self._read()
            return _ESCAPES[c]
        if c != "u":
            raise self._expected("valid escape sequence")
        self._read()
        code = self._read_hex4()
        if 0xD800 <= code <= 0xDBFF:
            low = self._peek_low_surrogate()
            if low is not None:
                for _ in range(6):
                    self._read()
                return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00))
        return chr(code)

    def _read_hex4(self) -> int:
        code = 0
        for _ in range(4):
            c = self.current
            if c is None or c not in _HEX:
                raise self._expected("hexadecimal digit")
            code = code * 16 + int(c, 16)
            self._read()
        return code

    def _peek_low_surrogate(self) -> int | None:
        chunk = self.text[self.index:self.index + 6]
        if len(chunk) != 6 or not chunk.startswith("\\u") or any(h not in _HEX for h in chunk[2:]):
            return None
        code = int(chunk[2:], 16)
        return code if 0xDC00 <= code <= 0xDFFF else None

    def _read_number(self) -> JsonNumber:
        start = self.index
        self._read_char("-")
        first = self.current
        if not self._read_digit():
            raise self._expected("digit")
        if first != "0":
            while self._read_digit():
                pass
        if self._read_char("."):
            if not self._read_digit():
                raise self._expected("digit")
            while self._read_digit():
                pass
        if self._read_char("e") or self._read_char("E"):
            if not self._read_char("+"):
                self._read_char("-")
            if not self._read_digit():
                raise self._expected("digit")
            while self._read_digit():
                pass
        return JsonNumber(self.text[start:self.index])

    # -- cursor -------------------------------------------------------------

    def _read(self):
        if self.current == "\n":
            self.line += 1
            self.line_start = self.index + 1
        self.index += 1

    def _read_char(self, ch: str) -> bool:
        if self.current != ch:
            return False
        self._read()
        return True

    def _read_digit(self) -> bool:
        if not _is_digit(self.current):
            return False
        self._read()
        return True

    def _skip_whitespace(self):
        while self.current in _WHITESPACE:
            self._read()

    def _expected(self, what: str) -> ParseError:
        if self.current is None:
            return self._error("Unexpected end of input")
        return self._error(f"Expected {what}")

    def _error(self, message: str) -> ParseError:
        return ParseError(message, self.index, self.line, self.index - self.line_start + 1)


def _is_digit(c: str | None) -> bool:
    return c is not None and "0" <= c <= "9"


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        line = data.count(b"\n", 0, e.start) + 1
        line_start = data.rfind(b"\n", 0, e.start) + 1
        raise ParseError("Invalid UTF-8 input", e.start, line, e.start - line_start + 1) from e
