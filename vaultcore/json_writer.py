"""Serializes a ``JsonValue`` tree back to text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .json_value import (
    JsonArray,
    JsonBoolean,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)

_NEEDS_ESCAPE = re.compile('[\x00-\x1f"\\\\\u2028\u2029\ud800-\udfff]')
_SHORT = {'"': '\\"', "\\": "\\\\", "\b": "\\b", "\f": "\\f", "\n": "\\n", "\r": "\\r", "\t": "\\t"}


@dataclass(frozen=True)
class Style:
    """Output layout. ``indent=None`` means compact."""

    indent: str | None = None
    newline: str = "\n"

    @classmethod
    def spaces(cls, n: int = 2) -> "Style":
        return cls(indent=" " * n)

    @classmethod
    def tabs(cls) -> "Style":
        return cls(indent="\t")


COMPACT = Style()


def write(value: JsonValue, style: Style = COMPACT) -> str:
    out: list[str] = []
    _write(value, style, 0, out)
    return "".join(out)


def escape(s: str) -> str:
    return _NEEDS_ESCAPE.sub(_escape_char, s)


def _escape_char(m: re.Match) -> str:
    c = m.group()
    return _SHORT.get(c) or f"\\u{ord(c):04x}"


def _write(value: JsonValue, style: Style, depth: int, out: list[str]):
    if isinstance(value, JsonObject):
        _write_object(value, style, depth, out)
    elif isinstance(value, JsonArray):
        _write_array(value, style, depth, out)
    elif isinstance(value, JsonString):
        out.append(f'"{escape(value.value)}"')
    elif isinstance(value, JsonNumber):
        out.append(value.text)
    elif isinstance(value, JsonBoolean):
        out.append("true" if value.value else "false")
    elif isinstance(value, JsonNull):
        out.append("null")
    else:
        raise TypeError(f"cannot write {type(value).__name__}")


def _write_array(array: JsonArray, style: Style, depth: int, out: list[str]):
    if array.is_empty():
        out.append("[]")
        return
    out.append("[")
    for i, item in enumerate(array):
        if i:
            out.append(",")
        _break(style, depth + 1, out)
        _write(item, style, depth + 1, out)
    _break(style, depth, out)
    out.append("]")


def _write_object(obj: JsonObject, style: Style, depth: int, out: list[str]):
    if obj.is_empty():
        out.append("{}")
        return
    out.append("{")
    separator = ":" if style.indent is None else ": "
    for i, member in enumerate(obj):
        if i:
            out.append(",")
        _break(style, depth + 1, out)
        out.append(f'"{escape(member.name)}"{separator}')
        _write(member.value, style, depth + 1, out)
    _break(style, depth, out)
    out.append("}")


def _break(style: Style, depth: int, out: list[str]):
    if style.indent is not None:
        out.append(style.newline + style.indent * depth)
