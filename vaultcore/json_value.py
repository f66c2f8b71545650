"""In-memory JSON value tree.

Every node is one of six variants: ``JsonNull``, ``JsonBoolean``,
``JsonNumber``, ``JsonString``, ``JsonArray`` and ``JsonObject``.  The
``as_*`` accessors downcast and raise ``TypeMismatch`` on the wrong variant,
they never coerce.

Objects keep every member in insertion order, duplicates included.  Lookup
returns the last member with a given name; serialization writes all of them.
Equality is structural and order-sensitive for both arrays and objects.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterator, NamedTuple

from .errors import FormatError, TypeMismatch

_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_INTEGER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)")

INT_MIN, INT_MAX = -(2**31), 2**31 - 1
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1
FLOAT_MAX = 3.4028234663852886e38


def _joined(s: str) -> str:
    """Merge adjacent surrogate halves into one code point; lone ones stay."""
    return s.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


class JsonValue:
    kind = "value"

    def is_object(self) -> bool: return False
    def is_array(self) -> bool: return False
    def is_string(self) -> bool: return False
    def is_number(self) -> bool: return False
    def is_boolean(self) -> bool: return False
    def is_null(self) -> bool: return False
    def is_true(self) -> bool: return False
    def is_false(self) -> bool: return False

    def as_object(self) -> JsonObject: raise self._mismatch("object")
    def as_array(self) -> JsonArray: raise self._mismatch("array")
    def as_string(self) -> str: raise self._mismatch("string")
    def as_boolean(self) -> bool: raise self._mismatch("boolean")
    def as_int(self) -> int: raise self._mismatch("number")
    def as_long(self) -> int: raise self._mismatch("number")
    def as_float(self) -> float: raise self._mismatch("number")
    def as_double(self) -> float: raise self._mismatch("number")

    def _mismatch(self, wanted: str) -> TypeMismatch:
        return TypeMismatch(f"expected {wanted}, got {self.kind}: {self}")

    def to_python(self) -> Any:
        raise NotImplementedError

    def to_string(self, style=None) -> str:
        from .json_writer import COMPACT, write
        return write(self, style or COMPACT)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string()!r})"


class JsonNull(JsonValue):
    kind = "null"

    def is_null(self) -> bool: return True
    def to_python(self) -> None: return None

    def __eq__(self, other):
        return isinstance(other, JsonNull)

    def __hash__(self):
        return hash(None)


class JsonBoolean(JsonValue):
    kind = "boolean"

    def __init__(self, value: bool):
        self.value = bool(value)

    def is_boolean(self) -> bool: return True
    def is_true(self) -> bool: return self.value
    def is_false(self) -> bool: return not self.value
    def as_boolean(self) -> bool: return self.value
    def to_python(self) -> bool: return self.value

    def __eq__(self, other):
        return isinstance(other, JsonBoolean) and other.value == self.value

    def __hash__(self):
        return hash(self.value)


class JsonNumber(JsonValue):
    """A number kept as its textual representation.

    Conversions to concrete numeric types happen on demand and raise
    ``FormatError`` when the text does not fit the requested type.
    """

    kind = "number"

    def __init__(self, value: str | int | float):
        if isinstance(value, bool):
            raise FormatError(f"not a number: {value!r}")
        if isinstance(value, int):
            text = str(value)
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise FormatError(f"JSON cannot represent {value!r}")
            text = repr(value)
        elif isinstance(value, str):
            if not _NUMBER_RE.fullmatch(value):
                raise FormatError(f"not a JSON number: {value!r}")
            text = value
        else:
            raise FormatError(f"not a number: {value!r}")
        self.text = text

    def is_number(self) -> bool: return True

    def _integer(self, low: int, high: int, name: str) -> int:
        if not _INTEGER_RE.fullmatch(self.text):
            raise FormatError(f"{self.text} is not an integer")
        n = int(self.text)
        if not low <= n <= high:
            raise FormatError(f"{self.text} is out of range for {name}")
        return n

    def as_int(self) -> int:
        return self._integer(INT_MIN, INT_MAX, "int")

    def as_long(self) -> int:
        return self._integer(LONG_MIN, LONG_MAX, "long")

    def as_double(self) -> float:
        d = float(self.text)
        if math.isinf(d):
            raise FormatError(f"{self.text} is out of range for double")
        return d

    def as_float(self) -> float:
        d = float(self.text)
        if abs(d) > FLOAT_MAX:
            raise FormatError(f"{self.text} is out of range for float")
        return d

    def to_python(self) -> int | float:
        if _INTEGER_RE.fullmatch(self.text):
            return int(self.text)
        return float(self.text)

    def __eq__(self, other):
        return isinstance(other, JsonNumber) and other.text == self.text

    def __hash__(self):
        return hash(self.text)


class JsonString(JsonValue):
    kind = "string"

    def __init__(self, value: str):
        if not isinstance(value, str):
            raise TypeError(f"JsonString needs a str, got {type(value).__name__}")
        self.value = _joined(value)

    def is_string(self) -> bool: return True
    def as_string(self) -> str: return self.value
    def to_python(self) -> str: return self.value

    def __eq__(self, other):
        return isinstance(other, JsonString) and other.value == self.value

    def __hash__(self):
        return hash(self.value)


class JsonArray(JsonValue):
    kind = "array"
    __hash__ = None

    def __init__(self, values=()):
        self._values: list[JsonValue] = [value_of(v) for v in values]

    def is_array(self) -> bool: return True
    def as_array(self) -> JsonArray: return self

    def add(self, value) -> JsonArray:
        self._values.append(value_of(value))
        return self

    def insert(self, index: int, value) -> JsonArray:
        self._values.insert(index, value_of(value))
        return self

    def set(self, index: int, value) -> JsonArray:
        self._values[index] = value_of(value)
        return self

    def remove(self, index: int) -> JsonArray:
        del self._values[index]
        return self

    def get(self, index: int) -> JsonValue:
        return self._values[index]

    def size(self) -> int:
        return len(self._values)

    def is_empty(self) -> bool:
        return not self._values

    def values(self) -> list[JsonValue]:
        return list(self._values)

    def to_python(self) -> list:
        return [v.to_python() for v in self._values]

    def __len__(self):
        return len(self._values)

    def __iter__(self) -> Iterator[JsonValue]:
        return iter(self._values)

    def __getitem__(self, index: int) -> JsonValue:
        return self._values[index]

    def __eq__(self, other):
        return isinstance(other, JsonArray) and other._values == self._values


class Member(NamedTuple):
    name: str
    value: JsonValue


class JsonObject(JsonValue):
    kind = "object"
    __hash__ = None

    def __init__(self, members=None):
        self._members: list[Member] = []
        items = members.items() if isinstance(members, dict) else (members or ())
        for name, value in items:
            self.add(name, value)

    def is_object(self) -> bool: return True
    def as_object(self) -> JsonObject: return self

    def _index_of(self, name: str) -> int:
        if isinstance(name, str):
            name = _joined(name)
        for i in range(len(self._members) - 1, -1, -1):
            if self._members[i].name == name:
                return i
        return -1

    def add(self, name: str, value) -> JsonObject:
        """Append a member, even when ``name`` is already present."""
        if not isinstance(name, str):
            raise TypeError(f"member name must be a str, got {type(name).__name__}")
        self._members.append(Member(_joined(name), value_of(value)))
        return self

    def set(self, name: str, value) -> JsonObject:
        """Replace the last member called ``name``, or append a new one."""
        i = self._index_of(name)
        if i < 0:
            return self.add(name, value)
        self._members[i] = Member(self._members[i].name, value_of(value))
        return self

    def remove(self, name: str) -> JsonObject:
        i = self._index_of(name)
        if i >= 0:
            del self._members[i]
        return self

    def get(self, name: str) -> JsonValue | None:
        i = self._index_of(name)
        return self._members[i].value if i >= 0 else None

    def get_string(self, name: str, default: str | None = None) -> str | None:
        v = self.get(name)
        return default if v is None else v.as_string()

    def get_int(self, name: str, default: int | None = None) -> int | None:
        v = self.get(name)
        return default if v is None else v.as_int()

    def get_long(self, name: str, default: int | None = None) -> int | None:
        v = self.get(name)
        return default if v is None else v.as_long()

    def get_double(self, name: str, default: float | None = None) -> float | None:
        v = self.get(name)
        return default if v is None else v.as_double()

    def get_boolean(self, name: str, default: bool | None = None) -> bool | None:
        v = self.get(name)
        return default if v is None else v.as_boolean()

    def names(self) -> list[str]:
        return [m.name for m in self._members]

    def size(self) -> int:
        return len(self._members)

    def is_empty(self) -> bool:
        return not self._members

    def to_python(self) -> dict:
        return {m.name: m.value.to_python() for m in self._members}

    def __contains__(self, name) -> bool:
        return self._index_of(name) >= 0

    def __len__(self):
        return len(self._members)

    def __iter__(self) -> Iterator[Member]:
        return iter(self._members)

    def __getitem__(self, name: str) -> JsonValue:
        v = self.get(name)
        if v is None:
            raise KeyError(name)
        return v

    def __eq__(self, other):
        return isinstance(other, JsonObject) and other._members == self._members


NULL = JsonNull()
TRUE = JsonBoolean(True)
FALSE = JsonBoolean(False)


def value_of(obj: Any) -> JsonValue:
    """Convert a native Python object (or an existing value) into a tree."""
    if isinstance(obj, JsonValue):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, bool):
        return TRUE if obj else FALSE
    if isinstance(obj, (int, float)):
        return JsonNumber(obj)
    if isinstance(obj, str):
        return JsonString(obj)
    if isinstance(obj, dict):
        return JsonObject(obj)
    if isinstance(obj, (list, tuple)):
        return JsonArray(obj)
    raise TypeError(f"cannot convert {type(obj).__name__} to JSON")
