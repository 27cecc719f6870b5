"""Context values: strings, numbers, lists and null, with ordering and display rules."""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class NumberKind(Enum):
    """How a number is stored."""

    UNSIGNED = "unsigned"
    SIGNED = "signed"
    FLOAT = "float"


def _wrap_i64(value: int) -> int:
    """Reinterpret an unsigned 64-bit integer as a signed one."""
    return value - 2**64 if value > _I64_MAX else value


def _three_way(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _float_cmp(a: float, b: float) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    if a == b:
        return 0
    # At least one side is NaN: NaN sorts last.
    if not math.isnan(a):
        return -1
    if not math.isnan(b):
        return 1
    return 0


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True, eq=False)
class Number:
    """A number that remembers whether it is unsigned, signed or floating point."""

    kind: NumberKind
    value: int | float

    def __post_init__(self) -> None:
        if self.kind is NumberKind.FLOAT:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                raise TypeError(f"expected a float, got {self.value!r}")
            object.__setattr__(self, "value", float(self.value))
            return
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"expected an integer, got {self.value!r}")
        if self.kind is NumberKind.UNSIGNED and not 0 <= self.value <= _U64_MAX:
            raise ValueError(f"{self.value} does not fit an unsigned 64-bit integer")
        if self.kind is NumberKind.SIGNED and not _I64_MIN <= self.value <= _I64_MAX:
            raise ValueError(f"{self.value} does not fit a signed 64-bit integer")

    def __str__(self) -> str:
        if self.kind is NumberKind.FLOAT:
            return _format_float(self.value)
        return str(self.value)

    def __repr__(self) -> str:
        return f"Number({self})"

    __hash__ = None  # type: ignore[assignment]

    def _pair(self, other: Number) -> tuple[Any, Any, bool]:
        """Bring both sides to a common representation; the flag marks float comparison."""
        a_kind, b_kind = self.kind, other.kind
        a, b = self.value, other.value
        if a_kind is NumberKind.FLOAT or b_kind is NumberKind.FLOAT:
            return float(a), float(b), True
        if a_kind is b_kind:
            return a, b, False
        if a_kind is NumberKind.UNSIGNED:
            return _wrap_i64(a), b, False
        return a, _wrap_i64(b), False

    def _cmp(self, other: Number) -> int:
        a, b, is_float = self._pair(other)
        return _float_cmp(a, b) if is_float else _three_way(a, b)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Number):
            return NotImplemented
        a, b, _ = self._pair(other)
        return a == b

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Number):
            return NotImplemented
        return self._cmp(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Number):
            return NotImplemented
        return self._cmp(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Number):
            return NotImplemented
        return self._cmp(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Number):
            return NotImplemented
        return self._cmp(other) >= 0


class ValueKind(Enum):
    """The variants of a context value, in their sort order."""

    NULL = 0
    STRING = 1
    NUMBER = 2
    LIST = 3


def _debug_string(text: str) -> str:
    parts = ['"']
    for ch in text:
        if ch == '"':
            parts.append('\\"')
        elif ch == "\\":
            parts.append("\\\\")
        elif ch == "\n":
            parts.append("\\n")
        elif ch == "\r":
            parts.append("\\r")
        elif ch == "\t":
            parts.append("\\t")
        elif ch == "\0":
            parts.append("\\0")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    parts.append('"')
    return "".join(parts)


def _integer_number(value: int) -> Number | None:
    if 0 <= value <= _U64_MAX:
        return Number(NumberKind.UNSIGNED, value)
    if _I64_MIN <= value < 0:
        return Number(NumberKind.SIGNED, value)
    return None


@dataclass(frozen=True, eq=False)
class Value:
    """A context value."""

    kind: ValueKind
    data: Any = field(default=None)

    def __post_init__(self) -> None:
        if self.kind is ValueKind.NULL:
            if self.data is not None:
                raise ValueError("a null value carries no data")
        elif self.kind is ValueKind.STRING:
            if not isinstance(self.data, str):
                raise TypeError(f"expected a string, got {self.data!r}")
        elif self.kind is ValueKind.NUMBER:
            if not isinstance(self.data, Number):
                raise TypeError(f"expected a Number, got {self.data!r}")
        else:
            items = tuple(self.data or ())
            if not all(isinstance(item, Value) for item in items):
                raise TypeError("list items must be Value instances")
            object.__setattr__(self, "data", items)

    @classmethod
    def from_python(cls, obj: Any) -> Value:
        """Build a value from a plain Python object."""
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls(ValueKind.NULL)
        if isinstance(obj, Number):
            return cls(ValueKind.NUMBER, obj)
        if isinstance(obj, bool):
            return cls(ValueKind.NUMBER, Number(NumberKind.UNSIGNED, int(obj)))
        if isinstance(obj, int):
            number = _integer_number(obj)
            if number is None:
                raise ValueError(f"{obj} does not fit a 64-bit integer")
            return cls(ValueKind.NUMBER, number)
        if isinstance(obj, float):
            return cls(ValueKind.NUMBER, Number(NumberKind.FLOAT, obj))
        if isinstance(obj, str):
            return cls(ValueKind.STRING, obj)
        if isinstance(obj, (bytes, bytearray)):
            try:
                return cls(ValueKind.STRING, bytes(obj).decode("utf-8"))
            except UnicodeDecodeError:
                return cls(ValueKind.STRING, "unknown")
        if isinstance(obj, os.PathLike):
            path = os.fspath(obj)
            if isinstance(path, bytes):
                return cls.from_python(path)
            return cls(ValueKind.STRING, path)
        if isinstance(obj, (list, tuple)):
            return cls(ValueKind.LIST, tuple(cls.from_python(item) for item in obj))
        raise TypeError(f"cannot convert {type(obj).__name__} to a context value")

    @classmethod
    def from_json(cls, data: Any) -> Value:
        """Convert decoded JSON; objects become lists of their values, bad items are dropped."""
        if data is None:
            return cls(ValueKind.NULL)
        if isinstance(data, bool):
            return cls(ValueKind.NUMBER, Number(NumberKind.UNSIGNED, int(data)))
        if isinstance(data, int):
            number = _integer_number(data)
            if number is None:
                number = Number(NumberKind.FLOAT, float(data))
            return cls(ValueKind.NUMBER, number)
        if isinstance(data, float):
            return cls(ValueKind.NUMBER, Number(NumberKind.FLOAT, data))
        if isinstance(data, str):
            return cls(ValueKind.STRING, data)
        if isinstance(data, (list, tuple)):
            return cls(ValueKind.LIST, tuple(cls._converted(data)))
        if isinstance(data, Mapping):
            return cls(ValueKind.LIST, tuple(cls._converted(data.values())))
        raise TypeError(f"cannot convert {type(data).__name__} from JSON")

    @classmethod
    def _converted(cls, items: Any) -> list[Value]:
        converted = []
        for item in items:
            try:
                converted.append(cls.from_json(item))
            except (TypeError, ValueError):
                continue
        return converted

    @classmethod
    def deserialize(cls, data: Any) -> Value:
        """Strictly read a value from parsed data; booleans and mappings are rejected."""
        if data is None:
            return cls(ValueKind.NULL)
        if isinstance(data, bool):
            raise ValueError("invalid type: boolean, expected any context value")
        if isinstance(data, int):
            number = _integer_number(data)
            if number is None:
                number = Number(NumberKind.FLOAT, float(data))
            return cls(ValueKind.NUMBER, number)
        if isinstance(data, float):
            return cls(ValueKind.NUMBER, Number(NumberKind.FLOAT, data))
        if isinstance(data, str):
            return cls(ValueKind.STRING, data)
        if isinstance(data, (list, tuple)):
            return cls(ValueKind.LIST, tuple(cls.deserialize(item) for item in data))
        if isinstance(data, Mapping):
            raise ValueError("invalid type: map, expected any context value")
        raise ValueError(
            f"invalid type: {type(data).__name__}, expected any context value"
        )

    def to_json(self) -> Any:
        """Return the value as plain JSON-compatible Python data."""
        if self.kind is ValueKind.NULL:
            return None
        if self.kind is ValueKind.STRING:
            return self.data
        if self.kind is ValueKind.NUMBER:
            return self.data.value
        return [item.to_json() for item in self.data]

    def __str__(self) -> str:
        if self.kind is ValueKind.NULL:
            return "null"
        if self.kind is ValueKind.LIST:
            return ",".join(str(item) for item in self.data)
        return str(self.data)

    def __repr__(self) -> str:
        if self.kind is ValueKind.NULL:
            return "Null"
        if self.kind is ValueKind.STRING:
            return f"String({_debug_string(self.data)})"
        if self.kind is ValueKind.NUMBER:
            return f"Number({self.data})"
        return "List [" + ", ".join(repr(item) for item in self.data) + "]"

    __hash__ = None  # type: ignore[assignment]

    def _cmp(self, other: Value) -> int:
        if self.kind is not other.kind:
            return _three_way(self.kind.value, other.kind.value)
        if self.kind is ValueKind.NULL:
            return 0
        if self.kind is ValueKind.STRING:
            return _three_way(self.data, other.data)
        if self.kind is ValueKind.NUMBER:
            return self.data._cmp(other.data)
        for left, right in zip(self.data, other.data):
            result = left._cmp(right)
            if result:
                return result
        return _three_way(len(self.data), len(other.data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self.kind is not other.kind:
            return False
        if self.kind is ValueKind.LIST:
            return len(self.data) == len(other.data) and all(
                left == right for left, right in zip(self.data, other.data)
            )
        return self.data == other.data

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._cmp(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._cmp(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._cmp(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._cmp(other) >= 0