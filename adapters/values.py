from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional, Tuple, Union

SQLValue = Union[None, bool, int, float, str, bytes]


class ValueKind(str, Enum):
    NULL = "null"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    BOOL = "bool"


def normalize_value(value: Any) -> SQLValue:
    """Map a driver value onto one of the :class:`ValueKind` shapes."""
    if value is None or isinstance(value, (bool, int, float, str, bytes)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return str(value)


def kind_of(value: Any) -> ValueKind:
    if value is None:
        return ValueKind.NULL
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, bytes):
        return ValueKind.BYTES
    raise TypeError(f"Unsupported SQL value type: {type(value).__name__}")


_TRUE_STRINGS = {"1", "true", "t", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "f", "no", "n", "off", ""}


class Row(dict):
    """One result row keyed by column name.

    Values are normalized on construction. The ``get_*`` accessors convert
    leniently and fall back to ``default`` for NULL or missing columns.
    """

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, Any]]) -> "Row":
        return cls((column, normalize_value(value)) for column, value in pairs)

    def kind(self, column: str) -> ValueKind:
        return kind_of(self[column])

    def get_int(self, column: str, default: Optional[int] = 0) -> Optional[int]:
        value = self.get(column)
        if value is None:
            return default
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            value = value.strip()
            try:
                return int(value)
            except ValueError:
                return int(float(value))
        return int(value)

    def get_float(self, column: str, default: Optional[float] = 0.0) -> Optional[float]:
        value = self.get(column)
        if value is None:
            return default
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return float(value)

    def get_str(self, column: str, default: Optional[str] = "") -> Optional[str]:
        value = self.get(column)
        if value is None:
            return default
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return str(value)

    def get_bytes(self, column: str, default: Optional[bytes] = b"") -> Optional[bytes]:
        value = self.get(column)
        if value is None:
            return default
        if isinstance(value, bytes):
            return value
        return str(value).encode("utf-8")

    def get_bool(self, column: str, default: Optional[bool] = False) -> Optional[bool]:
        value = self.get(column)
        if value is None:
            return default
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise ValueError(f"Column {column!r} is not a boolean: {value!r}")
        return bool(value)
