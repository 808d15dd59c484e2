"""Type definitions for fkfixer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Sequence


class SQLColumnType(IntEnum):
    """Column type codes as reported by the MySQL protocol."""

    DECIMAL = 0
    TINY = 1
    SHORT = 2
    LONG = 3
    FLOAT = 4
    DOUBLE = 5
    NULL = 6
    TIMESTAMP = 7
    LONGLONG = 8
    INT24 = 9
    DATE = 10
    TIME = 11
    DATETIME = 12
    YEAR = 13
    NEWDATE = 14
    VARCHAR = 15
    BIT = 16
    TIMESTAMP2 = 17
    DATETIME2 = 18
    TIME2 = 19
    TYPED_ARRAY = 20
    UNKNOWN = 243
    JSON = 245
    NEWDECIMAL = 246
    ENUM = 247
    SET = 248
    TINY_BLOB = 249
    MEDIUM_BLOB = 250
    LONG_BLOB = 251
    BLOB = 252
    VAR_STRING = 253
    STRING = 254
    GEOMETRY = 255

    @classmethod
    def from_code(cls, code: int | None) -> "SQLColumnType":
        """Convert a driver type code, reading unknown codes as UNKNOWN."""
        if code is None:
            return cls.UNKNOWN
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


# BLOB is left out: MySQL reports TEXT columns with the BLOB code.
BINARY_TYPES = frozenset({
    SQLColumnType.BIT,
    SQLColumnType.TINY_BLOB,
    SQLColumnType.MEDIUM_BLOB,
    SQLColumnType.LONG_BLOB,
})


@dataclass(frozen=True)
class ColumnDescriptor:
    """A result set column: name, declared type and declared length."""

    name: str
    type: SQLColumnType
    length: int = 0

    @classmethod
    def from_description(cls, description: Sequence[Any]) -> "ColumnDescriptor":
        """Build from one DB-API ``cursor.description`` entry.

        The entry is ``(name, type_code, display_size, internal_size, ...)``;
        PyMySQL reports the declared column length as ``internal_size``.
        """
        name, type_code = description[0], description[1]
        length = description[3] if len(description) > 3 else None
        return cls(
            name=str(name),
            type=SQLColumnType.from_code(type_code),
            length=int(length or 0),
        )

    @property
    def is_bit_flag(self) -> bool:
        """Whether the column is a BIT(1), read as a boolean."""
        return self.type == SQLColumnType.BIT and self.length == 1

    @property
    def is_binary(self) -> bool:
        """Whether values of the column are raw bytes never printed inline."""
        return self.type in BINARY_TYPES
