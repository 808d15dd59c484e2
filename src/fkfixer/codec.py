"""Text projection of result set cells for CSV output.

A raw cell value is classified into one of four cell kinds according to the
declared type and length of its column, then rendered:

    NullCell     -> NULL
    BitFlagCell  -> true / false         (BIT(1) columns)
    BinaryCell   -> <Binary data>        (other BIT, TINY/MEDIUM/LONG BLOB)
    ScalarCell   -> SQL literal          ('text', 42, '2024-01-15 10:30:00')
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from pymysql.converters import escape_item

from fkfixer.types import ColumnDescriptor

BINARY_PLACEHOLDER = "<Binary data>"
NULL_LITERAL = "NULL"

_CHARSET = "utf8mb4"


@dataclass(frozen=True)
class NullCell:
    """An absent value."""

    def render(self) -> str:
        return NULL_LITERAL


@dataclass(frozen=True)
class BitFlagCell:
    """A BIT(1) value, read as a boolean."""

    value: Any

    def render(self) -> str:
        return "true" if _is_set_bit(self.value) else "false"


@dataclass(frozen=True)
class BinaryCell:
    """Raw bytes, never printed inline."""

    def render(self) -> str:
        return BINARY_PLACEHOLDER


@dataclass(frozen=True)
class ScalarCell:
    """Any other value, rendered as a SQL literal."""

    value: Any

    def render(self) -> str:
        return sql_literal(self.value)


Cell = Union[NullCell, BitFlagCell, BinaryCell, ScalarCell]


def _is_set_bit(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray)):
        return len(value) == 1 and value[0] == 1
    # Drivers without a bytes BIT representation hand back integers.
    return isinstance(value, int) and value == 1


def sql_literal(value: Any) -> str:
    """Render a value with SQL literal quoting rules.

    Strings are single-quoted and escaped, numbers are bare, temporal values
    are quoted in MySQL's format.
    """
    if isinstance(value, float):
        return repr(value)
    return escape_item(value, _CHARSET)


def classify(value: Any, column: ColumnDescriptor) -> Cell:
    """Tag a raw value with the cell kind its column calls for."""
    if value is None:
        return NullCell()
    if column.is_bit_flag:
        return BitFlagCell(value)
    if column.is_binary:
        return BinaryCell()
    return ScalarCell(value)


def value_to_string(value: Any, column: ColumnDescriptor) -> str:
    """Cast a value to text according to its column type and length."""
    return classify(value, column).render()
