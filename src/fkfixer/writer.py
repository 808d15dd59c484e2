"""Table data writer, CSV format.

Every line is a list of fields each followed by ``", "`` (the last one too),
then ``"\\n"``. A table starts with two header lines: column names, then
column type labels.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence, TextIO

from fkfixer.codec import value_to_string
from fkfixer.types import ColumnDescriptor, SQLColumnType

SEPARATOR = ", "
LINE_TERMINATOR = "\n"

COLUMN_TYPE_LABELS: dict[SQLColumnType, str] = {
    SQLColumnType.DECIMAL: "DECIMAL",
    SQLColumnType.TINY: "TINY",
    SQLColumnType.SHORT: "SHORT",
    SQLColumnType.LONG: "LONG",
    SQLColumnType.FLOAT: "FLOAT",
    SQLColumnType.DOUBLE: "DOUBLE",
    SQLColumnType.NULL: "NULL",
    SQLColumnType.TIMESTAMP: "TIMESTAMP",
    SQLColumnType.LONGLONG: "LONGLONG",
    SQLColumnType.INT24: "INT24",
    SQLColumnType.DATE: "DATE",
    SQLColumnType.TIME: "TIME",
    SQLColumnType.DATETIME: "DATETIME",
    SQLColumnType.YEAR: "YEAR",
    SQLColumnType.NEWDATE: "NEWDATE",
    SQLColumnType.VARCHAR: "VARCHAR",
    SQLColumnType.BIT: "BIT",
    SQLColumnType.TIMESTAMP2: "TIMESTAMP2",
    SQLColumnType.DATETIME2: "DATETIME2",
    SQLColumnType.TIME2: "TIME2",
    SQLColumnType.TYPED_ARRAY: "TYPED_ARRAY",
    SQLColumnType.UNKNOWN: "UNKNOWN",
    SQLColumnType.JSON: "JSON",
    SQLColumnType.NEWDECIMAL: "NEWDECIMAL",
    SQLColumnType.ENUM: "ENUM",
    SQLColumnType.SET: "SET",
    SQLColumnType.TINY_BLOB: "TINY_BLOB",
    SQLColumnType.MEDIUM_BLOB: "MEDIUM_BLOB",
    SQLColumnType.LONG_BLOB: "LONG_BLOB",
    SQLColumnType.BLOB: "BLOB",
    SQLColumnType.VAR_STRING: "VAR_STRING",
    SQLColumnType.STRING: "STRING",
    SQLColumnType.GEOMETRY: "GEOMETRY",
}


def coltype_to_str(coltype: SQLColumnType) -> str:
    """Return a printable column type."""
    return COLUMN_TYPE_LABELS[coltype]


def format_line(fields: Iterable[str]) -> str:
    return "".join(f"{field}{SEPARATOR}" for field in fields) + LINE_TERMINATOR


class TableWriter:
    """Writes column headers and rows of result sets to a text sink.

    Args:
        out: Open text stream (file or standard output).
        flush_lines: Flush after every line, for unbuffered console output.
    """

    def __init__(self, out: TextIO, flush_lines: bool = False) -> None:
        self._out = out
        self._flush_lines = flush_lines
        self.rows_written = 0

    def _write(self, line: str) -> None:
        self._out.write(line)
        if self._flush_lines:
            self._out.flush()

    def dump_columns(self, columns: Sequence[ColumnDescriptor]) -> None:
        self._write(format_line(col.name for col in columns))
        self._write(format_line(coltype_to_str(col.type) for col in columns))

    def dump_row(self, row: Sequence[Any], columns: Sequence[ColumnDescriptor]) -> None:
        self._write(format_line(
            value_to_string(value, column) for value, column in zip(row, columns)
        ))
        self.rows_written += 1

    def dump_rows(self, rows: Iterable[Sequence[Any]], columns: Sequence[ColumnDescriptor]) -> None:
        for row in rows:
            self.dump_row(row, columns)
