"""Tests for the CSV table writer."""

import io

import pytest

from fkfixer.types import ColumnDescriptor, SQLColumnType
from fkfixer.writer import (
    COLUMN_TYPE_LABELS,
    TableWriter,
    coltype_to_str,
    format_line,
)


@pytest.fixture
def out():
    return io.StringIO()


# =============================================================================
# Type Labels
# =============================================================================


class TestColumnTypeLabels:
    """Every column type has a printable label."""

    @pytest.mark.parametrize("coltype", list(SQLColumnType))
    def test_label_is_member_name(self, coltype):
        assert coltype_to_str(coltype) == coltype.name
        assert coltype_to_str(coltype)

    def test_mapping_is_complete(self):
        assert set(COLUMN_TYPE_LABELS) == set(SQLColumnType)

    def test_some_labels(self):
        assert coltype_to_str(SQLColumnType.DECIMAL) == "DECIMAL"
        assert coltype_to_str(SQLColumnType.NULL) == "NULL"
        assert coltype_to_str(SQLColumnType.TINY_BLOB) == "TINY_BLOB"
        assert coltype_to_str(SQLColumnType.VAR_STRING) == "VAR_STRING"
        assert coltype_to_str(SQLColumnType.GEOMETRY) == "GEOMETRY"


# =============================================================================
# Header
# =============================================================================


class TestDumpColumns:
    """Tests for TableWriter.dump_columns."""

    @pytest.mark.parametrize("coltype", list(SQLColumnType))
    def test_single_column(self, out, coltype):
        TableWriter(out).dump_columns([ColumnDescriptor(name="name", type=coltype)])
        assert out.getvalue() == f"name, \n{coltype_to_str(coltype)}, \n"

    def test_several_columns(self, out):
        TableWriter(out).dump_columns([
            ColumnDescriptor(name="id", type=SQLColumnType.LONG),
            ColumnDescriptor(name="label", type=SQLColumnType.VAR_STRING),
        ])
        assert out.getvalue() == "id, label, \nLONG, VAR_STRING, \n"

    def test_no_columns(self, out):
        TableWriter(out).dump_columns([])
        assert out.getvalue() == "\n\n"


# =============================================================================
# Rows
# =============================================================================


class TestDumpRow:
    """Tests for TableWriter.dump_row."""

    def test_binary_row(self, out):
        columns = [ColumnDescriptor(name="flags", type=SQLColumnType.BIT)]
        TableWriter(out).dump_row([b"\x00\x01"], columns)
        assert out.getvalue() == "<Binary data>, \n"

    def test_null_row(self, out):
        columns = [ColumnDescriptor(name="flags", type=SQLColumnType.BIT)]
        TableWriter(out).dump_row([None], columns)
        assert out.getvalue() == "NULL, \n"

    def test_mixed_row(self, out):
        columns = [
            ColumnDescriptor(name="id", type=SQLColumnType.LONG),
            ColumnDescriptor(name="label", type=SQLColumnType.VAR_STRING),
            ColumnDescriptor(name="active", type=SQLColumnType.BIT, length=1),
            ColumnDescriptor(name="parent", type=SQLColumnType.LONG),
        ]
        TableWriter(out).dump_row([3, "three", b"\x01", None], columns)
        assert out.getvalue() == "3, 'three', true, NULL, \n"

    def test_rows_counted(self, out):
        columns = [ColumnDescriptor(name="id", type=SQLColumnType.LONG)]
        writer = TableWriter(out)
        writer.dump_rows([(1,), (2,), (3,)], columns)
        assert writer.rows_written == 3
        assert out.getvalue() == "1, \n2, \n3, \n"

    def test_flush_lines(self):
        class Sink(io.StringIO):
            flushes = 0

            def flush(self):
                self.flushes += 1
                super().flush()

        sink = Sink()
        columns = [ColumnDescriptor(name="id", type=SQLColumnType.LONG)]
        writer = TableWriter(sink, flush_lines=True)
        writer.dump_columns(columns)
        writer.dump_row((1,), columns)
        assert sink.flushes == 3


def test_format_line():
    assert format_line(["a", "b"]) == "a, b, \n"
    assert format_line([]) == "\n"
