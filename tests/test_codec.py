"""Tests for cell classification and value_to_string."""

import datetime
from decimal import Decimal

import pytest

from fkfixer.codec import (
    BINARY_PLACEHOLDER,
    BinaryCell,
    BitFlagCell,
    NullCell,
    ScalarCell,
    classify,
    value_to_string,
)
from fkfixer.types import BINARY_TYPES, ColumnDescriptor, SQLColumnType


def column(coltype, length=0):
    return ColumnDescriptor(name="col", type=coltype, length=length)


# =============================================================================
# NULL
# =============================================================================


class TestNull:
    """Absent values render as NULL whatever the column."""

    @pytest.mark.parametrize("coltype", list(SQLColumnType))
    def test_none_is_null(self, coltype):
        assert value_to_string(None, column(coltype)) == "NULL"

    def test_none_on_bit_flag(self):
        assert value_to_string(None, column(SQLColumnType.BIT, 1)) == "NULL"

    def test_classify(self):
        assert classify(None, column(SQLColumnType.LONG)) == NullCell()


# =============================================================================
# BIT(1)
# =============================================================================


class TestBitFlag:
    """BIT(1) columns read as booleans."""

    def test_one_is_true(self):
        assert value_to_string(b"\x01", column(SQLColumnType.BIT, 1)) == "true"

    def test_zero_is_false(self):
        assert value_to_string(b"\x00", column(SQLColumnType.BIT, 1)) == "false"

    def test_other_bytes_are_false(self):
        col = column(SQLColumnType.BIT, 1)
        assert value_to_string(b"\x02", col) == "false"
        assert value_to_string(b"\x01\x01", col) == "false"
        assert value_to_string(b"", col) == "false"

    def test_integer_values(self):
        col = column(SQLColumnType.BIT, 1)
        assert value_to_string(1, col) == "true"
        assert value_to_string(0, col) == "false"

    def test_classify(self):
        assert classify(b"\x01", column(SQLColumnType.BIT, 1)) == BitFlagCell(b"\x01")


# =============================================================================
# Binary
# =============================================================================


class TestBinary:
    """Blobs and multi-bit BIT columns are never printed inline."""

    @pytest.mark.parametrize("coltype", [
        SQLColumnType.BIT,
        SQLColumnType.TINY_BLOB,
        SQLColumnType.MEDIUM_BLOB,
        SQLColumnType.LONG_BLOB,
    ])
    @pytest.mark.parametrize("value", [b"\x00\xff", b"\x01", "text", 7])
    def test_binary_placeholder(self, coltype, value):
        assert value_to_string(value, column(coltype)) == BINARY_PLACEHOLDER
        assert BINARY_PLACEHOLDER == "<Binary data>"

    def test_multi_byte_bit(self):
        assert value_to_string(b"\x00\x01", column(SQLColumnType.BIT, 16)) == "<Binary data>"

    def test_classify(self):
        assert classify(b"\x00", column(SQLColumnType.LONG_BLOB)) == BinaryCell()

    def test_blob_code_is_not_binary(self):
        # TEXT columns come back with the BLOB type code.
        assert SQLColumnType.BLOB not in BINARY_TYPES
        assert value_to_string("notes", column(SQLColumnType.BLOB)) == "'notes'"

    def test_blob_payload_is_hex_literal(self):
        assert value_to_string(b"\x89PNG\xff\x00", column(SQLColumnType.BLOB)) == "_binary X'89504e47ff00'"


# =============================================================================
# Scalars
# =============================================================================


class TestScalar:
    """Everything else is rendered as a SQL literal."""

    def test_varchar(self):
        assert value_to_string("value", column(SQLColumnType.VARCHAR)) == "'value'"

    def test_quotes_escaped(self):
        assert value_to_string("it's", column(SQLColumnType.VAR_STRING)) == "'it\\'s'"

    def test_integer_bare(self):
        assert value_to_string(42, column(SQLColumnType.LONG)) == "42"

    def test_float_bare(self):
        assert value_to_string(1.5, column(SQLColumnType.DOUBLE)) == "1.5"

    def test_decimal(self):
        assert value_to_string(Decimal("10.25"), column(SQLColumnType.NEWDECIMAL)) == "10.25"

    def test_datetime_quoted(self):
        value = datetime.datetime(2024, 1, 15, 10, 30, 0)
        assert value_to_string(value, column(SQLColumnType.DATETIME)) == "'2024-01-15 10:30:00'"

    def test_date_quoted(self):
        assert value_to_string(datetime.date(2024, 1, 15), column(SQLColumnType.DATE)) == "'2024-01-15'"

    def test_classify(self):
        assert classify("x", column(SQLColumnType.STRING)) == ScalarCell("x")


# =============================================================================
# Totality
# =============================================================================


NON_BINARY_TYPES = [t for t in SQLColumnType if t not in BINARY_TYPES]


class TestTotality:
    """value_to_string answers for every column type."""

    @pytest.mark.parametrize("coltype", NON_BINARY_TYPES)
    def test_scalar_types(self, coltype):
        assert value_to_string("v", column(coltype)) == "'v'"

    @pytest.mark.parametrize("coltype", sorted(BINARY_TYPES))
    @pytest.mark.parametrize("length", [2, 8, 64])
    def test_binary_types(self, coltype, length):
        assert value_to_string(b"\x01", column(coltype, length)) == "<Binary data>"
