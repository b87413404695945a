"""
Unit tests for per-row results (typed_csv.results).
"""

from __future__ import annotations

import pytest

from typed_csv.exceptions import (
    CellDecodeError,
    DecodeError,
    InsufficientColumnsError,
    RowDecodeError,
)
from typed_csv.results import DecodedRecord, DecodeFailure


class TestDecodeFailure:
    """Tests for DecodeFailure.from_error()."""

    def test_from_column_error(self):
        err = RowDecodeError.at_column(2, CellDecodeError("int", "x"))
        failure = DecodeFailure.from_error(7, err)
        assert (failure.row_index, failure.column_index) == (7, 2)
        assert failure.expected == "int"
        assert failure.text == "x"
        assert str(failure).startswith("row 7, column 2:")

    def test_from_row_level_error(self):
        failure = DecodeFailure.from_error(0, InsufficientColumnsError(3, 1, "tuple[int, int, int]"))
        assert failure.column_index is None
        assert failure.text is None
        assert str(failure).startswith("row 0: insufficient columns")

    def test_from_bare_cell_error(self):
        failure = DecodeFailure.from_error(1, CellDecodeError("bool", "maybe"))
        assert failure.column_index is None
        assert failure.expected == "bool"


class TestDecodedRecord:
    """Tests for DecodedRecord."""

    def test_ok_record_with_none_value(self):
        rec = DecodedRecord(row_index=0, value=None)
        assert rec.ok
        assert rec.unwrap() is None

    def test_failed_record_unwrap_raises(self):
        failure = DecodeFailure(3, 1, "int", "x", "cannot decode 'x' as int")
        rec = DecodedRecord(row_index=3, failure=failure)
        assert not rec.ok
        with pytest.raises(DecodeError, match="row 3, column 1"):
            rec.unwrap()
