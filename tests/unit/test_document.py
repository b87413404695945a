"""
Unit tests for document-level decoding (typed_csv.document).

Tests naive splitting, per-row failure isolation, composition errors
before any row, lazy iteration and parallel order preservation.
"""

from __future__ import annotations

import pytest

from typed_csv.config import DecodeConfig, DialectConfig, ExecutionConfig
from typed_csv.decoders.cells import IntDecoder
from typed_csv.decoders.combinators import collection
from typed_csv.document import (
    decode,
    decode_file,
    decode_row,
    decode_values,
    iter_decode,
    split_document,
)
from typed_csv.exceptions import DecoderNotFoundError, DocumentDecodeError
from typed_csv.registry import get_default_registry


class Unregistered:
    pass


class TestSplitDocument:
    """Tests for split_document()."""

    def test_basic(self):
        assert split_document("1,a\n2,b") == [["1", "a"], ["2", "b"]]

    def test_empty_text_has_no_rows(self):
        assert split_document("") == []

    def test_single_trailing_newline_ignored(self):
        assert split_document("1,a\n2,b\n") == [["1", "a"], ["2", "b"]]

    def test_blank_line_is_empty_row(self):
        assert split_document("1\n\n2") == [["1"], [], ["2"]]

    def test_skip_blank_lines(self):
        dialect = DialectConfig(skip_blank_lines=True)
        assert split_document("1\n\n2\n", dialect) == [["1"], ["2"]]

    def test_empty_cells_kept(self):
        assert split_document(",a,") == [["", "a", ""]]

    def test_quotes_not_interpreted(self):
        assert split_document('"a,b",c') == [['"a', 'b"', "c"]]

    def test_custom_separators(self):
        dialect = DialectConfig(row_separator=";", cell_separator="|")
        assert split_document("1|2;3|4", dialect) == [["1", "2"], ["3", "4"]]

    def test_uneven_row_lengths(self):
        assert split_document("1\n1,2,3") == [["1"], ["1", "2", "3"]]


class TestDecode:
    """Tests for decode()."""

    def test_failures_do_not_abort_document(self):
        records = decode("1,a\nx,b\n3,c", tuple[int, str])
        assert [r.ok for r in records] == [True, False, True]
        assert records[0].value == (1, "a")
        assert records[2].value == (3, "c")

    def test_failure_context(self):
        records = decode("1,a\nx,b", tuple[int, str])
        failure = records[1].failure
        assert failure.row_index == 1
        assert failure.column_index == 0
        assert failure.expected == "int"
        assert failure.text == "x"
        assert records[1].raw == ("x", "b")

    def test_insufficient_columns_failure(self):
        failure = decode("1", tuple[int, str])[0].failure
        assert failure.column_index is None
        assert "insufficient columns" in failure.message

    def test_empty_document(self):
        assert decode("", tuple[int, str]) == []

    def test_composition_error_before_any_row(self):
        with pytest.raises(DecoderNotFoundError):
            decode("", Unregistered)

    def test_accepts_row_decoder_target(self):
        records = decode("1,2", collection(IntDecoder()))
        assert records[0].value == [1, 2]

    def test_blank_line_as_empty_collection(self):
        records = decode("1,2\n\n3", list[int])
        assert [r.value for r in records] == [[1, 2], [], [3]]

    def test_row_index_counts_skipped_lines(self):
        config = DecodeConfig(dialect=DialectConfig(skip_blank_lines=True))
        records = decode("1\n\nx", list[int], config=config)
        assert [r.row_index for r in records] == [0, 2]
        assert records[1].failure.row_index == 2

    def test_custom_boolean_vocabulary_from_config(self):
        config = DecodeConfig.model_validate({"booleans": {"true_values": ["Y"], "false_values": ["N"]}})
        assert decode_values("Y,N", list[bool], config=config) == [[True, False]]

    def test_explicit_registry_wins_over_config_booleans(self):
        config = DecodeConfig.model_validate({"booleans": {"true_values": ["Y"], "false_values": ["N"]}})
        records = decode("Y", list[bool], registry=get_default_registry(), config=config)
        assert not records[0].ok

    def test_oversized_int_fails_only_its_row(self):
        text = "1,a\n" + "9" * 5000 + ",b\n3,c"
        records = decode(text, tuple[int, str])
        assert [r.ok for r in records] == [True, False, True]
        assert records[1].failure.column_index == 0

    def test_oversized_int_falls_back_to_next_alternative(self):
        big = "9" * 5000
        assert decode_values(big, tuple[int | str]) == [(big,)]

    def test_parallel_preserves_order_and_collects_failures(self):
        lines = [str(i) if i % 7 else "bad" for i in range(200)]
        text = "\n".join(lines)
        records = decode(text, list[int], workers=8)
        assert [r.row_index for r in records] == list(range(200))
        failed = [r.row_index for r in records if not r.ok]
        assert failed == [i for i in range(200) if i % 7 == 0]
        assert records[1].value == [1]
        assert records[199].value == [199]

    def test_workers_from_config(self):
        config = DecodeConfig(execution=ExecutionConfig(workers=4))
        records = decode("1\n2\n3", list[int], config=config)
        assert [r.value for r in records] == [[1], [2], [3]]


class TestDecodeValues:
    """Tests for decode_values()."""

    def test_all_ok(self):
        assert decode_values("1,2\n3", list[int]) == [[1, 2], [3]]

    def test_collects_all_failures(self):
        with pytest.raises(DocumentDecodeError) as exc_info:
            decode_values("x\n1\ny", list[int])
        failures = exc_info.value.failures
        assert [f.row_index for f in failures] == [0, 2]
        assert "2 row(s) failed" in str(exc_info.value)


class TestIterDecode:
    """Tests for iter_decode()."""

    def test_lazy_in_order(self):
        it = iter_decode("1\n2", list[int])
        assert next(it).value == [1]
        assert next(it).value == [2]
        with pytest.raises(StopIteration):
            next(it)

    def test_composition_error_raised_at_call_time(self):
        with pytest.raises(DecoderNotFoundError):
            iter_decode("1", Unregistered)


class TestDecodeRow:
    """Tests for decode_row()."""

    def test_success(self):
        rec = decode_row(collection(IntDecoder()), 5, ["1"])
        assert rec.ok and rec.row_index == 5 and rec.value == [1]

    def test_failure(self):
        rec = decode_row(collection(IntDecoder()), 5, ["z"])
        assert not rec.ok
        assert rec.failure.row_index == 5
        assert rec.failure.column_index == 0


class TestDecodeFile:
    """Tests for decode_file()."""

    def test_reads_file_with_bom(self, tmp_path):
        f = tmp_path / "people.csv"
        f.write_text("1,Nicolas\n2,Jessica\n", encoding="utf-8-sig")
        records = decode_file(f, tuple[int, str])
        assert [r.value for r in records] == [(1, "Nicolas"), (2, "Jessica")]

    def test_crlf_line_endings(self, tmp_path):
        f = tmp_path / "numbers.csv"
        f.write_bytes(b"1,2\r\n3,4\r\n")
        assert [r.value for r in decode_file(f, list[int])] == [[1, 2], [3, 4]]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            decode_file(tmp_path / "nope.csv", list[int])
