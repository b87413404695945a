"""
End-to-end decoding scenarios through the public ``typed_csv`` API.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pytest

import typed_csv
from typed_csv import Either, FunctionCellDecoder, Left, Right

pytestmark = pytest.mark.integration

PEOPLE_CSV = "1,Nicolas\n2,Jessica\n3,Matt"
PEOPLE_MISSING_ID_CSV = "1,Nicolas\n,Jessica\n3,Matt"
NUMBERS_CSV = "1,2,3\n4,5,6"


@dataclass(frozen=True)
class Person:
    id: int
    name: str


@dataclass(frozen=True)
class Shipment:
    id: int
    weight: Either[float, str]
    tags: Optional[str]


class TestSampleDocuments:
    """The three canonical sample documents."""

    def test_int_string_rows(self):
        assert typed_csv.decode_values(PEOPLE_CSV, tuple[int, str]) == [
            (1, "Nicolas"),
            (2, "Jessica"),
            (3, "Matt"),
        ]

    def test_optional_int_string_rows(self):
        assert typed_csv.decode_values(PEOPLE_MISSING_ID_CSV, tuple[Optional[int], str]) == [
            (1, "Nicolas"),
            (None, "Jessica"),
            (3, "Matt"),
        ]

    def test_int_list_rows(self):
        assert typed_csv.decode_values(NUMBERS_CSV, list[int]) == [[1, 2, 3], [4, 5, 6]]

    def test_required_int_rejects_missing_id(self):
        records = typed_csv.decode(PEOPLE_MISSING_ID_CSV, tuple[int, str])
        assert [r.ok for r in records] == [True, False, True]
        assert records[1].failure.column_index == 0
        assert records[1].failure.text == ""


class TestCustomTypes:
    """Extending a copy of the default registry with user types."""

    def test_record_rows(self):
        registry = typed_csv.get_default_registry().copy()
        registry.register_record(Person)
        values = typed_csv.decode_values(PEOPLE_CSV, Person, registry=registry)
        assert values == [Person(1, "Nicolas"), Person(2, "Jessica"), Person(3, "Matt")]

    def test_record_with_either_and_optional_fields(self):
        registry = typed_csv.get_default_registry().copy()
        registry.register_record(Shipment)
        records = typed_csv.decode(
            "1,2.5,fragile\n2,unknown,\n3,4",
            Shipment,
            registry=registry,
        )
        assert records[0].value == Shipment(1, Left(2.5), "fragile")
        assert records[1].value == Shipment(2, Right("unknown"), None)
        assert not records[2].ok
        assert "insufficient columns" in records[2].failure.message

    def test_custom_cell_decoder_inside_collection(self):
        registry = typed_csv.get_default_registry().copy()
        registry.register_cell(
            complex, FunctionCellDecoder("complex", lambda s: complex(s.replace("i", "j")))
        )
        values = typed_csv.decode_values("1+2i,3i", list[complex], registry=registry)
        assert values == [[complex(1, 2), complex(0, 3)]]

    def test_unknown_type_fails_before_decoding(self):
        with pytest.raises(typed_csv.DecoderNotFoundError):
            typed_csv.decode(PEOPLE_CSV, Person)


class TestMixedFailures:
    """Per-row failures are reported independently."""

    def test_every_bad_row_reported(self):
        text = "1,a\nx,b\n3\n4,d\n,e"
        records = typed_csv.decode(text, tuple[int, str], workers=3)
        summary = [(r.row_index, r.ok, r.failure.column_index if r.failure else None) for r in records]
        assert summary == [
            (0, True, None),
            (1, False, 0),
            (2, False, None),
            (3, True, None),
            (4, False, 0),
        ]
