"""
Primitive cell decoders for typed-csv.

Each decoder accepts exactly one canonical textual form and rejects
everything else with a ``CellDecodeError`` naming the expected type and
the offending text. No whitespace trimming happens here: ``" 1"`` is not
an integer. Python's own constructors are more lenient than that
(``int(" 1_0 ")`` is 10), so every numeric decoder checks the text
against a pattern before converting it.

Every primitive also knows how to ``encode()`` a value back into its
canonical text, and ``decode(encode(v)) == v`` holds for every value the
decoder can produce (finite floats only).
"""

from __future__ import annotations

import math
import re
import uuid
from abc import abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

from typed_csv.config import BooleanConfig
from typed_csv.decoders.base import CellDecoder
from typed_csv.exceptions import CellDecodeError

T = TypeVar("T")

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_DATETIME_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}[T ][0-9]{2}:[0-9]{2}.*")


class PrimitiveCellDecoder(CellDecoder[T]):
    """A cell decoder that can also encode values to canonical text."""

    @abstractmethod
    def encode(self, value: T) -> str:
        """Return the canonical text of *value*."""

    def _fail(self, cell: str, reason: str = "") -> CellDecodeError:
        return CellDecodeError(self.name, cell, reason)


class StringDecoder(PrimitiveCellDecoder[str]):
    """Identity decoder. Always succeeds, including on the empty cell."""

    name = "str"

    def decode(self, cell: str) -> str:
        return cell

    def encode(self, value: str) -> str:
        return value


class IntDecoder(PrimitiveCellDecoder[int]):
    name = "int"

    def decode(self, cell: str) -> int:
        if not _INT_PATTERN.fullmatch(cell):
            raise self._fail(cell, "expected an optionally signed run of digits")
        try:
            return int(cell)
        except ValueError as exc:
            # e.g. more digits than sys.get_int_max_str_digits() allows
            raise self._fail(cell, str(exc)) from exc

    def encode(self, value: int) -> str:
        return str(value)


class FloatDecoder(PrimitiveCellDecoder[float]):
    """Decimal or scientific notation. ``nan`` and ``inf`` are rejected."""

    name = "float"

    def decode(self, cell: str) -> float:
        if not _DECIMAL_PATTERN.fullmatch(cell):
            raise self._fail(cell, "expected a decimal or scientific literal")
        value = float(cell)
        if math.isinf(value):
            raise self._fail(cell, "value out of range")
        return value

    def encode(self, value: float) -> str:
        return repr(value)


class DecimalDecoder(PrimitiveCellDecoder[Decimal]):
    name = "Decimal"

    def decode(self, cell: str) -> Decimal:
        if not _DECIMAL_PATTERN.fullmatch(cell):
            raise self._fail(cell, "expected a decimal or scientific literal")
        try:
            return Decimal(cell)
        except InvalidOperation as exc:
            raise self._fail(cell, str(exc)) from exc

    def encode(self, value: Decimal) -> str:
        return str(value)


class BoolDecoder(PrimitiveCellDecoder[bool]):
    """Decodes booleans from a fixed vocabulary.

    The first token of each vocabulary is the canonical form used by
    ``encode()``.
    """

    name = "bool"

    def __init__(self, booleans: BooleanConfig | None = None) -> None:
        booleans = booleans or BooleanConfig()
        self._case_sensitive = booleans.case_sensitive
        self._true = {self._fold(v) for v in booleans.true_values}
        self._false = {self._fold(v) for v in booleans.false_values}
        self._canonical_true = booleans.true_values[0]
        self._canonical_false = booleans.false_values[0]

    def _fold(self, text: str) -> str:
        return text if self._case_sensitive else text.lower()

    def decode(self, cell: str) -> bool:
        key = self._fold(cell)
        if key in self._true:
            return True
        if key in self._false:
            return False
        raise self._fail(
            cell,
            f"expected one of {sorted(self._true)} or {sorted(self._false)}",
        )

    def encode(self, value: bool) -> str:
        return self._canonical_true if value else self._canonical_false


class UUIDDecoder(PrimitiveCellDecoder[uuid.UUID]):
    """Canonical hyphenated 8-4-4-4-12 form only."""

    name = "UUID"

    def decode(self, cell: str) -> uuid.UUID:
        if not _UUID_PATTERN.fullmatch(cell):
            raise self._fail(cell, "expected a hyphenated 8-4-4-4-12 hex identifier")
        return uuid.UUID(cell)

    def encode(self, value: uuid.UUID) -> str:
        return str(value)


class DateDecoder(PrimitiveCellDecoder[date]):
    name = "date"

    def decode(self, cell: str) -> date:
        if not _DATE_PATTERN.fullmatch(cell):
            raise self._fail(cell, "expected YYYY-MM-DD")
        try:
            return date.fromisoformat(cell)
        except ValueError as exc:
            raise self._fail(cell, str(exc)) from exc

    def encode(self, value: date) -> str:
        return value.isoformat()


class DateTimeDecoder(PrimitiveCellDecoder[datetime]):
    """ISO 8601 timestamps, ``T`` or space separated, optional offset."""

    name = "datetime"

    def decode(self, cell: str) -> datetime:
        if not _DATETIME_PATTERN.fullmatch(cell):
            raise self._fail(cell, "expected an ISO 8601 timestamp")
        try:
            return datetime.fromisoformat(cell)
        except ValueError as exc:
            raise self._fail(cell, str(exc)) from exc

    def encode(self, value: datetime) -> str:
        return value.isoformat()


def primitive_decoders(booleans: BooleanConfig | None = None) -> dict[Any, PrimitiveCellDecoder]:
    """Build the built-in primitive decoders keyed by the type they produce.

    Args:
        booleans: Vocabulary for the ``bool`` decoder. Defaults to
            ``true`` / ``false``.
    """
    return {
        str: StringDecoder(),
        int: IntDecoder(),
        float: FloatDecoder(),
        Decimal: DecimalDecoder(),
        bool: BoolDecoder(booleans),
        uuid.UUID: UUIDDecoder(),
        date: DateDecoder(),
        datetime: DateTimeDecoder(),
    }
