"""
Per-row results of document decoding.

A document decode never raises for bad rows. Each input row yields one
``DecodedRecord`` holding either the decoded value or a ``DecodeFailure``
that says where and why decoding stopped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from typed_csv.exceptions import CellDecodeError, DecodeError, RowDecodeError

T = TypeVar("T")


@dataclass(frozen=True)
class DecodeFailure:
    """Why one row could not be decoded.

    Attributes:
        row_index: Zero-based index of the row in the document.
        column_index: Zero-based index of the failing cell, or ``None``
            when the row as a whole was rejected (e.g. too few columns).
        expected: Name of the type that was being decoded.
        text: The offending raw cell text, when a single cell is to blame.
        message: Full human-readable description.
    """
    row_index: int
    column_index: int | None
    expected: str
    text: str | None
    message: str

    @classmethod
    def from_error(cls, row_index: int, error: DecodeError) -> DecodeFailure:
        """Build a failure from the error a row decoder raised."""
        if isinstance(error, RowDecodeError):
            return cls(row_index, error.column, error.expected, error.text, str(error))
        if isinstance(error, CellDecodeError):
            return cls(row_index, None, error.expected, error.text, str(error))
        return cls(row_index, None, "", None, str(error))

    def __str__(self) -> str:
        where = f"row {self.row_index}"
        if self.column_index is not None:
            where += f", column {self.column_index}"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class DecodedRecord(Generic[T]):
    """The result of decoding one row.

    Exactly one of ``value`` / ``failure`` is meaningful: ``failure`` is
    ``None`` on success. ``value`` may itself legitimately be ``None``
    (e.g. an optional single-cell record), so test ``ok`` rather than
    the value.
    """
    row_index: int
    value: T | None = None
    failure: DecodeFailure | None = None
    raw: tuple[str, ...] = field(default=(), repr=False)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        """Return the decoded value, or raise the failure as a ``DecodeError``."""
        if self.failure is not None:
            raise DecodeError(str(self.failure))
        return self.value  # type: ignore[return-value]
