"""
Decoder protocols for typed-csv.

Two capabilities exist, mirroring the two granularities of a CSV document:

- ``CellDecoder[T]``: one raw text cell -> ``T``.
- ``RowDecoder[T]``: an ordered sequence of raw cells -> ``T``.

Both are immutable and stateless. A decoder either returns a value or
raises a ``DecodeError`` subclass; it never returns a placeholder for
text it could not understand.

Every decoder carries a ``name`` describing the type it produces. The
name is only used in error messages and logs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, Sequence, TypeVar

from typed_csv.exceptions import CellDecodeError

T = TypeVar("T")
U = TypeVar("U")

# Exceptions raised by plain conversion functions that mean "bad text".
_CONVERSION_ERRORS = (ValueError, TypeError, ArithmeticError)


class CellDecoder(ABC, Generic[T]):
    """Converts a single raw text cell into a ``T``.

    Subclasses must implement ``decode()`` and set ``name``.
    """

    name: str = "?"

    @abstractmethod
    def decode(self, cell: str) -> T:
        """Decode one cell.

        Raises:
            CellDecodeError: If *cell* is not valid text for this type.
        """

    def map(self, fn: Callable[[T], U], name: str | None = None) -> CellDecoder[U]:
        """Derive a decoder that applies *fn* to every successfully decoded value.

        Conversion errors raised by *fn* are reported as ``CellDecodeError``.
        """
        return MappedCellDecoder(self, fn, name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class RowDecoder(ABC, Generic[T]):
    """Converts an ordered sequence of raw cells into a ``T``."""

    name: str = "?"

    @abstractmethod
    def decode(self, row: Sequence[str]) -> T:
        """Decode one row.

        Raises:
            RowDecodeError: If any cell fails, or the row has the wrong shape.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class FunctionCellDecoder(CellDecoder[T]):
    """Adapts a plain ``str -> T`` callable into a ``CellDecoder``.

    Useful for registering decoders for custom types::

        registry.register_cell(Path, FunctionCellDecoder("Path", Path))
    """

    def __init__(self, name: str, fn: Callable[[str], T]) -> None:
        self.name = name
        self._fn = fn

    def decode(self, cell: str) -> T:
        try:
            return self._fn(cell)
        except CellDecodeError:
            raise
        except _CONVERSION_ERRORS as exc:
            raise CellDecodeError(self.name, cell, str(exc)) from exc


class MappedCellDecoder(CellDecoder[U]):
    """A decoder whose output is post-processed by a function."""

    def __init__(
        self, inner: CellDecoder[T], fn: Callable[[T], U], name: str | None = None
    ) -> None:
        self.inner = inner
        self._fn = fn
        self.name = name or inner.name

    def decode(self, cell: str) -> U:
        value = self.inner.decode(cell)
        try:
            return self._fn(value)
        except _CONVERSION_ERRORS as exc:
            raise CellDecodeError(self.name, cell, str(exc)) from exc
