"""
Row decoders for typed-csv.

- ``TupleRowDecoder``: fixed arity, field ``i`` read from cell ``i``.
- ``RecordRowDecoder``: same, but the decoded fields are passed to a
  constructor by name (dataclasses, NamedTuples, plain classes).
- ``CollectionRowDecoder``: any arity, every cell decoded with one
  cell decoder.

All three are fail-fast *within* a row: the first failing cell aborts
the row with a ``RowDecodeError`` attributed to that column. Nothing
partial is returned.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Sequence, TypeVar

from typed_csv.decoders.base import CellDecoder, RowDecoder
from typed_csv.exceptions import CellDecodeError, InsufficientColumnsError, RowDecodeError

T = TypeVar("T")


def _decode_fields(
    decoders: Sequence[CellDecoder[Any]], row: Sequence[str], expected: str
) -> list[Any]:
    """Decode the first ``len(decoders)`` cells of *row*, one decoder per cell.

    Extra trailing cells are ignored.
    """
    if len(row) < len(decoders):
        raise InsufficientColumnsError(len(decoders), len(row), expected)
    values: list[Any] = []
    for column, decoder in enumerate(decoders):
        try:
            values.append(decoder.decode(row[column]))
        except CellDecodeError as exc:
            raise RowDecodeError.at_column(column, exc) from exc
    return values


class TupleRowDecoder(RowDecoder[tuple]):
    """Decodes a row into a tuple of independently typed fields."""

    def __init__(self, decoders: Sequence[CellDecoder[Any]]) -> None:
        self.decoders = tuple(decoders)
        self.name = f"tuple[{', '.join(d.name for d in self.decoders)}]"

    @property
    def arity(self) -> int:
        return len(self.decoders)

    def decode(self, row: Sequence[str]) -> tuple:
        return tuple(_decode_fields(self.decoders, row, self.name))


class RecordRowDecoder(RowDecoder[T]):
    """Decodes a row into a record built from an explicit field list.

    Fields are declared as ``(field_name, cell_decoder)`` pairs in column
    order. The record is created with ``constructor(**fields)``, so any
    dataclass, NamedTuple or pydantic model with matching names works.
    """

    def __init__(
        self,
        constructor: Callable[..., T],
        fields: Sequence[tuple[str, CellDecoder[Any]]],
        name: str | None = None,
    ) -> None:
        names = [field_name for field_name, _ in fields]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate field names in record declaration: {names}")
        self.constructor = constructor
        self.field_names = tuple(names)
        self.decoders = tuple(decoder for _, decoder in fields)
        self.name = name or getattr(constructor, "__name__", repr(constructor))

    def decode(self, row: Sequence[str]) -> T:
        values = _decode_fields(self.decoders, row, self.name)
        try:
            return self.constructor(**dict(zip(self.field_names, values)))
        except (ValueError, TypeError) as exc:
            # Constructor-level validation (e.g. __post_init__ checks).
            raise RowDecodeError(
                f"cannot construct {self.name}: {exc}", expected=self.name
            ) from exc


class CollectionRowDecoder(RowDecoder[Any], Generic[T]):
    """Decodes every cell of a row with the same cell decoder.

    An empty row yields an empty collection. Order is preserved.
    """

    def __init__(
        self,
        inner: CellDecoder[T],
        factory: Callable[[list[T]], Any] = list,
    ) -> None:
        self.inner = inner
        self.factory = factory
        self.name = f"{getattr(factory, '__name__', 'collection')}[{inner.name}]"

    def decode(self, row: Sequence[str]) -> Any:
        values: list[T] = []
        for column, cell in enumerate(row):
            try:
                values.append(self.inner.decode(cell))
            except CellDecodeError as exc:
                raise RowDecodeError.at_column(column, exc) from exc
        return self.factory(values)
