"""
Combinators: derive new decoders from existing ones.

None of these functions knows about concrete types. Each takes decoder
arguments and returns a derived decoder, which is what lets the registry
chain them ("given a decoder for ``A`` I can build one for
``Optional[A]``").

- ``optional(inner)``: ``""`` -> ``None``, anything else -> inner.
- ``either(left, right)``: ``Left`` / ``Right``, left-biased.
- ``union(*alternatives)``: first success wins, value unwrapped.
- ``collection(inner)``: every cell of a row with *inner*.
- ``tuple_of(*decoders)``: fixed-arity tuple row.
- ``record(cls, fields)``: fixed-arity record row.

Order dependence of ``either`` / ``union``: alternatives are tried in
argument order, so when two of them accept the same text the earlier one
wins. ``either(int_decoder, str_decoder)`` turns ``"1"`` into
``Left(1)``, never ``Right("1")``.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, TypeVar

from typed_csv.decoders.base import CellDecoder
from typed_csv.decoders.rows import CollectionRowDecoder, RecordRowDecoder, TupleRowDecoder
from typed_csv.either import Either, Left, Right
from typed_csv.exceptions import CellDecodeError, UnionDecodeError

A = TypeVar("A")
B = TypeVar("B")
T = TypeVar("T")


class OptionalDecoder(CellDecoder[Any]):
    """Empty cell -> ``None``; otherwise delegates to *inner* unchanged."""

    def __init__(self, inner: CellDecoder[Any]) -> None:
        self.inner = inner
        self.name = f"Optional[{inner.name}]"

    def decode(self, cell: str) -> Any:
        if cell == "":
            return None
        return self.inner.decode(cell)


class EitherDecoder(CellDecoder[Either[Any, Any]]):
    """Tries *left*, then *right*; wraps the first success."""

    def __init__(self, left: CellDecoder[Any], right: CellDecoder[Any]) -> None:
        self.left = left
        self.right = right
        self.name = f"Either[{left.name}, {right.name}]"

    def decode(self, cell: str) -> Either[Any, Any]:
        try:
            return Left(self.left.decode(cell))
        except CellDecodeError as left_error:
            try:
                return Right(self.right.decode(cell))
            except CellDecodeError as right_error:
                raise UnionDecodeError(self.name, cell, [left_error, right_error]) from right_error


class UnionDecoder(CellDecoder[Any]):
    """Tries each alternative in order and returns the first success."""

    def __init__(self, alternatives: Sequence[CellDecoder[Any]]) -> None:
        if len(alternatives) < 2:
            raise ValueError("a union needs at least two alternatives")
        self.alternatives = tuple(alternatives)
        self.name = " | ".join(d.name for d in self.alternatives)

    def decode(self, cell: str) -> Any:
        errors: list[CellDecodeError] = []
        for decoder in self.alternatives:
            try:
                return decoder.decode(cell)
            except CellDecodeError as exc:
                errors.append(exc)
        raise UnionDecodeError(self.name, cell, errors)


# ---------------------------------------------------------------------------
# Public combinator functions
# ---------------------------------------------------------------------------

def optional(inner: CellDecoder[A]) -> CellDecoder[A | None]:
    """Derive a decoder where the empty cell means "absent" (``None``).

    The inner decoder is never called on ``""``, so ``optional(int)`` and
    ``optional(str)`` both give ``None`` for an empty cell.
    """
    if isinstance(inner, OptionalDecoder):
        return inner
    return OptionalDecoder(inner)


def either(left: CellDecoder[A], right: CellDecoder[B]) -> CellDecoder[Either[A, B]]:
    """Derive a left-biased ``Either`` decoder from two decoders."""
    return EitherDecoder(left, right)


def union(*alternatives: CellDecoder[Any]) -> CellDecoder[Any]:
    """Derive a decoder returning the first alternative that succeeds."""
    return UnionDecoder(alternatives)


def collection(
    inner: CellDecoder[T], factory: Callable[[list[T]], Any] = list
) -> CollectionRowDecoder[T]:
    """Derive a row decoder that decodes every cell with *inner*.

    Args:
        inner: Decoder applied to each cell, left to right.
        factory: Builds the result from the ordered list of values
            (``list`` by default; ``tuple`` for variable-length tuples).
    """
    return CollectionRowDecoder(inner, factory)


def tuple_of(*decoders: CellDecoder[Any]) -> TupleRowDecoder:
    """Derive a fixed-arity tuple row decoder, one cell decoder per column."""
    return TupleRowDecoder(decoders)


def record(
    constructor: Callable[..., T],
    fields: Sequence[tuple[str, CellDecoder[Any]]],
    name: str | None = None,
) -> RecordRowDecoder[T]:
    """Derive a row decoder for a record with an explicitly declared field list.

    Example::

        person = record(Person, [("id", int_decoder), ("name", str_decoder)])
    """
    return RecordRowDecoder(constructor, fields, name)
