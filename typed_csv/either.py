"""
Tagged disjoint-union values produced by the ``either`` combinator.

``Either[A, B]`` is used both as a type key for registry lookup
(``registry.resolve_cell(Either[int, str])``) and as the common base of
the two runtime variants ``Left`` and ``Right``. Plain ``A | B`` unions
are also supported by the registry, but they return the unwrapped value
and therefore lose which alternative matched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

L = TypeVar("L")
R = TypeVar("R")


class Either(Generic[L, R]):
    """Base class of ``Left`` and ``Right``."""

    __slots__ = ()

    @property
    def is_left(self) -> bool:
        return isinstance(self, Left)

    @property
    def is_right(self) -> bool:
        return isinstance(self, Right)


@dataclass(frozen=True)
class Left(Either[L, R]):
    """The first alternative matched."""

    value: L


@dataclass(frozen=True)
class Right(Either[L, R]):
    """The first alternative failed and the second one matched."""

    value: R
