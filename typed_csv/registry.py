"""
Decoder registry for typed-csv.

Maps Python types to decoders and composes decoders for types that are
only reachable through derivation rules. Each registry holds:

- concrete cell decoders keyed by type (``int`` -> ``IntDecoder``),
- concrete row decoders keyed by type, including records registered with
  an explicit field list,
- derivation rules: "given decoders for the type arguments of ``F[...]``,
  I can build a decoder for ``F[...]``". Rules resolve their arguments
  through the same registry, so ``tuple[int | None, list[str]]`` is
  answered by chaining the tuple, optional and primitive entries.

Resolution contract (``resolve_cell`` / ``resolve_row``):

1. Concrete entries for the exact type are consulted first. One entry
   wins; two or more raise ``AmbiguousDecoderError``.
2. Otherwise every rule of the right kind is asked whether it matches.
   Exactly one must; none raises ``DecoderNotFoundError`` and several
   raise ``AmbiguousDecoderError``.

Resolution happens once, before any row is decoded; results are cached
per registry. A frozen registry rejects further registrations, which is
how the process-wide default registry stays read-only.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Literal, Sequence, Union

from typed_csv.config import BooleanConfig, DecodeConfig
from typed_csv.decoders.base import CellDecoder, RowDecoder
from typed_csv.decoders.cells import primitive_decoders
from typed_csv.decoders.combinators import collection, either, optional, record, tuple_of, union
from typed_csv.either import Either
from typed_csv.exceptions import (
    AmbiguousDecoderError,
    CompositionError,
    DecoderNotFoundError,
    RegistryFrozenError,
)

logger = logging.getLogger(__name__)

Kind = Literal["cell", "row"]

_NONE_TYPE = type(None)
_UNION_ORIGINS = (Union, types.UnionType)
_LIST_ORIGINS = (list, collections.abc.Sequence)


def type_name(tp: Any) -> str:
    """Short human-readable name for a type key (used in messages)."""
    if isinstance(tp, type) and not typing.get_args(tp):
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


def _ordered_key(tp: Any) -> Any:
    """Hashable key for *tp* that keeps union argument order.

    ``Union[int, str] == Union[str, int]`` in Python, so keying on the type
    itself would hand one union the other's left-biased decoder. Every
    union spelling (``Optional[int]``, ``int | None``) maps to the same key.
    """
    if isinstance(tp, (list, tuple)):
        return tuple(_ordered_key(a) for a in tp)
    args = typing.get_args(tp)
    if not args:
        return tp
    origin = typing.get_origin(tp)
    if origin in _UNION_ORIGINS:
        origin = Union
    return (origin, tuple(_ordered_key(a) for a in args))


@dataclass(frozen=True)
class DerivationRule:
    """Builds a decoder for a family of types from decoders of their arguments.

    Attributes:
        name: Identifier shown in ambiguity errors and logs.
        kind: ``"cell"`` or ``"row"`` -- which resolver consults the rule.
        matches: Predicate over the requested type.
        build: ``(registry, requested_type) -> decoder``. Calls back into
            the registry to resolve the type's arguments.
    """
    name: str
    kind: Kind
    matches: Callable[[Any], bool]
    build: Callable[["DecoderRegistry", Any], Any]


@dataclass(frozen=True)
class _Entry:
    """A concrete registration; ``build`` is deferred until resolution."""
    description: str
    build: Callable[["DecoderRegistry"], Any]


class DecoderRegistry:
    """Type-keyed store of cell decoders, row decoders and derivation rules."""

    def __init__(self) -> None:
        self._entries: dict[Kind, dict[Any, list[_Entry]]] = {"cell": {}, "row": {}}
        self._rules: list[DerivationRule] = []
        self._cache: dict[tuple[Kind, Any], Any] = {}
        self._frozen = False

    # -- Registration ---------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> DecoderRegistry:
        """Reject any further registration. Returns ``self``."""
        self._frozen = True
        return self

    def copy(self) -> DecoderRegistry:
        """Return an unfrozen registry with the same entries and rules."""
        clone = DecoderRegistry()
        for kind, entries in self._entries.items():
            clone._entries[kind] = {k: list(es) for k, es in entries.items()}
        clone._rules = list(self._rules)
        return clone

    def _check_writable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                "registry is frozen; use registry.copy() to extend it"
            )

    def _add(self, kind: Kind, tp: Any, entry: _Entry, replace: bool) -> None:
        self._check_writable()
        entries = self._entries[kind].setdefault(_ordered_key(tp), [])
        if replace:
            entries.clear()
        elif entries:
            logger.warning(
                "Second %s decoder registered for %s; resolving it will be ambiguous",
                kind, type_name(tp),
            )
        entries.append(entry)
        self._cache.clear()
        logger.debug("Registered %s decoder for %s: %s", kind, type_name(tp), entry.description)

    def register_cell(self, tp: Any, decoder: CellDecoder[Any], replace: bool = False) -> None:
        """Register a cell decoder for *tp*.

        Registering a second decoder for the same type without
        ``replace=True`` keeps both, and resolving *tp* then fails as
        ambiguous.
        """
        self._add("cell", tp, _Entry(repr(decoder), lambda _reg: decoder), replace)

    def register_row(self, tp: Any, decoder: RowDecoder[Any], replace: bool = False) -> None:
        """Register a row decoder for *tp*. Same ambiguity rules as cells."""
        self._add("row", tp, _Entry(repr(decoder), lambda _reg: decoder), replace)

    def register_record(
        self,
        cls: type,
        fields: Sequence[tuple[str, Any]] | None = None,
        replace: bool = False,
    ) -> None:
        """Register a row decoder for a record class from its declared fields.

        Args:
            cls: The record class, called as ``cls(**fields)``.
            fields: Ordered ``(field_name, field_type)`` pairs, one per
                column. When omitted, *cls* must be a dataclass or a
                NamedTuple and its declared fields are used in order.
            replace: Drop any existing row registration for *cls*.

        Field types are resolved lazily, when *cls* itself is resolved,
        so they may be registered after the record.
        """
        declared = list(fields) if fields is not None else _declared_fields(cls)
        if not declared:
            raise CompositionError(f"record {type_name(cls)} declares no fields", requested=cls)

        def build(registry: DecoderRegistry) -> RowDecoder[Any]:
            return record(
                cls,
                [(field_name, registry.resolve_cell(field_tp)) for field_name, field_tp in declared],
                name=type_name(cls),
            )

        description = f"record {type_name(cls)}({', '.join(n for n, _ in declared)})"
        self._add("row", cls, _Entry(description, build), replace)

    def register_rule(self, rule: DerivationRule) -> None:
        """Register a derivation rule."""
        self._check_writable()
        self._rules.append(rule)
        self._cache.clear()
        logger.debug("Registered %s rule %s", rule.kind, rule.name)

    # -- Resolution -----------------------------------------------------------

    def resolve_cell(self, tp: Any) -> CellDecoder[Any]:
        """Return the single cell decoder for *tp*.

        Raises:
            DecoderNotFoundError: No entry and no rule covers *tp*.
            AmbiguousDecoderError: More than one entry or rule covers *tp*.
        """
        return self._resolve("cell", tp)

    def resolve_row(self, tp: Any) -> RowDecoder[Any]:
        """Return the single row decoder for *tp*. See ``resolve_cell``."""
        return self._resolve("row", tp)

    def has_cell(self, tp: Any) -> bool:
        """True if ``resolve_cell(tp)`` would succeed."""
        try:
            self.resolve_cell(tp)
        except CompositionError:
            return False
        return True

    def has_row(self, tp: Any) -> bool:
        """True if ``resolve_row(tp)`` would succeed."""
        try:
            self.resolve_row(tp)
        except CompositionError:
            return False
        return True

    def _resolve(self, kind: Kind, tp: Any) -> Any:
        key = (kind, _ordered_key(tp))
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        entries = self._entries[kind].get(key[1], [])
        if len(entries) > 1:
            raise AmbiguousDecoderError(
                f"ambiguous {kind} decoder for {type_name(tp)}: "
                f"{len(entries)} registrations",
                requested=tp,
                candidates=[e.description for e in entries],
            )
        if entries:
            decoder = self._build(tp, lambda: entries[0].build(self))
        else:
            rules = [r for r in self._rules if r.kind == kind and r.matches(tp)]
            if not rules:
                raise DecoderNotFoundError(
                    f"no {kind} decoder available for {type_name(tp)}", requested=tp
                )
            if len(rules) > 1:
                raise AmbiguousDecoderError(
                    f"ambiguous {kind} decoder for {type_name(tp)}: "
                    f"rules {[r.name for r in rules]} all match",
                    requested=tp,
                    candidates=[r.name for r in rules],
                )
            rule = rules[0]
            decoder = self._build(tp, lambda: rule.build(self, tp))
            logger.debug("Derived %s decoder for %s via rule %s", kind, type_name(tp), rule.name)

        self._cache[key] = decoder
        return decoder

    def _build(self, tp: Any, build: Callable[[], Any]) -> Any:
        """Run a builder, naming *tp* in any composition error from its arguments."""
        try:
            return build()
        except AmbiguousDecoderError as exc:
            raise AmbiguousDecoderError(
                f"{exc} (required by {type_name(tp)})",
                requested=exc.requested,
                candidates=exc.candidates,
            ) from exc
        except CompositionError as exc:
            raise type(exc)(f"{exc} (required by {type_name(tp)})", requested=exc.requested) from exc


# ---------------------------------------------------------------------------
# Built-in derivation rules
# ---------------------------------------------------------------------------

def _union_args(tp: Any) -> tuple[Any, ...]:
    return typing.get_args(tp) if typing.get_origin(tp) in _UNION_ORIGINS else ()


def _is_optional(tp: Any) -> bool:
    return _NONE_TYPE in _union_args(tp)


def _build_optional(registry: DecoderRegistry, tp: Any) -> CellDecoder[Any]:
    present = tuple(a for a in _union_args(tp) if a is not _NONE_TYPE)
    inner_tp = present[0] if len(present) == 1 else Union[present]
    return optional(registry.resolve_cell(inner_tp))


def _is_plain_union(tp: Any) -> bool:
    args = _union_args(tp)
    return bool(args) and _NONE_TYPE not in args


def _build_union(registry: DecoderRegistry, tp: Any) -> CellDecoder[Any]:
    return union(*(registry.resolve_cell(a) for a in _union_args(tp)))


def _is_either(tp: Any) -> bool:
    return typing.get_origin(tp) is Either and len(typing.get_args(tp)) == 2


def _build_either(registry: DecoderRegistry, tp: Any) -> CellDecoder[Any]:
    left_tp, right_tp = typing.get_args(tp)
    return either(registry.resolve_cell(left_tp), registry.resolve_cell(right_tp))


def _is_fixed_tuple(tp: Any) -> bool:
    args = typing.get_args(tp)
    return typing.get_origin(tp) is tuple and bool(args) and Ellipsis not in args


def _build_fixed_tuple(registry: DecoderRegistry, tp: Any) -> RowDecoder[Any]:
    return tuple_of(*(registry.resolve_cell(a) for a in typing.get_args(tp)))


def _is_variadic(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is tuple:
        return len(args) == 2 and args[1] is Ellipsis
    return origin in _LIST_ORIGINS and len(args) == 1


def _build_variadic(registry: DecoderRegistry, tp: Any) -> RowDecoder[Any]:
    inner = registry.resolve_cell(typing.get_args(tp)[0])
    factory = tuple if typing.get_origin(tp) is tuple else list
    return collection(inner, factory)


BUILTIN_RULES: tuple[DerivationRule, ...] = (
    DerivationRule("optional", "cell", _is_optional, _build_optional),
    DerivationRule("union", "cell", _is_plain_union, _build_union),
    DerivationRule("either", "cell", _is_either, _build_either),
    DerivationRule("tuple", "row", _is_fixed_tuple, _build_fixed_tuple),
    DerivationRule("collection", "row", _is_variadic, _build_variadic),
)


def _declared_fields(cls: type) -> list[tuple[str, Any]]:
    """Ordered (name, type) pairs of a dataclass or NamedTuple."""
    hints = typing.get_type_hints(cls)
    if dataclasses.is_dataclass(cls):
        return [(f.name, hints[f.name]) for f in dataclasses.fields(cls) if f.init]
    if isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, "_fields"):
        return [(name, hints[name]) for name in cls._fields]
    raise CompositionError(
        f"{type_name(cls)} is neither a dataclass nor a NamedTuple; "
        "pass its fields explicitly",
        requested=cls,
    )


# ---------------------------------------------------------------------------
# Default registry
# ---------------------------------------------------------------------------

_DEFAULT_REGISTRY: DecoderRegistry | None = None
_BOOLEAN_REGISTRIES: dict[tuple[tuple[str, ...], tuple[str, ...], bool], DecoderRegistry] = {}


def build_default_registry(config: DecodeConfig | None = None) -> DecoderRegistry:
    """Build a fresh, unfrozen registry with primitives and built-in rules.

    Args:
        config: Only ``config.booleans`` is used, to configure the
            ``bool`` decoder's vocabulary.
    """
    registry = DecoderRegistry()
    booleans = config.booleans if config is not None else None
    for tp, decoder in primitive_decoders(booleans).items():
        registry.register_cell(tp, decoder)
    for rule in BUILTIN_RULES:
        registry.register_rule(rule)
    return registry


def get_default_registry(config: DecodeConfig | None = None) -> DecoderRegistry:
    """Return a shared, frozen default registry.

    Without *config*, or when ``config.booleans`` is the default
    vocabulary, this is the process-wide default registry (built once).
    A custom boolean vocabulary gets its own frozen registry, built on
    first use and reused for every equal vocabulary afterwards.

    Call ``.copy()`` on the result to register custom decoders.
    """
    global _DEFAULT_REGISTRY
    booleans = config.booleans if config is not None else None
    if booleans is None or booleans == BooleanConfig():
        if _DEFAULT_REGISTRY is None:
            _DEFAULT_REGISTRY = build_default_registry().freeze()
            logger.debug("Built default decoder registry")
        return _DEFAULT_REGISTRY

    key = (tuple(booleans.true_values), tuple(booleans.false_values), booleans.case_sensitive)
    registry = _BOOLEAN_REGISTRIES.get(key)
    if registry is None:
        registry = build_default_registry(config).freeze()
        _BOOLEAN_REGISTRIES[key] = registry
        logger.debug("Built decoder registry for boolean vocabulary %s", key)
    return registry
