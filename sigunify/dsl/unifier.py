"""Signature unification for symbols observed across statements.

Every statement that refers to an already known symbol re-derives the
structured form of both the stored and the observed signature, checks that
they agree on arity and unifies them parameter by parameter.  Placeholders are
bound through a :class:`Substitution`; bindings made by a successful
statement persist in the symbol table so later statements see them.

The algorithm mirrors classic first-order unification: variables are resolved
through their bindings before comparison, an occurs check rejects recursive
types, and two distinct concrete types are a conflict.  Placeholder aliasing
is ordered deterministically so ``unify(a, b)`` and ``unify(b, a)`` leave the
same substitution behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, Mapping

from sigunify.telemetry.logger import get_logger

from .errors import ArityMismatch, TypeConflict
from .lexer import PLACEHOLDER_PREFIX, Primitive
from .signatures import Function, Type, Var, format_type, parse_type, split_signature

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .symbols import SymbolTable

__all__ = [
    "FRESH_PREFIX",
    "Substitution",
    "declare",
    "record",
    "unify_signatures",
]

FRESH_PREFIX = PLACEHOLDER_PREFIX

_LOGGER = get_logger("sigunify.dsl.unifier")


def _ordering_key(var: Var) -> tuple[bool, str]:
    # User-written names are preferred as representatives over fresh ones.
    return (var.name.startswith(FRESH_PREFIX), var.name)


class Substitution:
    """Mapping from placeholder names to the types they are bound to."""

    def __init__(self, bindings: Mapping[str, Type] | None = None) -> None:
        self._bindings: Dict[str, Type] = dict(bindings or {})

    @classmethod
    def from_text(cls, bindings: Mapping[str, str]) -> "Substitution":
        return cls({name: parse_type(text) for name, text in bindings.items()})

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Substitution):
            return NotImplemented
        return self._bindings == other._bindings

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        inside = ", ".join(f"{name}={format_type(t)}" for name, t in self._bindings.items())
        return f"Substitution({inside})"

    def resolve(self, typ: Type) -> Type:
        """Chase placeholder bindings to the most specific top-level type."""

        while isinstance(typ, Var) and typ.name in self._bindings:
            typ = self._bindings[typ.name]
        return typ

    def apply(self, typ: Type) -> Type:
        """Return ``typ`` with every bound placeholder replaced throughout."""

        typ = self.resolve(typ)
        if isinstance(typ, Function):
            return Function(
                tuple(self.apply(param) for param in typ.parameters),
                self.apply(typ.return_type),
            )
        return typ

    def occurs(self, var: Var, typ: Type) -> bool:
        typ = self.resolve(typ)
        if isinstance(typ, Var):
            return typ.name == var.name
        if isinstance(typ, Function):
            return any(self.occurs(var, param) for param in typ.parameters) or self.occurs(
                var, typ.return_type
            )
        return False

    def unify(self, left: Type, right: Type) -> None:
        a = self.resolve(left)
        b = self.resolve(right)
        if a == b:
            return
        if isinstance(a, Var) and isinstance(b, Var):
            keep, alias = sorted((a, b), key=_ordering_key)
            self._bindings[alias.name] = keep
            return
        if isinstance(a, Var):
            self._bind(a, b)
            return
        if isinstance(b, Var):
            self._bind(b, a)
            return
        if isinstance(a, Function) and isinstance(b, Function):
            if a.arity != b.arity:
                raise ArityMismatch(a.arity, b.arity)
            for sub_a, sub_b in zip(a.parameters, b.parameters):
                self.unify(sub_a, sub_b)
            self.unify(a.return_type, b.return_type)
            return
        raise TypeConflict(format_type(self.apply(a)), format_type(self.apply(b)))

    def _bind(self, var: Var, typ: Type) -> None:
        if self.occurs(var, typ):
            raise TypeConflict(var.name, format_type(self.apply(typ)), reason="recursive type")
        self._bindings[var.name] = typ

    def to_text(self) -> dict[str, str]:
        """Fully applied binding texts, suitable for persisting."""

        return {name: format_type(self.apply(Var(name))) for name in self._bindings}


def unify_signatures(existing: str, observed: str, substitution: Substitution) -> Function:
    """Unify two signature texts in place on ``substitution``.

    Returns the structured form of ``existing``; apply ``substitution`` to it
    to obtain the merged signature.
    """

    existing_parts = split_signature(existing)
    observed_parts = split_signature(observed)
    if len(existing_parts) != len(observed_parts):
        raise ArityMismatch(len(existing_parts) - 1, len(observed_parts) - 1)

    existing_types = [parse_type(part) for part in existing_parts]
    observed_types = [parse_type(part) for part in observed_parts]
    for left, right in zip(existing_types[:-1], observed_types[:-1]):
        substitution.unify(left, right)
    substitution.unify(existing_types[-1], observed_types[-1])
    return Function(tuple(existing_types[:-1]), existing_types[-1])


def record(table: "SymbolTable", symbol: str, observed: str) -> str:
    """Merge ``observed`` into the entry for ``symbol`` and return the result.

    The table is only modified when the whole unification succeeds.
    """

    with table.transaction() as staged:
        existing = staged.get(symbol)
        if existing is None:
            staged.set(symbol, observed)
            _LOGGER.debug("recorded %s : %s", symbol, observed)
            return observed
        if existing == observed:
            return existing

        substitution = Substitution.from_text(staged.bindings)
        merged = unify_signatures(existing, observed, substitution)
        canonical = format_type(substitution.apply(merged))
        staged.set(symbol, canonical)
        for name, text in substitution.to_text().items():
            staged.bind(name, text)
        staged.prune_bindings()
        _LOGGER.debug("unified %s : %s with %s -> %s", symbol, existing, observed, canonical)
        return canonical


def declare(table: "SymbolTable", symbol: str, primitive: Primitive) -> str:
    """Register ``symbol`` with a primitive type; re-declaring must agree."""

    with table.transaction() as staged:
        existing = staged.get(symbol)
        if existing is not None and existing != primitive.value:
            raise TypeConflict(existing, primitive.value)
        staged.set(symbol, primitive.value)
        return primitive.value
