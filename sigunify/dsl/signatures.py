"""Textual signatures and the structured type form used during unification.

The symbol table persists signatures as canonical text such as
``(string -> A) -> B -> int``.  This module splits such text at top-level
arrows, rebuilds the structured :class:`Type` form (``Named | Var |
Function``) and renders it back to canonical text.  It also derives the
candidate signature observed at a call site from the parser AST.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from . import ast
from .errors import InvalidSignatureShape
from .lexer import ARROW_TEXT, Primitive

__all__ = [
    "Function",
    "Named",
    "Type",
    "UNIT",
    "Var",
    "format_type",
    "is_concrete_name",
    "join_signature",
    "parse_type",
    "signature_of",
    "split_signature",
    "type_variables",
]

ARROW_SEPARATOR = f" {ARROW_TEXT} "


# ---------------------------------------------------------------------------
# Type representation


class Type:
    """Structural base class for signature types."""


@dataclass(frozen=True, slots=True)
class Named(Type):
    """A concrete type such as ``int``, ``string`` or the unit type ``()``."""

    name: str


@dataclass(frozen=True, slots=True)
class Var(Type):
    """A placeholder waiting to be unified with another type."""

    name: str


@dataclass(frozen=True, slots=True)
class Function(Type):
    """``(P1, ..., Pn) -> R`` with ``n >= 1``."""

    parameters: tuple[Type, ...]
    return_type: Type

    @property
    def arity(self) -> int:
        return len(self.parameters)


UNIT = Named("()")

CONCRETE_NAMES = frozenset({primitive.value for primitive in Primitive} | {UNIT.name})


def is_concrete_name(name: str) -> bool:
    return name in CONCRETE_NAMES


# ---------------------------------------------------------------------------
# Splitting


def _split_top_level(text: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    index = 0
    while index < len(text):
        ch = text[index]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise InvalidSignatureShape(f"invalid signature: unbalanced parentheses in '{text}'")
        elif depth == 0 and text.startswith(ARROW_TEXT, index):
            parts.append("".join(current).strip())
            current = []
            index += len(ARROW_TEXT)
            continue
        current.append(ch)
        index += 1
    if depth != 0:
        raise InvalidSignatureShape(f"invalid signature: unbalanced parentheses in '{text}'")
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def split_signature(text: str) -> list[str]:
    """Split ``text`` on ``->`` at parenthesis depth zero.

    Each part is trimmed.  A function type needs at least one parameter part
    and a return part, so fewer than two parts is an error.
    """

    parts = _split_top_level(text)
    if len(parts) < 2:
        raise InvalidSignatureShape("invalid signature: fewer than two parts")
    if not all(parts):
        raise InvalidSignatureShape(f"invalid signature: empty part in '{text}'")
    return parts


def join_signature(parts: Sequence[str]) -> str:
    return ARROW_SEPARATOR.join(parts)


# ---------------------------------------------------------------------------
# Text <-> structured types


def _unwrap(text: str) -> str | None:
    """Return the inside of ``text`` when one bracket pair encloses all of it."""

    if not (text.startswith("(") and text.endswith(")")):
        return None
    depth = 0
    for index, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0 and index != len(text) - 1:
                return None
    return text[1:-1].strip()


def parse_type(text: str) -> Type:
    """Rebuild the structured form of a signature or type atom."""

    text = text.strip()
    if not text:
        raise InvalidSignatureShape("invalid signature: empty type")
    inner = _unwrap(text)
    if inner is not None:
        if not inner:
            return UNIT
        return parse_type(inner)
    parts = _split_top_level(text)
    if len(parts) > 1:
        parameters = tuple(parse_type(part) for part in parts[:-1])
        return Function(parameters, parse_type(parts[-1]))
    if "(" in text or ")" in text:
        raise InvalidSignatureShape(f"invalid signature: malformed type '{text}'")
    if is_concrete_name(text):
        return Named(text)
    return Var(text)


def type_variables(typ: Type) -> list[str]:
    """Return the placeholder names occurring in ``typ``, left to right."""

    if isinstance(typ, Var):
        return [typ.name]
    if isinstance(typ, Function):
        names: list[str] = []
        for part in (*typ.parameters, typ.return_type):
            names.extend(type_variables(part))
        return names
    return []


def format_type(typ: Type) -> str:
    """Render ``typ`` canonically; ``parse_type(format_type(t)) == t``."""

    if isinstance(typ, (Named, Var)):
        return typ.name
    if isinstance(typ, Function):
        pieces = [_format_operand(param) for param in typ.parameters]
        pieces.append(_format_operand(typ.return_type))
        return join_signature(pieces)
    raise AssertionError(f"Unknown type node: {typ!r}")


def _format_operand(typ: Type) -> str:
    text = format_type(typ)
    if isinstance(typ, Function):
        return f"({text})"
    return text


# ---------------------------------------------------------------------------
# Candidate signatures observed at call sites


def signature_of(call: ast.Call, fresh: Callable[[], str]) -> str:
    """Flatten a call chain into the signature text it implies for its head.

    ``f(a, b)(c) -> r`` observes ``a -> b -> c -> r``.  Results that are not
    annotated (the statement itself or a nested call argument) become fresh
    placeholders obtained from ``fresh``, unless the argument calls a symbol
    whose signature is already known.
    """

    parts: list[str] = []
    chain = ast.call_chain(call)
    for link in chain:
        if not link.arguments:
            parts.append(UNIT.name)
        for argument in link.arguments:
            parts.append(_argument_text(argument, fresh))
    outermost = chain[-1]
    if outermost.returns:
        parts.extend(_node_text(ret) for ret in outermost.returns)
    else:
        parts.append(fresh())
    return join_signature(parts)


def _argument_text(node: ast.Node, fresh: Callable[[], str]) -> str:
    if isinstance(node, ast.Call):
        if node.returns:
            return _node_text(node.returns[-1])
        known = _known_result(node)
        return known if known is not None else fresh()
    return _node_text(node)


def _known_result(call: ast.Call) -> str | None:
    """Return what a nested call yields given its head's known signature.

    Applying fewer arguments than the head takes leaves a function of the
    remaining parameters.  Unknown heads and over-application yield ``None``.
    """

    chain = ast.call_chain(call)
    head = chain[0].callee
    if not isinstance(head, ast.Identifier) or head.resolved is None:
        return None
    try:
        parts = split_signature(head.resolved)
    except InvalidSignatureShape:
        return None
    applied = sum(max(len(link.arguments), 1) for link in chain)
    if applied > len(parts) - 1:
        return None
    remaining = parts[applied:]
    if len(remaining) == 1:
        return remaining[0]
    return f"({join_signature(remaining)})"


def _node_text(node: ast.Node) -> str:
    if isinstance(node, ast.Identifier):
        return node.text
    raise InvalidSignatureShape(f"invalid signature: unexpected node {ast.render(node)}")
