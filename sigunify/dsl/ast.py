"""Abstract syntax tree for signature statements.

Nodes are small data-only dataclasses.  A statement is either a
:class:`Declaration` or an expression built from :class:`Identifier` and
:class:`Call` nodes; call chains such as ``f(x)(y)`` nest left-associatively
through ``Call.callee``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Iterable, Iterator, Optional, Sequence

from .lexer import Primitive

__all__ = [
    "Call",
    "Declaration",
    "Identifier",
    "Node",
    "Span",
    "call_chain",
    "head_symbol",
    "iter_nodes",
    "render",
]


@dataclass(slots=True)
class Span:
    """Column range of the tokens a node was built from."""

    start_column: int
    end_column: int

    def to_tuple(self) -> tuple[int, int]:
        return (self.start_column, self.end_column)


@dataclass(slots=True, kw_only=True)
class Node:
    """Base class for all AST nodes."""

    span: Optional[Span] = field(default=None, compare=False)

    @property
    def node_type(self) -> str:
        return self.__class__.__name__

    def children(self) -> Iterator[Node]:
        """Yield child nodes in declaration order."""

        for item in fields(self):
            if item.name == "span":
                continue
            value = getattr(self, item.name)
            yield from _iter_possible_children(value)

    def walk(self) -> Iterator[Node]:
        """Depth-first traversal starting at this node."""

        yield self
        for child in self.children():
            yield from child.walk()


@dataclass(slots=True)
class Identifier(Node):
    """A symbol reference.

    ``resolved`` holds the symbol's known type text when the name was present
    in the symbol table at parse time; ``name`` is always the raw lexeme.
    """

    name: str
    resolved: Optional[str] = None

    @property
    def text(self) -> str:
        if self.resolved is None:
            return self.name
        if "->" in self.resolved:
            return f"({self.resolved})"
        return self.resolved

    def __str__(self) -> str:
        return self.text


@dataclass(slots=True)
class Call(Node):
    """Application of ``callee`` to ``arguments`` with an optional return annotation."""

    callee: Node
    arguments: list[Node] = field(default_factory=list)
    returns: list[Node] = field(default_factory=list)

    def __str__(self) -> str:
        return render(self)


@dataclass(slots=True)
class Declaration(Node):
    """``declare <type> <name>;``"""

    symbol: str
    primitive: Primitive

    def __str__(self) -> str:
        return render(self)


def render(node: Node) -> str:
    """Return the display form used in diagnostics and tests."""

    if isinstance(node, Identifier):
        return f"'{node.text}'"
    if isinstance(node, Call):
        args = ",".join(render(arg) for arg in node.arguments)
        returns = ",".join(render(ret) for ret in node.returns)
        return f"Call(callee={render(node.callee)}, args=[{args}], returns=[{returns}])"
    if isinstance(node, Declaration):
        return f"Declaration(symbol='{node.symbol}', type='{node.primitive.value}')"
    raise TypeError(f"cannot render {node!r}")


def call_chain(node: Call) -> list[Call]:
    """Return the calls of a curried chain, innermost first."""

    chain: list[Call] = []
    current: Node = node
    while isinstance(current, Call):
        chain.append(current)
        current = current.callee
    chain.reverse()
    return chain


def head_symbol(node: Node) -> str:
    """Return the raw name of the leftmost identifier of ``node``."""

    current = node
    while isinstance(current, Call):
        current = current.callee
    if isinstance(current, Identifier):
        return current.name
    if isinstance(current, Declaration):
        return current.symbol
    raise TypeError(f"node {node!r} has no head symbol")


def iter_nodes(root: Node) -> Iterable[Node]:
    """Convenience wrapper to iterate depth-first over a subtree."""

    return root.walk()


def _iter_possible_children(value: object) -> Iterator[Node]:
    if isinstance(value, Node):
        yield value
        return
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        for item in value:
            if isinstance(item, Node):
                yield item
