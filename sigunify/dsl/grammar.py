"""Recursive-descent parser for signature statements.

Grammar::

    Statement   = Declaration | Expression ";"
    Declaration = "declare" TypeKeyword Identifier ";"
    Expression  = Identifier Call*
    Call        = "(" ArgList? ")" ( "->" Identifier )?
    ArgList     = Expression ( "," Expression )*

Parsing threads an immutable :class:`ParserState` through plain functions that
return ``(node, new_state)``, so any function can be exercised on its own and
nothing is shared between parses.  Identifiers already present in the symbol
table are resolved to their current signature while parsing.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from . import ast
from .errors import ParseError, UndeclaredSymbol
from .lexer import (
    ARROW,
    COMMA,
    DECLARE,
    IDENT,
    LPAREN,
    RPAREN,
    SEMICOLON,
    TYPE,
    Primitive,
    Token,
    tokenize,
)
from .symbols import SymbolTable
from .validator import ensure_valid

__all__ = [
    "NAME_KINDS",
    "ParserOptions",
    "ParserState",
    "parse_call",
    "parse_declaration",
    "parse_expression",
    "parse_identifier",
    "parse_line",
    "parse_statement",
]


# A type keyword is only tagged as TYPE because whitespace followed it; outside a
# declaration it names the primitive like any identifier.
NAME_KINDS = (IDENT, TYPE)

_PRIMITIVE_NAMES = frozenset(primitive.value for primitive in Primitive)


@dataclass(frozen=True, slots=True)
class ParserOptions:
    """Knobs selecting between the permissive and the strict parser."""

    strict_arguments: bool = False
    require_declarations: bool = False


@dataclass(frozen=True, slots=True)
class ParserState:
    """Position within an immutable token slice."""

    tokens: tuple[Token, ...]
    position: int = 0
    symbols: Optional[SymbolTable] = field(default=None, compare=False)
    options: ParserOptions = field(default_factory=ParserOptions)

    @property
    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def peek(self, offset: int = 0) -> Optional[Token]:
        target = self.position + offset
        if 0 <= target < len(self.tokens):
            return self.tokens[target]
        return None

    def previous(self) -> Optional[Token]:
        return self.peek(-1)

    def at(self, *kinds: str) -> bool:
        token = self.peek()
        return token is not None and token.kind in kinds

    def advance(self) -> "ParserState":
        return replace(self, position=self.position + 1)

    def expect(self, *kinds: str) -> tuple[Token, "ParserState"]:
        token = self.peek()
        expected = " or ".join(kinds)
        if token is None:
            raise ParseError(f"expected {expected}, found end of statement")
        if token.kind not in kinds:
            raise ParseError(f"expected {expected}, found {token.kind}", column=token.column)
        return token, self.advance()


# ---------------------------------------------------------------------------
# Entry points


def parse_line(
    line: str,
    symbols: Optional[SymbolTable] = None,
    *,
    options: Optional[ParserOptions] = None,
) -> ast.Node:
    """Tokenize, validate and parse a single statement line."""

    tokens = tokenize(line)
    ensure_valid(tokens)
    return parse_statement(tokens, symbols, options=options)


def parse_statement(
    tokens: Sequence[Token],
    symbols: Optional[SymbolTable] = None,
    *,
    options: Optional[ParserOptions] = None,
) -> ast.Node:
    state = ParserState(tuple(tokens), symbols=symbols, options=options or ParserOptions())
    if state.at(DECLARE):
        node, state = parse_declaration(state)
    else:
        node, state = parse_expression(state, head=True)
        if state.at(ARROW):
            token = state.peek()
            raise ParseError(
                "return annotation must follow a call", column=token.column if token else None
            )
    _, state = state.expect(SEMICOLON)
    if not state.at_end:
        token = state.peek()
        raise ParseError(
            f"unexpected {token.kind} after terminator", column=token.column if token else None
        )
    return node


# ---------------------------------------------------------------------------
# Productions


def parse_declaration(state: ParserState) -> tuple[ast.Declaration, ParserState]:
    start, state = state.expect(DECLARE)
    type_token, state = state.expect(TYPE)
    name_token, state = state.expect(IDENT)
    if type_token.primitive is None:  # pragma: no cover - lexer always tags TYPE tokens
        raise ParseError("type keyword without primitive", column=type_token.column)
    node = ast.Declaration(
        symbol=name_token.text,
        primitive=type_token.primitive,
        span=_span(start, state),
    )
    return node, state


def parse_expression(state: ParserState, *, head: bool = False) -> tuple[ast.Node, ParserState]:
    return parse_identifier(state, head=head)


def parse_identifier(state: ParserState, *, head: bool = False) -> tuple[ast.Node, ParserState]:
    """Parse an identifier followed by any number of call suffixes.

    ``f(x)(y)`` nests left-associatively: the first call becomes the callee of
    the second.  The head of a call statement is exempt from declaration
    checks because it is the symbol whose signature is being observed.
    """

    token, state = state.expect(*NAME_KINDS)
    exempt = head and state.at(LPAREN)
    node: ast.Node = _resolve(token, state, required=not exempt)
    while state.at(LPAREN):
        state = state.advance()
        node, state = parse_call(state, node, start=token)
    return node, state


def parse_call(
    state: ParserState, callee: ast.Node, *, start: Optional[Token] = None
) -> tuple[ast.Call, ParserState]:
    """Parse the remainder of a call after its opening bracket."""

    strict = state.options.strict_arguments
    arguments: list[ast.Node] = []
    expecting = True
    while True:
        token = state.peek()
        if token is None:
            raise ParseError("unexpected end of statement inside argument list")
        if token.kind == RPAREN:
            if strict and arguments and expecting:
                raise ParseError("dangling comma before close", column=token.column)
            state = state.advance()
            break
        if token.kind in NAME_KINDS:
            if strict and not expecting:
                raise ParseError("expected ',' between arguments", column=token.column)
            argument, state = parse_expression(state)
            arguments.append(argument)
            expecting = False
            continue
        if token.kind == COMMA:
            if strict and expecting:
                raise ParseError("unexpected ',' in argument list", column=token.column)
            expecting = True
            state = state.advance()
            continue
        if strict:
            raise ParseError(f"unexpected {token.kind} in argument list", column=token.column)
        state = state.advance()

    returns: list[ast.Node] = []
    if state.at(ARROW):
        state = state.advance()
        name_token, state = state.expect(*NAME_KINDS)
        returns.append(_resolve(name_token, state, required=True))

    node = ast.Call(
        callee=callee,
        arguments=arguments,
        returns=returns,
        span=_span(start, state) if start is not None else None,
    )
    return node, state


# ---------------------------------------------------------------------------
# Helpers


def _resolve(token: Token, state: ParserState, *, required: bool) -> ast.Identifier:
    symbols = state.symbols
    span = ast.Span(token.column, token.column + len(token.text))
    if symbols is not None and token.text in symbols:
        return ast.Identifier(token.text, symbols.resolved(token.text), span=span)
    if required and state.options.require_declarations and token.text not in _PRIMITIVE_NAMES:
        raise UndeclaredSymbol(token.text, column=token.column)
    return ast.Identifier(token.text, span=span)


def _span(start: Token, state: ParserState) -> ast.Span:
    last = state.previous()
    end = last.column + len(last.text) if last is not None else start.column
    return ast.Span(start.column, end)
