"""Recursive-descent parsing of statements into AST nodes."""

from __future__ import annotations

import pytest

from sigunify.dsl import ast, grammar
from sigunify.dsl.errors import ParseError, UndeclaredSymbol
from sigunify.dsl.grammar import ParserOptions, ParserState
from sigunify.dsl.lexer import Primitive, tokenize
from sigunify.dsl.symbols import SymbolTable


def test_declaration() -> None:
    node = grammar.parse_line("declare string s;")
    assert node == ast.Declaration(symbol="s", primitive=Primitive.STRING)
    assert ast.render(node) == "Declaration(symbol='s', type='string')"


def test_call_arguments_resolve_through_table() -> None:
    table = SymbolTable({"x": "int", "y": "string", "z": "string"})
    node = grammar.parse_line("f(x, y) -> z;", table)
    assert isinstance(node, ast.Call)
    assert ast.render(node) == "Call(callee='f', args=['int','string'], returns=['string'])"


def test_curried_call_nests_left_associatively() -> None:
    node = grammar.parse_line("f(g(x), b, c)(z);")
    assert isinstance(node, ast.Call)
    inner = node.callee
    assert isinstance(inner, ast.Call)
    assert inner.callee == ast.Identifier("f")
    assert isinstance(inner.arguments[0], ast.Call)
    assert [str(arg) for arg in inner.arguments[1:]] == ["b", "c"]
    assert node.arguments == [ast.Identifier("z")]
    assert ast.render(node) == (
        "Call(callee=Call(callee='f', args=[Call(callee='g', args=['x'], returns=[]),'b','c'],"
        " returns=[]), args=['z'], returns=[])"
    )
    assert [link.arguments for link in ast.call_chain(node)][1] == [ast.Identifier("z")]
    assert ast.head_symbol(node) == "f"


def test_empty_argument_list() -> None:
    node = grammar.parse_line("f();")
    assert isinstance(node, ast.Call)
    assert node.arguments == []
    assert node.returns == []


def test_bare_identifier_resolves() -> None:
    table = SymbolTable({"x": "int"})
    node = grammar.parse_line("x;", table)
    assert isinstance(node, ast.Identifier)
    assert str(node) == "int"


def test_function_typed_symbol_is_parenthesized() -> None:
    table = SymbolTable({"f": "string -> A"})
    node = grammar.parse_line("U(f);", table)
    assert isinstance(node, ast.Call)
    assert ast.render(node) == "Call(callee='U', args=['(string -> A)'], returns=[])"


def test_identifier_text_applies_bindings() -> None:
    table = SymbolTable({"f": "string -> A"}, {"A": "string"})
    node = grammar.parse_line("f;", table)
    assert str(node) == "(string -> string)"


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("f(x,,y);", ["x", "y"]),
        ("f(x,,,y);", ["x", "y"]),
        ("f(,x);", ["x"]),
    ],
)
def test_permissive_parser_skips_stray_tokens(line: str, expected: list[str]) -> None:
    node = grammar.parse_line(line)
    assert isinstance(node, ast.Call)
    assert [str(arg) for arg in node.arguments] == expected


@pytest.mark.parametrize("line", ["f(x,,y);", "f(int x);", "f(,x);"])
def test_strict_parser_rejects_stray_tokens(line: str) -> None:
    options = ParserOptions(strict_arguments=True)
    with pytest.raises(ParseError):
        grammar.parse_line(line, options=options)


@pytest.mark.parametrize(
    ("line", "arguments", "returns"),
    [
        ("g(B) -> string ;", ["B"], ["string"]),
        ("f(string , x) -> r;", ["string", "x"], ["r"]),
        ("f(int x, y);", ["int", "x", "y"], []),
    ],
)
def test_type_keywords_parse_as_names(line: str, arguments: list[str], returns: list[str]) -> None:
    node = grammar.parse_line(line)
    assert isinstance(node, ast.Call)
    assert [str(arg) for arg in node.arguments] == arguments
    assert [str(ret) for ret in node.returns] == returns


def test_require_declarations_accepts_primitive_names() -> None:
    options = ParserOptions(require_declarations=True)
    node = grammar.parse_line("f(int ) -> string ;", options=options)
    assert ast.render(node) == "Call(callee='f', args=['int'], returns=['string'])"


def test_require_declarations_rejects_unknown_argument() -> None:
    options = ParserOptions(require_declarations=True)
    with pytest.raises(UndeclaredSymbol) as exc:
        grammar.parse_line("f(x) -> z;", SymbolTable({"z": "int"}), options=options)
    assert exc.value.detail == "variable 'x' not declared"


def test_require_declarations_exempts_call_head() -> None:
    options = ParserOptions(require_declarations=True)
    table = SymbolTable({"x": "int", "z": "int"})
    node = grammar.parse_line("f(x) -> z;", table, options=options)
    assert ast.head_symbol(node) == "f"


def test_require_declarations_checks_bare_reference() -> None:
    options = ParserOptions(require_declarations=True)
    with pytest.raises(UndeclaredSymbol):
        grammar.parse_line("x;", SymbolTable(), options=options)


def test_return_annotation_requires_a_call() -> None:
    with pytest.raises(ParseError, match="return annotation"):
        grammar.parse_line("x -> y;")


def test_tokens_after_terminator_are_rejected() -> None:
    with pytest.raises(ParseError, match="after terminator"):
        grammar.parse_line("f(x); g(y);")


def test_missing_terminator_is_a_parse_error_without_validation() -> None:
    with pytest.raises(ParseError, match="end of statement"):
        grammar.parse_statement(tokenize("f(x)"))


def test_unclosed_call_is_a_parse_error_without_validation() -> None:
    with pytest.raises(ParseError):
        grammar.parse_statement(tokenize("f(x"))


def test_parser_state_is_immutable() -> None:
    state = ParserState(tuple(tokenize("f(x);")))
    advanced = state.advance()
    assert state.position == 0
    assert advanced.position == 1
    assert advanced.previous() == state.peek()


def test_parse_call_can_run_on_its_own() -> None:
    state = ParserState(tuple(tokenize("f(x) -> r;")), position=2)
    node, rest = grammar.parse_call(state, ast.Identifier("f"))
    assert node.arguments == [ast.Identifier("x")]
    assert node.returns == [ast.Identifier("r")]
    assert rest.at("SEMICOLON")


def test_spans_cover_the_source_columns() -> None:
    node = grammar.parse_line("f(x) -> r;")
    assert node.span is not None
    assert node.span.to_tuple() == (0, 9)


def test_iter_nodes_walks_depth_first() -> None:
    node = grammar.parse_line("f(g(x)) -> r;")
    assert [item.node_type for item in ast.iter_nodes(node)] == [
        "Call",
        "Identifier",
        "Call",
        "Identifier",
        "Identifier",
        "Identifier",
    ]
    names = [item.name for item in node.walk() if isinstance(item, ast.Identifier)]
    assert names == ["f", "g", "x", "r"]
