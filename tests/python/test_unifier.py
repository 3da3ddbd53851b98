"""Unification of stored and observed signatures."""

from __future__ import annotations

import pytest

from sigunify.dsl import unifier
from sigunify.dsl.errors import ArityMismatch, InvalidSignatureShape, TypeConflict
from sigunify.dsl.lexer import Primitive
from sigunify.dsl.signatures import Function, Named, Var, parse_type
from sigunify.dsl.symbols import SymbolTable
from sigunify.dsl.unifier import Substitution


def test_first_observation_is_stored_verbatim() -> None:
    table = SymbolTable()
    assert unifier.record(table, "f", "string -> A") == "string -> A"
    assert table.entries == {"f": "string -> A"}
    assert table.bindings == {}


def test_unify_binds_placeholders_across_functional_arguments() -> None:
    table = SymbolTable()
    unifier.record(table, "f", "string -> A")
    unifier.record(table, "g", "B -> string")
    unifier.record(table, "U", "T -> T -> T")

    canonical = unifier.record(table, "U", "(string -> A) -> (B -> string) -> T")

    assert canonical == "(string -> string) -> (string -> string) -> (string -> string)"
    assert table.entries["U"] == canonical
    assert table.resolve_placeholder("T") == "string -> string"
    assert table.resolve_placeholder("A") == "string"
    assert table.resolve_placeholder("B") == "string"
    assert table.resolved("f") == "string -> string"
    assert table.resolved("g") == "string -> string"


def test_placeholders_alias_each_other() -> None:
    table = SymbolTable({"p": "A -> B"})
    assert unifier.record(table, "p", "x -> x") == "A -> A"


@pytest.mark.parametrize("signature", ["int -> string", "(A -> B) -> C", "() -> ?t1"])
def test_recording_the_same_signature_is_idempotent(signature: str) -> None:
    table = SymbolTable({"h": signature})
    assert unifier.record(table, "h", signature) == signature
    assert table.entries == {"h": signature}
    assert table.bindings == {}


def test_arity_mismatch_leaves_table_unchanged() -> None:
    table = SymbolTable({"h": "int -> string"})
    with pytest.raises(ArityMismatch) as exc:
        unifier.record(table, "h", "int -> int -> string")
    assert (exc.value.expected, exc.value.found) == (1, 2)
    assert exc.value.detail == "different number of parameters: expected 1 but found 2"
    assert table.entries == {"h": "int -> string"}


def test_nested_arity_mismatch() -> None:
    table = SymbolTable({"h": "(A -> B) -> C"})
    with pytest.raises(ArityMismatch):
        unifier.record(table, "h", "(A -> B -> C) -> C")


def test_concrete_conflict_leaves_table_unchanged() -> None:
    table = SymbolTable({"k": "int -> A"})
    with pytest.raises(TypeConflict) as exc:
        unifier.record(table, "k", "string -> string")
    assert exc.value.detail == "type mismatch: expected int but found string"
    assert table.entries == {"k": "int -> A"}
    assert table.bindings == {}


def test_persisted_bindings_constrain_later_statements() -> None:
    table = SymbolTable({"p": "A -> A"}, {"A": "int"})
    with pytest.raises(TypeConflict):
        unifier.record(table, "p", "string -> B")
    assert unifier.record(table, "p", "int -> B") == "int -> int"
    assert table.bindings["B"] == "int"


def test_primitive_entry_cannot_be_called() -> None:
    table = SymbolTable({"x": "int"})
    with pytest.raises(InvalidSignatureShape):
        unifier.record(table, "x", "int -> int")
    assert table.entries == {"x": "int"}


def test_declare_registers_and_rechecks_primitives() -> None:
    table = SymbolTable()
    assert unifier.declare(table, "x", Primitive.INT) == "int"
    assert unifier.declare(table, "x", Primitive.INT) == "int"
    with pytest.raises(TypeConflict) as exc:
        unifier.declare(table, "x", Primitive.STRING)
    assert (exc.value.expected, exc.value.found) == ("int", "string")
    assert table.entries == {"x": "int"}


def test_unify_signatures_returns_structured_existing_form() -> None:
    substitution = Substitution()
    merged = unifier.unify_signatures("A -> B", "int -> string", substitution)
    assert merged == Function((Var("A"),), Var("B"))
    assert substitution.apply(merged) == parse_type("int -> string")


@pytest.mark.parametrize(
    ("left", "right"),
    [
        (Var("A"), Var("B")),
        (Var("A"), Named("int")),
        (Var("?t1"), Var("A")),
        (
            Function((Var("A"),), Named("int")),
            Function((Named("string"),), Var("B")),
        ),
        (parse_type("(A -> B) -> C"), parse_type("D -> (int -> E)")),
    ],
)
def test_unification_is_symmetric(left, right) -> None:
    forward = Substitution()
    forward.unify(left, right)
    backward = Substitution()
    backward.unify(right, left)
    assert forward == backward
    assert forward.apply(left) == forward.apply(right)


def test_user_placeholders_represent_fresh_ones() -> None:
    substitution = Substitution()
    substitution.unify(Var("?t1"), Var("A"))
    assert substitution.apply(Var("?t1")) == Var("A")


def test_occurs_check_rejects_recursive_types() -> None:
    substitution = Substitution()
    with pytest.raises(TypeConflict) as exc:
        substitution.unify(Var("A"), parse_type("A -> int"))
    assert exc.value.reason == "recursive type"
    assert len(substitution) == 0


def test_distinct_concrete_types_conflict() -> None:
    with pytest.raises(TypeConflict) as exc:
        Substitution().unify(Named("int"), Named("string"))
    assert (exc.value.expected, exc.value.found) == ("int", "string")


def test_substitution_text_round_trip() -> None:
    substitution = Substitution.from_text({"A": "B", "B": "int -> C"})
    assert "A" in substitution
    assert substitution.to_text() == {"A": "int -> C", "B": "int -> C"}
