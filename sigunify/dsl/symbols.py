"""Symbol table mapping symbol names to their canonical signature text."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

from .errors import InvalidSignatureShape, UndeclaredSymbol
from .signatures import Var, format_type, parse_type, type_variables
from .unifier import FRESH_PREFIX, Substitution

__all__ = ["SymbolTable"]


class SymbolTable:
    """Running, order-dependent accumulator of what is known about symbols.

    ``entries`` maps each symbol to its canonical signature text and
    ``bindings`` maps placeholders bound by earlier statements to the type
    text they resolved to.  A table is owned by whoever processes statements
    with it; sharing one table between threads needs external locking.
    """

    def __init__(
        self,
        entries: Mapping[str, str] | None = None,
        bindings: Mapping[str, str] | None = None,
        *,
        fresh_counter: int = 0,
    ) -> None:
        self.entries: Dict[str, str] = dict(entries or {})
        self.bindings: Dict[str, str] = dict(bindings or {})
        self._fresh_counter = fresh_counter

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"SymbolTable(entries={self.entries!r}, bindings={self.bindings!r})"

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.entries.get(name, default)

    def lookup(self, name: str) -> str:
        try:
            return self.entries[name]
        except KeyError:
            raise UndeclaredSymbol(name) from None

    def set(self, name: str, signature: str) -> None:
        self.entries[name] = signature

    def bind(self, placeholder: str, type_text: str) -> None:
        self.bindings[placeholder] = type_text

    def prune_bindings(self) -> None:
        """Drop bindings no entry or user-named placeholder can reach.

        Minted placeholders never reappear in source text, so once nothing
        refers to one its binding can never be consulted again.
        """

        pending = [name for name in self.bindings if not name.startswith(FRESH_PREFIX)]
        for text in self.entries.values():
            pending.extend(_variables_of(text))
        reachable: set[str] = set()
        while pending:
            name = pending.pop()
            if name in reachable:
                continue
            reachable.add(name)
            bound = self.bindings.get(name)
            if bound is not None:
                pending.extend(_variables_of(bound))
        self.bindings = {name: text for name, text in self.bindings.items() if name in reachable}

    def fresh_placeholder(self) -> str:
        self._fresh_counter += 1
        return f"{FRESH_PREFIX}t{self._fresh_counter}"

    def resolve_placeholder(self, name: str) -> str:
        """Return what ``name`` is bound to, or ``name`` itself when unbound."""

        substitution = Substitution.from_text(self.bindings)
        return format_type(substitution.apply(Var(name)))

    def resolved(self, name: str) -> str:
        """Return the entry for ``name`` with every known binding applied."""

        text = self.lookup(name)
        if not self.bindings:
            return text
        try:
            typ = parse_type(text)
        except InvalidSignatureShape:
            return text
        return format_type(Substitution.from_text(self.bindings).apply(typ))

    def copy(self) -> "SymbolTable":
        return SymbolTable(self.entries, self.bindings, fresh_counter=self._fresh_counter)

    @contextmanager
    def transaction(self) -> Iterator["SymbolTable"]:
        """Yield a staged copy that replaces this table's state on success."""

        staged = self.copy()
        yield staged
        self.entries = staged.entries
        self.bindings = staged.bindings
        self._fresh_counter = staged._fresh_counter

    def to_dict(self) -> dict[str, Any]:
        return {"entries": dict(self.entries), "bindings": dict(self.bindings)}


def _variables_of(text: str) -> list[str]:
    try:
        return type_variables(parse_type(text))
    except InvalidSignatureShape:
        return []
