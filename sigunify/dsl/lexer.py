"""Tokenizer for single-line signature statements.

The scan is a single left-to-right pass with one accumulation buffer for the
current identifier-like run.  Punctuation always flushes the buffer; whitespace
only flushes it when the buffer spells a keyword, otherwise it is kept and
trimmed away on the next flush.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import LexError

__all__ = [
    "ARROW",
    "COMMA",
    "DECLARE",
    "IDENT",
    "LPAREN",
    "PLACEHOLDER_PREFIX",
    "Primitive",
    "RPAREN",
    "SEMICOLON",
    "TYPE",
    "Token",
    "tokenize",
]

LPAREN = "LPAREN"
RPAREN = "RPAREN"
COMMA = "COMMA"
SEMICOLON = "SEMICOLON"
IDENT = "IDENT"
ARROW = "ARROW"
DECLARE = "DECLARE"
TYPE = "TYPE"


class Primitive(str, Enum):
    """Primitive type keywords accepted by ``declare``."""

    INT = "int"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class Token:
    """Single lexical token."""

    kind: str
    text: str
    column: int = 0
    primitive: Optional[Primitive] = None


PUNCTUATION = {
    "(": LPAREN,
    ")": RPAREN,
    ",": COMMA,
    ";": SEMICOLON,
}

ARROW_TEXT = "->"

# Prefix of placeholders minted by the symbol table; never valid in source text.
PLACEHOLDER_PREFIX = "?"


def _keyword_token(text: str, column: int) -> Optional[Token]:
    if text == "declare":
        return Token(DECLARE, text, column)
    if text == ARROW_TEXT:
        return Token(ARROW, text, column)
    for primitive in Primitive:
        if text == primitive.value:
            return Token(TYPE, text, column, primitive)
    return None


def _flush(tokens: list[Token], buffer: list[str], column: int) -> None:
    if not buffer:
        return
    text = "".join(buffer).strip()
    buffer.clear()
    if text == ARROW_TEXT:
        tokens.append(Token(ARROW, text, column))
        return
    if ARROW_TEXT in text:
        raise LexError(f"malformed arrow in '{text}'", column=column)
    tokens.append(Token(IDENT, text, column))


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens.

    Keywords (``declare``, ``int``, ``string`` and ``->``) are only recognised
    when followed by whitespace, so ``f(string)`` yields ``string`` as an
    identifier while ``declare string s;`` yields a type keyword.
    """

    tokens: list[Token] = []
    buffer: list[str] = []
    start = 0
    for column, ch in enumerate(line):
        if ch in PUNCTUATION:
            _flush(tokens, buffer, start)
            tokens.append(Token(PUNCTUATION[ch], ch, column))
        elif ch.isspace():
            if not buffer:
                continue
            keyword = _keyword_token("".join(buffer), start)
            if keyword is not None:
                tokens.append(keyword)
                buffer.clear()
            else:
                buffer.append(ch)
        elif ch == PLACEHOLDER_PREFIX:
            raise LexError(f"reserved character {ch!r}", column=column)
        elif not ch.isprintable():
            raise LexError(f"unexpected character {ch!r}", column=column)
        else:
            if not buffer:
                start = column
            buffer.append(ch)
    _flush(tokens, buffer, start)
    return tokens
