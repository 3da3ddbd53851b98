"""Structural checks run on a token sequence before parsing."""

from __future__ import annotations

from typing import Optional, Sequence

from .errors import ValidationError
from .lexer import COMMA, IDENT, LPAREN, RPAREN, SEMICOLON, Token

__all__ = [
    "DANGLING_COMMA",
    "MALFORMED_IDENTIFIER",
    "MISSING_TERMINATOR",
    "UNBALANCED_BRACKETS",
    "ensure_valid",
    "validate",
    "validation_failure",
]

UNBALANCED_BRACKETS = "unbalanced brackets"
DANGLING_COMMA = "dangling comma before close"
MALFORMED_IDENTIFIER = "malformed identifier"
MISSING_TERMINATOR = "missing terminator"


def _is_malformed(token: Token) -> bool:
    return not token.text or any(ch.isspace() for ch in token.text)


def validation_failure(tokens: Sequence[Token]) -> Optional[str]:
    """Return the first failure message for ``tokens`` or ``None`` when valid."""

    if not tokens:
        return MISSING_TERMINATOR
    if tokens[0].kind == IDENT and _is_malformed(tokens[0]):
        return MALFORMED_IDENTIFIER

    balance = 0
    for index in range(1, len(tokens)):
        token = tokens[index]
        if token.kind == LPAREN:
            balance += 1
        elif token.kind == RPAREN:
            if tokens[index - 1].kind == COMMA:
                return DANGLING_COMMA
            balance -= 1
            if balance < 0:
                return UNBALANCED_BRACKETS
        elif token.kind == IDENT and _is_malformed(token):
            return MALFORMED_IDENTIFIER

    if tokens[-1].kind != SEMICOLON:
        return MISSING_TERMINATOR
    if balance != 0:
        return UNBALANCED_BRACKETS
    return None


def validate(tokens: Sequence[Token]) -> bool:
    return validation_failure(tokens) is None


def ensure_valid(tokens: Sequence[Token]) -> None:
    """Raise :class:`ValidationError` carrying the fired failure message."""

    failure = validation_failure(tokens)
    if failure is not None:
        raise ValidationError(failure)
