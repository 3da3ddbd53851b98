"""Error hierarchy shared by every stage of statement processing.

Each stage raises a :class:`StatementError` subclass tagged with an
:class:`ErrorKind`.  The statement driver converts these into ``Failure``
results, so nothing raised here is expected to escape ``process_statement``.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ArityMismatch",
    "ErrorKind",
    "InvalidSignatureShape",
    "LexError",
    "ParseError",
    "StatementError",
    "TypeConflict",
    "UndeclaredSymbol",
    "ValidationError",
]


class ErrorKind(str, Enum):
    """Categories reported in ``Failure`` results."""

    LEX = "LexError"
    VALIDATION = "ValidationError"
    PARSE = "ParseError"
    UNDECLARED = "UndeclaredSymbol"
    INVALID_SIGNATURE = "InvalidSignatureShape"
    ARITY = "ArityMismatch"
    CONFLICT = "TypeConflict"


class StatementError(RuntimeError):
    """Base class for failures detected while processing one statement."""

    kind: ErrorKind = ErrorKind.PARSE

    def __init__(self, detail: str, *, column: int | None = None) -> None:
        if column is not None:
            super().__init__(f"{column}: {detail}")
        else:
            super().__init__(detail)
        self.detail = detail
        self.column = column


class LexError(StatementError):
    kind = ErrorKind.LEX


class ValidationError(StatementError):
    kind = ErrorKind.VALIDATION


class ParseError(StatementError):
    kind = ErrorKind.PARSE


class UndeclaredSymbol(StatementError):
    """Raised when a declaration-checked identifier is missing from the table."""

    kind = ErrorKind.UNDECLARED

    def __init__(self, name: str, *, column: int | None = None) -> None:
        super().__init__(f"variable '{name}' not declared", column=column)
        self.name = name


class InvalidSignatureShape(StatementError):
    kind = ErrorKind.INVALID_SIGNATURE


class ArityMismatch(StatementError):
    """Two signatures for the same symbol disagree on parameter count."""

    kind = ErrorKind.ARITY

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(
            f"different number of parameters: expected {expected} but found {found}"
        )
        self.expected = expected
        self.found = found


class TypeConflict(StatementError):
    """Two concrete types disagree during unification."""

    kind = ErrorKind.CONFLICT

    def __init__(self, expected: str, found: str, *, reason: str | None = None) -> None:
        message = f"type mismatch: expected {expected} but found {found}"
        if reason:
            message = f"{reason}: {expected} occurs in {found}"
        super().__init__(message)
        self.expected = expected
        self.found = found
        self.reason = reason
