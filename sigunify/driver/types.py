"""Typed results and configuration for the statement driver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from sigunify.dsl.errors import ErrorKind
from sigunify.dsl.grammar import ParserOptions
from sigunify.dsl.lexer import Primitive


def _deep_update(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``updates`` recursively merged."""

    result: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def _coerce_bool(value: Any, *, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        return fallback
    return bool(value)


# ---------------------------------------------------------------------------
# Statement results


@dataclass(frozen=True, slots=True)
class Declaration:
    """``declare <type> <symbol>;`` succeeded."""

    symbol: str
    declared_type: Primitive

    @property
    def ok(self) -> bool:
        return True

    def describe(self) -> str:
        return f"declared {self.symbol} : {self.declared_type.value}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": "Declaration",
            "symbol": self.symbol,
            "declared_type": self.declared_type.value,
        }


@dataclass(frozen=True, slots=True)
class ResolvedExpression:
    """A bare reference resolved to its display text."""

    ast_text: str

    @property
    def ok(self) -> bool:
        return True

    def describe(self) -> str:
        return self.ast_text

    def to_dict(self) -> dict[str, Any]:
        return {"result": "ResolvedExpression", "ast_text": self.ast_text}


@dataclass(frozen=True, slots=True)
class SignatureUpdated:
    """A call statement was unified into the symbol's signature."""

    symbol: str
    canonical_signature: str
    expression: str = ""

    @property
    def ok(self) -> bool:
        return True

    def describe(self) -> str:
        return f"{self.symbol} : {self.canonical_signature}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": "SignatureUpdated",
            "symbol": self.symbol,
            "canonical_signature": self.canonical_signature,
            "expression": self.expression,
        }


@dataclass(frozen=True, slots=True)
class Failure:
    """The statement failed; the symbol table was left untouched."""

    kind: ErrorKind
    detail: str
    line: str = ""

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"error[{self.kind.value}]: {self.detail}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": "Failure",
            "kind": self.kind.value,
            "detail": self.detail,
            "line": self.line,
        }


StatementResult = Union[Declaration, ResolvedExpression, SignatureUpdated, Failure]


# ---------------------------------------------------------------------------
# Configuration


@dataclass(slots=True)
class DiagnosticsOptions:
    """What the driver reports through its diagnostic sink."""

    report_success: bool = True


@dataclass(slots=True)
class SessionConfig:
    """Top-level configuration bundle for a statement session."""

    parser: ParserOptions = field(default_factory=ParserOptions)
    diagnostics: DiagnosticsOptions = field(default_factory=DiagnosticsOptions)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "SessionConfig":
        payload = dict(data or {})
        parser_data = payload.get("parser")
        parser_data = parser_data if isinstance(parser_data, Mapping) else {}
        defaults = ParserOptions()
        parser = ParserOptions(
            strict_arguments=_coerce_bool(
                parser_data.get("strict_arguments"), fallback=defaults.strict_arguments
            ),
            require_declarations=_coerce_bool(
                parser_data.get("require_declarations"), fallback=defaults.require_declarations
            ),
        )
        diagnostics_data = payload.get("diagnostics")
        diagnostics_data = diagnostics_data if isinstance(diagnostics_data, Mapping) else {}
        diagnostics = DiagnosticsOptions(
            report_success=_coerce_bool(diagnostics_data.get("report_success"), fallback=True)
        )
        return cls(parser=parser, diagnostics=diagnostics)

    def merge(self, overrides: Mapping[str, Any] | None) -> "SessionConfig":
        if not overrides:
            return self
        return SessionConfig.from_mapping(_deep_update(self.to_dict(), overrides))

    def to_dict(self) -> dict[str, Any]:
        return {
            "parser": {
                "strict_arguments": self.parser.strict_arguments,
                "require_declarations": self.parser.require_declarations,
            },
            "diagnostics": {
                "report_success": self.diagnostics.report_success,
            },
        }


__all__ = [
    "Declaration",
    "DiagnosticsOptions",
    "Failure",
    "ResolvedExpression",
    "SessionConfig",
    "SignatureUpdated",
    "StatementResult",
]
