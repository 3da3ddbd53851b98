"""Statement driver: tokenize, validate, parse and unify one line at a time.

``process_statement`` is total.  Every failure raised by the pipeline becomes a
``Failure`` result and the symbol table is only written when the whole
statement succeeds.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional

from sigunify.dsl import ast, signatures, unifier
from sigunify.dsl.errors import ErrorKind, StatementError
from sigunify.dsl.grammar import ParserOptions, parse_statement
from sigunify.dsl.lexer import tokenize
from sigunify.dsl.symbols import SymbolTable
from sigunify.dsl.validator import ensure_valid
from sigunify.telemetry import metrics
from sigunify.telemetry.logger import get_logger
from sigunify.utils import config as config_loader

from .types import (
    Declaration,
    Failure,
    ResolvedExpression,
    SessionConfig,
    SignatureUpdated,
    StatementResult,
)

DiagnosticSink = Callable[[str], None]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "default.yaml"

_LOGGER = get_logger("sigunify.driver")


def load_configuration(
    config_path: str | Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> SessionConfig:
    """Return a :class:`SessionConfig` from ``config_path`` and overrides."""

    data: Mapping[str, Any] | None = None
    if config_path is not None:
        data = config_loader.load_config(config_path)
    config = SessionConfig.from_mapping(data)
    return config.merge(overrides)


def split_statements(text: str) -> list[str]:
    """Split ``text`` into trimmed, non-empty statement lines."""

    return [part.strip() for part in text.split("\n") if part.strip()]


def process_statement(
    line: str,
    table: SymbolTable,
    *,
    options: Optional[ParserOptions] = None,
    emit_diagnostic: Optional[DiagnosticSink] = None,
    registry: Optional[metrics.MetricsRegistry] = None,
) -> StatementResult:
    """Process ``line`` against ``table`` and return its result."""

    registry = registry or metrics.get_registry()
    registry.emit(metrics.PROCESSED)
    result: StatementResult
    try:
        result = _evaluate(line, table, options or ParserOptions())
    except StatementError as exc:
        result = Failure(exc.kind, exc.detail, line)
    except RecursionError:
        result = Failure(ErrorKind.PARSE, "statement nested too deeply", line)

    if isinstance(result, Failure):
        registry.emit(metrics.FAILED, tags={"kind": result.kind.value})
    elif isinstance(result, SignatureUpdated):
        registry.emit(metrics.SIGNATURES_UPDATED)
        registry.emit(metrics.BINDINGS, len(table.bindings))
    if emit_diagnostic is not None:
        emit_diagnostic(result.describe())
    return result


def _evaluate(line: str, table: SymbolTable, options: ParserOptions) -> StatementResult:
    tokens = tokenize(line)
    ensure_valid(tokens)
    with table.transaction() as staged:
        node = parse_statement(tokens, staged, options=options)
        if isinstance(node, ast.Declaration):
            unifier.declare(staged, node.symbol, node.primitive)
            return Declaration(node.symbol, node.primitive)
        if isinstance(node, ast.Call):
            symbol = ast.head_symbol(node)
            observed = signatures.signature_of(node, staged.fresh_placeholder)
            canonical = unifier.record(staged, symbol, observed)
            return SignatureUpdated(symbol, canonical, expression=ast.render(node))
        return ResolvedExpression(str(node))


class Session:
    """Owns a symbol table and feeds statements through it in order."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        table: Optional[SymbolTable] = None,
        *,
        emit_diagnostic: Optional[DiagnosticSink] = None,
        registry: Optional[metrics.MetricsRegistry] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.table = table if table is not None else SymbolTable()
        self.registry = registry or metrics.get_registry()
        self._sink = emit_diagnostic
        self.results: list[StatementResult] = []

    def process_statement(self, line: str) -> StatementResult:
        result = process_statement(
            line, self.table, options=self.config.parser, registry=self.registry
        )
        self.results.append(result)
        self._report(result)
        return result

    def run(self, lines: Iterable[str]) -> list[StatementResult]:
        """Process ``lines`` in order, continuing past failures."""

        return [self.process_statement(line) for line in lines]

    def run_text(self, text: str) -> list[StatementResult]:
        return self.run(split_statements(text))

    @property
    def failures(self) -> list[Failure]:
        return [result for result in self.results if isinstance(result, Failure)]

    def _report(self, result: StatementResult) -> None:
        if result.ok and not self.config.diagnostics.report_success:
            return
        message = result.describe()
        if self._sink is not None:
            self._sink(message)
            return
        _LOGGER.log(logging.INFO if result.ok else logging.WARNING, message)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DiagnosticSink",
    "Session",
    "load_configuration",
    "process_statement",
    "split_statements",
]
