"""sigunify command-line interface."""

from __future__ import annotations

import argparse
import ast
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from sigunify.dsl.errors import StatementError
from sigunify.dsl.lexer import tokenize
from sigunify.dsl.signatures import split_signature
from sigunify.telemetry import logger as telemetry_logger
from sigunify.telemetry import metrics
from sigunify.telemetry.logger import get_logger

from . import session
from .types import SessionConfig

_FORMAT_CHOICES = ("text", "json", "yaml")

_LOGGER = get_logger("sigunify.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigunify", description="Parse call statements and unify their signatures"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=session.DEFAULT_CONFIG_PATH if session.DEFAULT_CONFIG_PATH.exists() else None,
        help="Optional path to a session configuration YAML file.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        metavar="KEY=VALUE",
        help="Override configuration values using dot notation (e.g. parser.strict_arguments=True).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log unifier decisions")

    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_run_parser(subparsers)
    _add_tokens_parser(subparsers)
    _add_split_parser(subparsers)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.verbose:
        telemetry_logger.set_level("DEBUG")

    try:
        overrides = _parse_overrides(args.overrides)
        config = session.load_configuration(args.config, overrides=overrides)
        _LOGGER.debug("session configuration: %s", config.to_dict())
        if args.command == "run":
            return _cmd_run(args, config)
        if args.command == "tokens":
            return _cmd_tokens(args)
        if args.command == "split":
            return _cmd_split(args)
    except (OSError, ValueError, StatementError) as exc:
        print(f"[sigunify] error: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


# ---------------------------------------------------------------------------
# Sub-command wiring


def _add_run_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("run", help="Process a file of statements in order")
    parser.add_argument("source", help="Statement file, or '-' to read standard input")
    parser.add_argument(
        "--format",
        choices=_FORMAT_CHOICES,
        default="text",
        help="How results are printed",
    )
    parser.add_argument("--table", action="store_true", help="Print the final symbol table")
    parser.add_argument("--stats", action="store_true", help="Print metric summaries")


def _add_tokens_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("tokens", help="Show the token stream for one statement")
    parser.add_argument("line", help="Statement text")


def _add_split_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("split", help="Split a signature at its top-level arrows")
    parser.add_argument("signature", help="Signature text, e.g. '(A -> B) -> C'")


# ---------------------------------------------------------------------------
# Command implementations


def _cmd_run(args: argparse.Namespace, config: SessionConfig) -> int:
    text = _read_source(args.source)
    runner = session.Session(config, registry=metrics.MetricsRegistry())
    results = runner.run_text(text)

    payload: dict[str, Any] = {"results": [result.to_dict() for result in results]}
    if args.table:
        payload["table"] = runner.table.to_dict()
    if args.stats:
        payload["stats"] = runner.registry.summaries()

    if args.format == "json":
        print(json.dumps(payload, indent=2, sort_keys=True))
    elif args.format == "yaml":
        print(yaml.safe_dump(payload, sort_keys=True), end="")
    else:
        for result in results:
            print(result.describe())
        if args.table:
            for name in runner.table:
                print(f"{name} : {runner.table.resolved(name)}")
        if args.stats:
            for name, summary in payload["stats"].items():
                print(f"{name}: {summary.get('total', 0)}")

    return 1 if runner.failures else 0


def _cmd_tokens(args: argparse.Namespace) -> int:
    for token in tokenize(args.line):
        suffix = f" [{token.primitive.value}]" if token.primitive is not None else ""
        print(f"{token.column}:{token.kind} {token.text!r}{suffix}")
    return 0


def _cmd_split(args: argparse.Namespace) -> int:
    for part in split_signature(args.signature):
        print(part)
    return 0


# ---------------------------------------------------------------------------
# Helpers


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _parse_overrides(raw: Sequence[str] | None) -> Mapping[str, Any]:
    overrides: dict[str, Any] = {}
    if not raw:
        return overrides
    for item in raw:
        key, sep, value_text = item.partition("=")
        if not sep:
            raise ValueError(f"override '{item}' is missing '='")
        key_parts = [part for part in key.split(".") if part]
        if not key_parts:
            raise ValueError("override key must not be empty")
        value = _coerce_literal(value_text)
        cursor = overrides
        for part in key_parts[:-1]:
            cursor = cursor.setdefault(part, {})  # type: ignore[assignment]
            if not isinstance(cursor, dict):
                raise ValueError(f"override '{key}' conflicts with an existing value")
        cursor[key_parts[-1]] = value
    return overrides


def _coerce_literal(value: str) -> Any:
    try:
        return ast.literal_eval(value)
    except (ValueError, SyntaxError):
        return value


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
