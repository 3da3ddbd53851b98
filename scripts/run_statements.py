#!/usr/bin/env python3
"""Process a file of statements and print each result."""

from __future__ import annotations

import argparse
from pathlib import Path

from sigunify.driver import cli


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a statement file through sigunify")
    parser.add_argument("source", type=Path, help="Path to the statement file")
    parser.add_argument("--config", type=Path, help="Optional session configuration file")
    parser.add_argument(
        "--set", dest="overrides", action="append", help="Configuration overrides (key=value)"
    )
    parser.add_argument("--table", action="store_true", help="Print the final symbol table")
    parser.add_argument("--json", action="store_true", help="Emit results as JSON")
    args = parser.parse_args(argv)

    cli_args: list[str] = []
    if args.config:
        cli_args.extend(["--config", str(args.config)])
    for override in args.overrides or []:
        cli_args.extend(["--set", override])
    cli_args.extend(["run", str(args.source)])
    if args.table:
        cli_args.append("--table")
    if args.json:
        cli_args.extend(["--format", "json"])
    return cli.main(cli_args)


if __name__ == "__main__":
    raise SystemExit(main())
