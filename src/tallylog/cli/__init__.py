"""CLI module for inspecting tallylog configuration."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from dotenv import dotenv_values
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from tallylog.config import (
    Diagnostic,
    ResolvedConfig,
    describe,
    parse_parameters,
    render_help,
    resolve,
)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the tallylog CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if args.command == "options":
        raise SystemExit(_run_options(args, Console()))

    if args.command == "check":
        raise SystemExit(_run_check(args, Console()))

    parser.print_help()
    raise SystemExit(0)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tallylog",
        description="Inspect tallylog test output configuration",
    )
    subparsers = parser.add_subparsers(dest="command")

    options_parser = subparsers.add_parser(
        "options", help="Show every option with its help text and current value"
    )
    check_parser = subparsers.add_parser(
        "check", help="Resolve configuration and report any problems"
    )

    for p in (options_parser, check_parser):
        p.add_argument(
            "parameters",
            nargs="*",
            metavar="KEY=VALUE",
            help="Parameters, as a test host would pass them",
        )
        p.add_argument(
            "--env-file",
            type=str,
            help="dotenv file merged underneath the process environment",
        )

    return parser


def _environment(env_file: str | None) -> dict[str, str | None]:
    environ: dict[str, str | None] = {}
    if env_file:
        environ.update(dotenv_values(Path(env_file)))
    environ.update(os.environ)
    return environ


def _resolve_args(
    args: argparse.Namespace, console: Console
) -> tuple[ResolvedConfig, list[Diagnostic]] | None:
    parameters, malformed = parse_parameters(args.parameters)
    if malformed:
        for pair in malformed:
            console.print(f"[red]Malformed parameter (expected KEY=VALUE): {escape(pair)}[/red]")
        return None

    if args.env_file and not Path(args.env_file).exists():
        console.print(f"[red]Env file not found: {escape(args.env_file)}[/red]")
        return None

    return resolve(_environment(args.env_file), parameters)


def _run_options(args: argparse.Namespace, console: Console) -> int:
    """Print the configuration help block."""
    resolution = _resolve_args(args, console)
    if resolution is None:
        return 2
    config, _ = resolution
    for line in render_help(config):
        console.print(line, markup=False, highlight=False, soft_wrap=True)
    return 0


def _run_check(args: argparse.Namespace, console: Console) -> int:
    """Print diagnostics and the resolved value of every option."""
    resolution = _resolve_args(args, console)
    if resolution is None:
        return 2
    config, diagnostics = resolution

    _print_values(console, config)

    if not diagnostics:
        console.print("[green]Configuration OK[/green]")
        return 0

    for diagnostic in diagnostics:
        console.print(f"[yellow]WARNING:[/yellow] {escape(diagnostic.message)}", highlight=False)
    console.print(f"[red]{len(diagnostics)} problem(s) found[/red]")
    return 1


def _print_values(console: Console, config: ResolvedConfig) -> None:
    table = Table("Option", "Value", "Source")
    values: Mapping[str, object] = config.as_dict()
    for option in describe():
        source = "set" if option.name in config.explicit else "default"
        table.add_row(option.name, Text(repr(values[option.name])), source)
    console.print(table)


__all__ = ["main"]
