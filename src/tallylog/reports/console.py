"""Build a console-backed reporting engine from resolved configuration."""

from __future__ import annotations

import logging
from typing import TextIO

from rich.console import Console

from tallylog.config.resolver import ResolvedConfig
from tallylog.reports.engine import ReportingEngine
from tallylog.reports.sink import ConsoleSink, OutputSink
from tallylog.reports.theme import Painter, build_theme


def create_console(
    config: ResolvedConfig,
    *,
    file: TextIO | None = None,
    stderr: bool = False,
) -> Console:
    """Create a console carrying the configured theme and color setting.

    With ``file=None`` the console looks up ``sys.stdout``/``sys.stderr`` on
    every write, so it follows stream swaps done by the host.
    """
    return Console(
        file=file,
        stderr=stderr,
        theme=build_theme(config.theme),
        no_color=config.no_color,
        highlight=False,
        emoji=False,
        markup=False,
    )


def create_engine(
    config: ResolvedConfig,
    *,
    console: Console | None = None,
    sink: OutputSink | None = None,
    logger: logging.Logger | None = None,
) -> ReportingEngine:
    """Wire a :class:`ReportingEngine` to a console sink."""
    if sink is None:
        sink = ConsoleSink(console or create_console(config), prefix=config.log_prefix)
    return ReportingEngine(
        config,
        sink,
        painter=Painter(no_color=config.no_color),
        logger=logger,
    )


__all__ = ["create_console", "create_engine"]
