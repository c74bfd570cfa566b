"""Reporting module for tallylog test output."""

from tallylog.reports.base import Reporter
from tallylog.reports.console import create_console, create_engine
from tallylog.reports.engine import ReportingEngine, RunState
from tallylog.reports.formatting import format_duration, format_timestamp
from tallylog.reports.sink import ConsoleSink, OutputSink, split_lines
from tallylog.reports.theme import Painter, Role, build_theme


__all__ = [
    "ConsoleSink",
    "OutputSink",
    "Painter",
    "Reporter",
    "ReportingEngine",
    "Role",
    "RunState",
    "build_theme",
    "create_console",
    "create_engine",
    "format_duration",
    "format_timestamp",
    "split_lines",
]
