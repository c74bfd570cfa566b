"""tallylog pytest plugin, auto-registered via the ``pytest11`` entry point.

The plugin stays dormant unless ``--tallylog`` is passed (or ``tallylog =
true`` is set in the ini file). Configuration comes from ``TALLYLOG_*``
environment variables and ``--tallylog-option KEY=VALUE`` parameters, the
latter taking precedence.

A reporter must never break the run it is observing: every hook body runs
under :meth:`TallylogPlugin._guard`, which reports exceptions to stderr and
carries on.
"""

from __future__ import annotations

import logging
import os
import traceback
from collections.abc import Iterator, Sequence
from contextlib import contextmanager, nullcontext
from dataclasses import replace
from datetime import timedelta
from typing import Any

import pytest
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from tallylog.config import (
    debug_requested,
    help_requested,
    parse_parameters,
    render_help,
    resolve,
)
from tallylog.reports.base import Reporter
from tallylog.reports.console import create_console, create_engine
from tallylog.reports.sink import ConsoleSink, OutputSink
from tallylog.types import OutcomeEvent, OutcomeKind


PLUGIN_NAME = "tallylog-reporter"

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("tallylog", "live test output with marker-framed summaries")
    group.addoption(
        "--tallylog",
        action="store_true",
        default=False,
        help="Enable tallylog output",
    )
    group.addoption(
        "--tallylog-option",
        action="append",
        default=[],
        dest="tallylog_options",
        metavar="KEY=VALUE",
        help="Set a tallylog option (overrides TALLYLOG_* environment variables)",
    )
    parser.addini("tallylog", type="bool", default=False, help="Enable tallylog output")


def enable_debug_logging(console: Console) -> None:
    root = logging.getLogger("tallylog")
    root.setLevel(logging.DEBUG)
    root.addHandler(RichHandler(console=console, show_path=False))


def report_error(console: Console, hook: str, exc: Exception) -> None:
    """Write one error block for a failure inside tallylog."""
    console.print(
        "=================== tallylog error ===================\n"
        f"Error running '{hook}': {exc}\n"
        f"{traceback.format_exc()}"
        "===================== continuing =====================",
        soft_wrap=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    if not (config.getoption("tallylog", False) or config.getini("tallylog")):
        return

    capman = config.pluginmanager.getplugin("capturemanager")
    errors = Console(stderr=True, highlight=False, markup=False, emoji=False)
    with _capture_disabled(capman):
        try:
            plugin = _create_plugin(config, capman, errors)
        except Exception as exc:
            report_error(errors, "pytest_configure", exc)
            return
    config.pluginmanager.register(plugin, PLUGIN_NAME)


def _create_plugin(config: pytest.Config, capman: Any, errors: Console) -> TallylogPlugin:
    parameters, malformed = parse_parameters(config.getoption("tallylog_options", []) or [])
    if debug_requested(os.environ, parameters):
        enable_debug_logging(errors)
    for pair in malformed:
        errors.print(f"WARNING: Ignoring malformed tallylog option: {pair}", soft_wrap=True)

    resolved, diagnostics = resolve(os.environ, parameters)
    for diagnostic in diagnostics:
        errors.print(f"WARNING: {diagnostic.message}", soft_wrap=True)
    if help_requested(resolved, diagnostics):
        errors.print("\n".join(render_help(resolved)), soft_wrap=True)

    sink = _UncapturedSink(ConsoleSink(create_console(resolved), resolved.log_prefix), capman)
    engine = create_engine(resolved, sink=sink)
    logger.debug("tallylog enabled: %s", resolved.as_dict())
    return TallylogPlugin(engine, capman=capman, errors=errors)


def pytest_unconfigure(config: pytest.Config) -> None:
    plugin = config.pluginmanager.get_plugin(PLUGIN_NAME)
    if plugin is not None:
        config.pluginmanager.unregister(plugin, PLUGIN_NAME)


@contextmanager
def _capture_disabled(capman: Any) -> Iterator[None]:
    context = capman.global_and_fixture_disabled() if capman is not None else nullcontext()
    with context:
        yield


class _UncapturedSink:
    """Sink wrapper that lifts pytest output capture around each write."""

    def __init__(self, inner: OutputSink, capman: Any) -> None:
        self.inner = inner
        self.capman = capman

    def write_line(self, text: str | Text) -> None:
        with _capture_disabled(self.capman):
            self.inner.write_line(text)


def _skip_reason(report: pytest.TestReport) -> str:
    wasxfail = getattr(report, "wasxfail", None)
    if wasxfail is not None:
        return f"xfail: {wasxfail}" if wasxfail else "xfail"
    longrepr = report.longrepr
    if isinstance(longrepr, tuple) and len(longrepr) == 3:
        reason = str(longrepr[2])
        return reason.removeprefix("Skipped: ")
    return ""


def _failure_message(report: pytest.TestReport) -> str:
    crash = getattr(report.longrepr, "reprcrash", None)
    message = getattr(crash, "message", None)
    if message:
        return message
    return report.longreprtext.splitlines()[-1] if report.longreprtext else ""


def event_from_report(report: pytest.TestReport) -> OutcomeEvent | None:
    """Translate a pytest phase report into an outcome event.

    Only the ``call`` phase reports passes; ``setup`` reports skips and
    errors; ``teardown`` only reports errors. Anything else is ignored.
    """
    duration = timedelta(seconds=max(report.duration, 0.0))
    if report.failed:
        return OutcomeEvent(
            test_name=report.nodeid,
            kind=OutcomeKind.FAIL,
            duration=duration,
            error_message=_failure_message(report),
            stack_trace=report.longreprtext,
        )
    if report.skipped and report.when in ("setup", "call"):
        return OutcomeEvent(
            test_name=report.nodeid,
            kind=OutcomeKind.SKIP,
            duration=duration,
            error_message=_skip_reason(report),
        )
    if report.passed and report.when == "call":
        return OutcomeEvent(test_name=report.nodeid, kind=OutcomeKind.PASS, duration=duration)
    return None


class TallylogPlugin:
    """Feeds pytest session events into a :class:`Reporter`.

    Each test produces exactly one outcome. A ``call`` pass is held until the
    test's ``teardown`` report arrives, so a teardown error turns it into a
    failure instead of adding a second result.
    """

    def __init__(
        self,
        reporter: Reporter,
        *,
        capman: Any = None,
        errors: Console | None = None,
    ) -> None:
        self.reporter = reporter
        self.capman = capman
        self.errors = errors or Console(stderr=True, highlight=False, markup=False)
        self._pending: dict[str, OutcomeEvent] = {}
        self._logged: set[str] = set()

    @contextmanager
    def _guard(self, hook: str) -> Iterator[None]:
        try:
            yield
        except Exception as exc:
            with _capture_disabled(self.capman):
                report_error(self.errors, hook, exc)

    def pytest_sessionstart(self, session: pytest.Session) -> None:
        with self._guard("pytest_sessionstart"):
            self._pending.clear()
            self._logged.clear()
            self.reporter.reset()

    def pytest_deselected(self, items: Sequence[pytest.Item]) -> None:
        with self._guard("pytest_deselected"):
            for item in items:
                self.reporter.log(
                    OutcomeEvent(
                        test_name=item.nodeid,
                        kind=OutcomeKind.NONE,
                        error_message="deselected",
                    )
                )

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        with self._guard("pytest_runtest_logreport"):
            event = event_from_report(report)
            if report.when == "teardown":
                self._finish(report.nodeid, event)
            elif event is None:
                return
            elif event.kind is OutcomeKind.PASS:
                self._pending[report.nodeid] = event
            elif report.nodeid not in self._logged:
                self._logged.add(report.nodeid)
                self.reporter.log(event)

    def _finish(self, nodeid: str, teardown: OutcomeEvent | None) -> None:
        passed = self._pending.pop(nodeid, None)
        if nodeid in self._logged:
            self._logged.discard(nodeid)
            return
        if teardown is not None:
            if passed is not None:
                teardown = replace(teardown, duration=passed.duration)
            self.reporter.log(teardown)
        elif passed is not None:
            self.reporter.log(passed)

    def pytest_sessionfinish(self, session: pytest.Session, exitstatus: int) -> None:
        with self._guard("pytest_sessionfinish"):
            # Passes whose teardown never reported, e.g. after an interrupt
            for event in self._pending.values():
                self.reporter.log(event)
            self._pending.clear()
            self.reporter.show_summary()


__all__ = ["TallylogPlugin", "event_from_report", "report_error"]
