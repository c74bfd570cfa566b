"""Live per-test output and the deferred run summary.

The engine is a passive event sink. Hosts call :meth:`ReportingEngine.reset`
when a run starts, one of the ``log_*`` methods per test outcome (possibly
from several threads at once), and :meth:`ReportingEngine.show_summary`
when the run ends.

Summary output is grouped into sections that can be framed by caller-chosen
marker lines::

    <SummaryStartMarker>
    <SlowSummaryStartMarker>
    [1] slow.test.name (1.20 s)
    <SlowSummaryCompleteMarker>

    <FailureStartMarker>

    [1] failed.test.name
      message
      stack trace
    <FailureCompleteMarker>

    <SummaryTotalsStartMarker>
    Test results:
      ...
    <SummaryTotalsCompleteMarker>
    <SummaryCompleteMarker>

State is not cleared by :meth:`~ReportingEngine.show_summary`. Without a
:meth:`~ReportingEngine.reset` between runs, counters and buffers keep
accumulating.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import assert_never

from rich.text import Text

from tallylog.config.options import DEFAULT_TIMESTAMP_FORMAT
from tallylog.config.resolver import ResolvedConfig
from tallylog.reports.formatting import format_duration, format_timestamp, indent_lines
from tallylog.reports.sink import OutputSink
from tallylog.reports.theme import Painter, Role
from tallylog.types import OutcomeEvent, OutcomeKind


STORED_FAILURE_INDENT = "  "
INLINE_FAILURE_INDENT = "    "
SLOW_SUFFIX = " (slow)"


@dataclass
class RunState:
    """Counters and buffered output for the current run."""

    started_at: datetime
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    failures: list[OutcomeEvent] = field(default_factory=list)
    slow: list[OutcomeEvent] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped

    def copy(self) -> RunState:
        return RunState(
            started_at=self.started_at,
            passed=self.passed,
            failed=self.failed,
            skipped=self.skipped,
            failures=list(self.failures),
            slow=list(self.slow),
        )


class ReportingEngine:
    """Renders test outcomes and the end-of-run summary."""

    def __init__(
        self,
        config: ResolvedConfig,
        sink: OutputSink,
        *,
        painter: Painter | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.sink = sink
        self.painter = painter or Painter(no_color=config.no_color)
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._lock = threading.RLock()
        self._state = RunState(started_at=clock())

    @property
    def state(self) -> RunState:
        """A snapshot of the current run state."""
        with self._lock:
            return self._state.copy()

    def reset(self) -> None:
        with self._lock:
            self._state = RunState(started_at=self._clock())
            self.logger.debug("Run state reset at %s", self._state.started_at)

    def log(self, event: OutcomeEvent) -> None:
        """Dispatch ``event`` to the handler for its outcome."""
        match event.kind:
            case OutcomeKind.PASS:
                self.log_pass(event)
            case OutcomeKind.FAIL:
                self.log_fail(event)
            case OutcomeKind.SKIP:
                self.log_skipped(event)
            case OutcomeKind.NONE:
                self.log_none(event)
            case OutcomeKind.NOT_FOUND:
                self.log_not_found(event)
            case _:
                assert_never(event.kind)

    def log_pass(self, event: OutcomeEvent) -> None:
        with self._lock:
            self.logger.debug("pass: %s (%s)", event.test_name, event.duration)
            self._state.passed += 1
            slow = self._track_slow(event)
            self._write_result(Role.PASS, self.config.pass_label, event, slow)

    def log_fail(self, event: OutcomeEvent) -> None:
        with self._lock:
            self.logger.debug("fail: %s (%s)", event.test_name, event.duration)
            self._state.failed += 1
            self._state.failures.append(event)
            slow = self._track_slow(event)
            self._write_result(Role.FAIL, self.config.fail_label, event, slow)
            if self.config.output_failures_inline:
                self._write_failure_body(event, INLINE_FAILURE_INDENT)

    def log_skipped(self, event: OutcomeEvent) -> None:
        with self._lock:
            self.logger.debug("skip: %s", event.test_name)
            self._state.skipped += 1
            self._write_disabled(self.config.skip_label, event)

    def log_none(self, event: OutcomeEvent) -> None:
        with self._lock:
            self.logger.debug("none: %s", event.test_name)
            self._write_disabled(self.config.none_label, event)

    def log_not_found(self, event: OutcomeEvent) -> None:
        with self._lock:
            self.logger.debug("not found: %s", event.test_name)
            self._state.skipped += 1
            self.sink.write_line(
                self.painter(Role.ERROR, self._headline(self.config.not_found_label, event))
            )

    def show_summary(self) -> None:
        """Render the deferred summary. Buffers are left untouched."""
        with self._lock:
            state = self._state
            self.logger.debug(
                "Summary: %d passed, %d failed, %d skipped, %d slow",
                state.passed,
                state.failed,
                state.skipped,
                len(state.slow),
            )
            self._write_marker(self.config.summary_start_marker)
            if self.config.highlight_slow_tests:
                self._write_slow_tests(state)
            if state.failures:
                self.write_break()
                self._write_failures(state)
            if self.config.show_totals:
                self.write_break()
                self._write_totals(state)
            self._write_marker(self.config.summary_complete_marker)

    def write_break(self) -> None:
        self.sink.write_line("")

    def is_slow(self, event: OutcomeEvent) -> bool:
        return (
            self.config.highlight_slow_tests
            and event.duration_ms >= self.config.slow_test_threshold_ms
        )

    def test_name_for(self, event: OutcomeEvent) -> str:
        return f"{self.config.test_name_prefix}{event.test_name}"

    def _track_slow(self, event: OutcomeEvent) -> bool:
        slow = self.is_slow(event)
        if slow:
            self._state.slow.append(event)
        return slow

    def _headline(self, label: str, event: OutcomeEvent) -> str:
        timestamp = ""
        if self.config.show_timestamps:
            timestamp = f" [{format_timestamp(self._clock(), self.config.timestamp_format)}]"
        return f"{label}{timestamp} {self.test_name_for(event)}"

    def _duration_text(self, event: OutcomeEvent, slow: bool) -> Text:
        duration = format_duration(event.duration)
        if slow:
            return self.painter(Role.SLOW, f"{duration}{SLOW_SUFFIX}")
        return Text(duration)

    def _write_result(self, role: Role, label: str, event: OutcomeEvent, slow: bool) -> None:
        self.sink.write_line(
            Text.assemble(
                self.painter(role, self._headline(label, event)),
                " [",
                self._duration_text(event, slow),
                "]",
            )
        )

    def _write_disabled(self, label: str, event: OutcomeEvent) -> None:
        line = self.painter(Role.DISABLED, self._headline(label, event))
        reason = event.error_message or ""
        if reason:
            line = Text.assemble(
                line,
                " [ ",
                self.painter(Role.DISABLED_REASON, reason),
                " ]",
            )
        self.sink.write_line(line)

    def _write_failure_body(self, event: OutcomeEvent, indent: str) -> None:
        for line in indent_lines(event.error_message, indent):
            self.sink.write_line(self.painter(Role.ERROR, line))
        for line in indent_lines(event.stack_trace, indent):
            self.sink.write_line(self.painter(Role.STACK_TRACE, line))

    def _write_marker(self, marker: str | None) -> None:
        if marker is not None:
            self.sink.write_line(marker)

    def _write_slow_tests(self, state: RunState) -> None:
        shown = state.slow[: max(self.config.max_slow_tests_to_display, 0)]
        self._write_marker(self.config.slow_summary_start_marker)
        if self.config.slow_summary_start_marker is None and shown:
            self.sink.write_line(self.painter(Role.WARN, "Slow tests:"))
        for idx, event in enumerate(shown, start=1):
            index = self.config.slow_index_placeholder or f"[{idx}]"
            duration = format_duration(event.duration)
            self.sink.write_line(
                self.painter(Role.WARN, f"{index} {self.test_name_for(event)} ({duration})")
            )
        self._write_marker(self.config.slow_summary_complete_marker)

    def _write_failures(self, state: RunState) -> None:
        if self.config.failure_start_marker is None:
            self.sink.write_line(self.painter(Role.FAIL, "Failures:"))
        else:
            self._write_marker(self.config.failure_start_marker)
        for idx, event in enumerate(state.failures, start=1):
            self.write_break()
            index = self.config.failure_index_placeholder or f"[{idx}]"
            self.sink.write_line(
                self.painter(Role.FAIL, f"{index} {self.test_name_for(event)}")
            )
            self._write_failure_body(event, STORED_FAILURE_INDENT)
        self._write_marker(self.config.failure_complete_marker)

    def _write_totals(self, state: RunState) -> None:
        finished = self._clock()
        run_time = (finished - state.started_at).total_seconds()
        self._write_marker(self.config.summary_totals_start_marker)
        for line in (
            "Test results:",
            f"  Passed:   {state.passed}",
            f"  Failed:   {state.failed}",
            f"  Skipped:  {state.skipped}",
            f"  Total:    {state.total}",
            f"  Run time: {run_time:.2f} seconds",
            f"  Started:  {format_timestamp(state.started_at, DEFAULT_TIMESTAMP_FORMAT)}",
            f"  Finished: {format_timestamp(finished, DEFAULT_TIMESTAMP_FORMAT)}",
        ):
            self.sink.write_line(line)
        self._write_marker(self.config.summary_totals_complete_marker)


__all__ = ["ReportingEngine", "RunState"]
