"""Shared fixtures for unit tests."""

import io
from collections.abc import Callable
from datetime import datetime, timedelta

import pytest
from rich.console import Console

from tallylog.config import ResolvedConfig
from tallylog.reports import ConsoleSink, ReportingEngine
from tallylog.types import OutcomeEvent, OutcomeKind


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 12, 30, 45, 123000)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def _captured_console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, no_color=True, width=200)


def _output_lines(console: Console) -> list[str]:
    return [line.rstrip() for line in console.file.getvalue().splitlines()]


def _event(
    name: str,
    kind: OutcomeKind = OutcomeKind.PASS,
    ms: float = 5,
    message: str | None = None,
    stack: str | None = None,
) -> OutcomeEvent:
    return OutcomeEvent(
        test_name=name,
        kind=kind,
        duration=timedelta(milliseconds=ms),
        error_message=message,
        stack_trace=stack,
    )


@pytest.fixture
def make_event() -> Callable[..., OutcomeEvent]:
    return _event


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def console() -> Console:
    return _captured_console()


@pytest.fixture
def make_engine(console: Console, clock: FakeClock) -> Callable[..., ReportingEngine]:
    """Build an engine writing to the captured console; kwargs override options."""

    def factory(**overrides) -> ReportingEngine:
        config = ResolvedConfig(**overrides)
        sink = ConsoleSink(console, prefix=config.log_prefix)
        engine = ReportingEngine(config, sink, clock=clock)
        engine.reset()
        return engine

    return factory


@pytest.fixture
def lines(console: Console) -> Callable[[], list[str]]:
    return lambda: _output_lines(console)
