"""Shared types for tallylog."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


class OutcomeKind(Enum):
    """Outcome of a single test, as decided by the host."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    NONE = "none"  # Not run, or explicit-only tests
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class OutcomeEvent:
    """One observed test result."""

    test_name: str
    kind: OutcomeKind
    duration: timedelta = timedelta(0)
    error_message: str | None = None
    stack_trace: str | None = None

    @property
    def duration_ms(self) -> float:
        return self.duration / timedelta(milliseconds=1)
