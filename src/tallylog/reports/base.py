"""Base reporter protocol for tallylog output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tallylog.types import OutcomeEvent


class Reporter(Protocol):
    """Protocol defining the interface adapters drive.

    Calls are synchronous and may arrive from several worker threads at
    once; implementations serialize internally.
    """

    def reset(self) -> None:
        """Called when a test run starts."""
        ...

    def log(self, event: OutcomeEvent) -> None:
        """Called once for each observed test outcome."""
        ...

    def show_summary(self) -> None:
        """Called after all tests complete."""
        ...
