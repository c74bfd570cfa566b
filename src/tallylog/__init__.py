"""tallylog - live test progress output with marker-framed summaries."""

from .config import Diagnostic, ResolvedConfig, describe, resolve
from .reports import ConsoleSink, Painter, Reporter, ReportingEngine, build_theme
from .types import OutcomeEvent, OutcomeKind
from .version import __version__


__all__ = [
    # Configuration
    "Diagnostic",
    "ResolvedConfig",
    "describe",
    "resolve",
    # Reporting
    "ConsoleSink",
    "Painter",
    "Reporter",
    "ReportingEngine",
    "build_theme",
    # Events
    "OutcomeEvent",
    "OutcomeKind",
    "__version__",
]
