"""Option descriptors for tallylog configuration.

Every configurable behaviour of the reporting engine is declared once in
:data:`OPTIONS`. The table drives both resolution (see
:mod:`tallylog.config.resolver`) and the generated help text, so its order
is the order users see.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tallylog.errors import OptionDefinitionError


ENV_PREFIX = "TALLYLOG_"
DEBUG_KEY = "debug"
NO_COLOR_ENV = "NO_COLOR"

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

_SEPARATORS = re.compile(r"[_.\-]")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class OptionKind(Enum):
    """Semantic type of an option value."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"


@dataclass(frozen=True, slots=True)
class OptionDescriptor:
    """A named, typed, documented configuration slot."""

    name: str
    kind: OptionKind
    default: Any
    help: str
    field: str

    @property
    def normalized(self) -> str:
        return normalize_key(self.name)

    @property
    def env_name(self) -> str:
        """Environment variable spelling used in help output."""
        return ENV_PREFIX + _CAMEL_BOUNDARY.sub("_", self.name).upper()


def normalize_key(key: str, prefix: str | None = None) -> str:
    """Normalize a raw source key for lenient matching.

    Strips ``prefix`` (case-insensitively) when present, lower-cases the
    rest and drops ``_``, ``-`` and ``.`` so that ``PassLabel``,
    ``pass_label`` and ``PASS.LABEL`` all compare equal.
    """
    if prefix and key.lower().startswith(prefix.lower()):
        key = key[len(prefix):]
    return _SEPARATORS.sub("", key.lower())


def _option(name: str, kind: OptionKind, default: Any, help: str) -> OptionDescriptor:
    field = _CAMEL_BOUNDARY.sub("_", name).lower()
    return OptionDescriptor(name=name, kind=kind, default=default, help=help, field=field)


OPTIONS: tuple[OptionDescriptor, ...] = (
    _option("PassLabel", OptionKind.STRING, "✅", "Label printed before passed tests"),
    _option("FailLabel", OptionKind.STRING, "🛑", "Label printed before failed tests"),
    _option(
        "NoneLabel",
        OptionKind.STRING,
        "❓",
        "Label printed before tests with no outcome (eg explicit tests)",
    ),
    _option("SkipLabel", OptionKind.STRING, "🚫", "Label printed before skipped tests"),
    _option(
        "NotFoundLabel",
        OptionKind.STRING,
        "🤷",
        "Label printed before tests the host could not find",
    ),
    _option(
        "NoColor",
        OptionKind.BOOL,
        False,
        "Disable colored output (also enabled when NO_COLOR is set)",
    ),
    _option("Theme", OptionKind.STRING, "default", "Color theme: default or darker"),
    _option(
        "HighlightSlowTests",
        OptionKind.BOOL,
        True,
        "Mark slow tests inline and list them in the summary",
    ),
    _option(
        "SlowTestThresholdMs",
        OptionKind.INT,
        1000,
        "Duration (ms) at or above which a test counts as slow",
    ),
    _option(
        "ShowTotals",
        OptionKind.BOOL,
        False,
        "Show passed/failed/skipped totals and run time in the summary",
    ),
    _option(
        "OutputFailuresInline",
        OptionKind.BOOL,
        False,
        "Print failure messages and stack traces as soon as a test fails",
    ),
    _option(
        "ShowHelp",
        OptionKind.BOOL,
        True,
        "Show this help when requested or when unknown settings are found",
    ),
    _option("LogPrefix", OptionKind.STRING, "", "Prefix added to every output line"),
    _option("TestNamePrefix", OptionKind.STRING, "", "Prefix added to every test name"),
    _option(
        "SummaryStartMarker",
        OptionKind.STRING,
        None,
        "Line printed when the summary starts",
    ),
    _option(
        "SummaryCompleteMarker",
        OptionKind.STRING,
        None,
        "Line printed when the summary is complete",
    ),
    _option(
        "FailureStartMarker",
        OptionKind.STRING,
        None,
        "Line printed before failure details (replaces the 'Failures:' header)",
    ),
    _option(
        "FailureCompleteMarker",
        OptionKind.STRING,
        None,
        "Line printed after failure details",
    ),
    _option(
        "SlowSummaryStartMarker",
        OptionKind.STRING,
        None,
        "Line printed before the slow test list",
    ),
    _option(
        "SlowSummaryCompleteMarker",
        OptionKind.STRING,
        None,
        "Line printed after the slow test list",
    ),
    _option(
        "SummaryTotalsStartMarker",
        OptionKind.STRING,
        None,
        "Line printed before the totals block",
    ),
    _option(
        "SummaryTotalsCompleteMarker",
        OptionKind.STRING,
        None,
        "Line printed after the totals block",
    ),
    _option(
        "FailureIndexPlaceholder",
        OptionKind.STRING,
        None,
        "Literal used instead of [n] when listing failures",
    ),
    _option(
        "SlowIndexPlaceholder",
        OptionKind.STRING,
        None,
        "Literal used instead of [n] when listing slow tests",
    ),
    _option(
        "MaxSlowTestsToDisplay",
        OptionKind.INT,
        10,
        "Maximum number of slow tests listed in the summary",
    ),
    _option(
        "ShowTimestamps",
        OptionKind.BOOL,
        False,
        "Include a timestamp on every test result line",
    ),
    _option(
        "TimestampFormat",
        OptionKind.STRING,
        DEFAULT_TIMESTAMP_FORMAT,
        "strftime format used for timestamps",
    ),
)


def _index(options: tuple[OptionDescriptor, ...]) -> dict[str, OptionDescriptor]:
    index: dict[str, OptionDescriptor] = {}
    for option in options:
        if not isinstance(option.kind, OptionKind):
            msg = f"Option {option.name} has unsupported kind {option.kind!r}"
            raise OptionDefinitionError(msg)
        key = option.normalized
        if key in index:
            msg = f"Option {option.name} collides with {index[key].name}"
            raise OptionDefinitionError(msg)
        if key == DEBUG_KEY:
            msg = f"Option {option.name} shadows the reserved '{DEBUG_KEY}' key"
            raise OptionDefinitionError(msg)
        index[key] = option
    return index


_OPTIONS_BY_KEY = _index(OPTIONS)


def describe() -> tuple[OptionDescriptor, ...]:
    """Return every option descriptor in declaration order."""
    return OPTIONS


def find_option(key: str, prefix: str | None = None) -> OptionDescriptor | None:
    """Look up the descriptor a raw source key refers to, if any."""
    return _OPTIONS_BY_KEY.get(normalize_key(key, prefix))


def is_reserved(key: str, prefix: str | None = None) -> bool:
    """True for keys that are handled outside the option table."""
    return normalize_key(key, prefix) == DEBUG_KEY


__all__ = [
    "DEFAULT_TIMESTAMP_FORMAT",
    "ENV_PREFIX",
    "OPTIONS",
    "OptionDescriptor",
    "OptionKind",
    "describe",
    "find_option",
    "is_reserved",
    "normalize_key",
]
