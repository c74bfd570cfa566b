"""Resolve option values from environment variables and host parameters.

Values are layered lowest to highest precedence:

1. descriptor defaults,
2. the ``NO_COLOR`` convention (``NoColor`` only),
3. ``TALLYLOG_*`` environment variables,
4. host-supplied parameters.

Keys are matched leniently (see :func:`tallylog.config.options.normalize_key`).
Nothing in here raises for bad input: unknown keys and invalid values come
back as :class:`Diagnostic` warnings and the previous value is kept.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, create_model

from tallylog.config.coercion import FALSY_VALUES, TRUTHY_VALUES, CoercionError, coerce
from tallylog.config.options import (
    ENV_PREFIX,
    NO_COLOR_ENV,
    OptionDescriptor,
    OptionKind,
    describe,
    find_option,
    is_reserved,
)


logger = logging.getLogger(__name__)

RawSource = Mapping[str, str | None]


class Severity(Enum):
    WARNING = "warning"


class DiagnosticKind(Enum):
    UNKNOWN_KEY = "unknown_key"
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A non-fatal problem found while resolving configuration."""

    kind: DiagnosticKind
    key: str
    message: str
    severity: Severity = Severity.WARNING


_FIELD_TYPES: dict[OptionKind, type] = {
    OptionKind.STRING: str,
    OptionKind.BOOL: bool,
    OptionKind.INT: int,
}


def _field_definitions() -> dict[str, Any]:
    definitions: dict[str, Any] = {}
    for option in describe():
        annotation: Any = _FIELD_TYPES[option.kind]
        if option.default is None:
            annotation = annotation | None
        definitions[option.field] = (annotation, option.default)
    return definitions


# One field per descriptor, in declaration order
_OptionFields = create_model("_OptionFields", **_field_definitions())


class ResolvedConfig(_OptionFields):
    """Fully populated, immutable option values for one run.

    Fields are generated from :data:`tallylog.config.options.OPTIONS` and are
    named after each descriptor's snake_case ``field``.
    """

    model_config = ConfigDict(frozen=True)

    # Descriptor names a source supplied a value for
    explicit: frozenset[str] = Field(default_factory=frozenset)

    def value_of(self, option: OptionDescriptor) -> Any:
        return getattr(self, option.field)

    def __getitem__(self, name: str) -> Any:
        option = find_option(name)
        if option is None:
            raise KeyError(name)
        return self.value_of(option)

    def as_dict(self) -> dict[str, Any]:
        """Values keyed by descriptor name, in declaration order."""
        return {option.name: self.value_of(option) for option in describe()}


class _Resolution:
    """Mutable scratch state while layering sources."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {option.field: option.default for option in describe()}
        self.explicit: set[str] = set()
        self.diagnostics: list[Diagnostic] = []

    def warn(self, kind: DiagnosticKind, key: str, message: str) -> None:
        logger.warning(message)
        self.diagnostics.append(Diagnostic(kind=kind, key=key, message=message))

    def apply(self, source: RawSource, *, prefix: str | None, origin: str) -> None:
        for key, raw in source.items():
            if prefix is not None and not key.lower().startswith(prefix.lower()):
                continue
            if is_reserved(key, prefix):
                continue

            option = find_option(key, prefix)
            if option is None:
                self.warn(
                    DiagnosticKind.UNKNOWN_KEY,
                    key,
                    f"Unrecognised tallylog {origin}: {key}",
                )
                continue

            if raw is None or raw == "":
                continue

            try:
                value = coerce(option.kind, raw)
            except CoercionError as exc:
                self.warn(
                    DiagnosticKind.INVALID_VALUE,
                    key,
                    f"{exc} specified for '{option.name}' ({origin} {key})",
                )
                continue

            logger.debug("Setting %s to %r from %s %s", option.name, value, origin, key)
            self.values[option.field] = value
            self.explicit.add(option.name)


def resolve(
    env_source: RawSource | None = None,
    param_source: RawSource | None = None,
) -> tuple[ResolvedConfig, list[Diagnostic]]:
    """Resolve the final configuration.

    Args:
        env_source: Environment mapping. Only ``TALLYLOG_``-prefixed keys are
            considered; ``NO_COLOR`` switches the ``NoColor`` default on.
        param_source: Host parameters (no prefix).

    Returns:
        The resolved configuration and any warnings produced on the way.
    """
    env_source = env_source or {}
    param_source = param_source or {}

    resolution = _Resolution()
    if NO_COLOR_ENV in env_source:
        resolution.values["no_color"] = True

    resolution.apply(env_source, prefix=ENV_PREFIX, origin="environment variable")
    resolution.apply(param_source, prefix=None, origin="parameter")

    config = ResolvedConfig(**resolution.values, explicit=frozenset(resolution.explicit))
    return config, resolution.diagnostics


def parse_parameters(pairs: Sequence[str]) -> tuple[dict[str, str], list[str]]:
    """Split ``KEY=VALUE`` strings into a parameter source.

    Returns the mapping and the entries that had no ``=`` or an empty key.
    """
    parameters: dict[str, str] = {}
    malformed: list[str] = []
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            malformed.append(pair)
            continue
        parameters[key] = value
    return parameters, malformed


def debug_requested(
    env_source: RawSource | None = None,
    param_source: RawSource | None = None,
) -> bool:
    """True when the reserved ``debug`` key is set to a truthy value."""
    sources = ((env_source or {}, ENV_PREFIX), (param_source or {}, None))
    for source, prefix in sources:
        for key, raw in source.items():
            if prefix is not None and not key.lower().startswith(prefix.lower()):
                continue
            if is_reserved(key, prefix) and raw and raw.lower() in TRUTHY_VALUES:
                return True
    return False


def help_requested(config: ResolvedConfig, diagnostics: list[Diagnostic]) -> bool:
    """Decide whether configuration help should be shown.

    Help shows when ``ShowHelp`` was supplied and is on, or when an unknown
    key was seen and help was not switched off.
    """
    if not config.show_help:
        return False
    if "ShowHelp" in config.explicit:
        return True
    return any(d.kind is DiagnosticKind.UNKNOWN_KEY for d in diagnostics)


def render_help(config: ResolvedConfig) -> list[str]:
    """Render one help line per option plus the accepted flag tokens."""
    lines = ["tallylog configuration help:"]
    for option in describe():
        lines.append(f"- {option.env_name} : {option.help} ({config.value_of(option)})")
    lines.append("")
    lines.append(f"Flags can be set on with one of:  {','.join(TRUTHY_VALUES)}")
    lines.append(f"Flags can be set off with one of: {','.join(FALSY_VALUES)}")
    return lines


__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "RawSource",
    "ResolvedConfig",
    "Severity",
    "debug_requested",
    "help_requested",
    "parse_parameters",
    "render_help",
    "resolve",
]
