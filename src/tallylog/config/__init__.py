"""Configuration layer: option descriptors and source resolution."""

from tallylog.config.coercion import FALSY_VALUES, TRUTHY_VALUES
from tallylog.config.options import (
    ENV_PREFIX,
    OptionDescriptor,
    OptionKind,
    describe,
    find_option,
    normalize_key,
)
from tallylog.config.resolver import (
    Diagnostic,
    DiagnosticKind,
    ResolvedConfig,
    Severity,
    debug_requested,
    help_requested,
    parse_parameters,
    render_help,
    resolve,
)


__all__ = [
    "ENV_PREFIX",
    "FALSY_VALUES",
    "TRUTHY_VALUES",
    "Diagnostic",
    "DiagnosticKind",
    "OptionDescriptor",
    "OptionKind",
    "ResolvedConfig",
    "Severity",
    "debug_requested",
    "describe",
    "find_option",
    "help_requested",
    "normalize_key",
    "parse_parameters",
    "render_help",
    "resolve",
]
