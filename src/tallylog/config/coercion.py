"""String-to-value coercion for option kinds."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from tallylog.config.options import OptionKind
from tallylog.errors import OptionDefinitionError


TRUTHY_VALUES: tuple[str, ...] = ("yes", "true", "1", "on", "enable")
FALSY_VALUES: tuple[str, ...] = ("no", "false", "0", "off", "disable")

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")


class CoercionError(ValueError):
    """Raised when a raw value cannot be converted to an option's kind."""


def coerce_string(value: str) -> str:
    return value


def coerce_bool(value: str) -> bool:
    token = value.lower()
    if token in TRUTHY_VALUES:
        return True
    if token in FALSY_VALUES:
        return False
    msg = f"Invalid flag value '{value}'"
    raise CoercionError(msg)


def coerce_int(value: str) -> int:
    if not _INTEGER.fullmatch(value):
        msg = f"Invalid integer value '{value}'"
        raise CoercionError(msg)
    return int(value, 10)


COERCERS: dict[OptionKind, Callable[[str], Any]] = {
    OptionKind.STRING: coerce_string,
    OptionKind.BOOL: coerce_bool,
    OptionKind.INT: coerce_int,
}

_missing = [kind.name for kind in OptionKind if kind not in COERCERS]
if _missing:
    raise OptionDefinitionError(f"No coercer registered for: {', '.join(_missing)}")


def coerce(kind: OptionKind, value: str) -> Any:
    """Convert ``value`` to ``kind``; raises :class:`CoercionError` on bad input."""
    return COERCERS[kind](value)


__all__ = ["COERCERS", "FALSY_VALUES", "TRUTHY_VALUES", "CoercionError", "coerce"]
