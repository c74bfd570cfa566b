"""Semantic color roles and themes.

Output code never picks colors directly: it paints a *role* (``pass``,
``fail``, ``slow`` ...) onto a string and the :class:`rich.theme.Theme`
installed on the console decides what that role looks like.
"""

from __future__ import annotations

from enum import Enum

from rich.text import Text
from rich.theme import Theme


class Role(str, Enum):
    """Semantic roles a piece of output can be painted with."""

    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    ERROR = "error"
    STACK_TRACE = "stack_trace"
    DEBUG = "debug"
    DISABLED = "disabled"
    DISABLED_REASON = "disabled_reason"
    SLOW = "slow"


DEFAULT_THEME_NAME = "default"

_THEMES: dict[str, dict[str, str]] = {
    "default": {
        Role.FAIL: "rgb(225,110,110)",
        Role.PASS: "rgb(110,225,0)",
        Role.WARN: "rgb(225,225,110)",
        Role.DEBUG: "rgb(110,110,225)",
        Role.STACK_TRACE: "rgb(110,225,225)",
        Role.ERROR: "rgb(225,110,225)",
        Role.DISABLED: "rgb(110,110,110)",
        Role.DISABLED_REASON: "rgb(80,80,80)",
        Role.SLOW: "rgb(225,110,160)",
    },
    "darker": {
        Role.FAIL: "rgb(140,0,0)",
        Role.PASS: "rgb(0,140,0)",
        Role.WARN: "rgb(140,140,0)",
        Role.DEBUG: "rgb(0,0,140)",
        Role.STACK_TRACE: "rgb(0,140,140)",
        Role.ERROR: "rgb(140,0,140)",
        Role.DISABLED: "rgb(110,110,110)",
        Role.DISABLED_REASON: "rgb(170,170,170)",
        Role.SLOW: "rgb(140,0,70)",
    },
}


def theme_names() -> list[str]:
    return sorted(_THEMES)


def build_theme(name: str | None) -> Theme:
    """Return the rich theme for ``name``; unknown names get the default theme."""
    styles = _THEMES.get((name or DEFAULT_THEME_NAME).lower(), _THEMES[DEFAULT_THEME_NAME])
    return Theme({role.value: style for role, style in styles.items()})


class Painter:
    """Paints semantic roles onto strings."""

    def __init__(self, no_color: bool = False) -> None:
        self.no_color = no_color

    def paint(self, role: Role, text: str) -> Text:
        if self.no_color:
            return Text(text)
        return Text(text, style=role.value)

    def __call__(self, role: Role, text: str) -> Text:
        return self.paint(role, text)


__all__ = ["DEFAULT_THEME_NAME", "Painter", "Role", "build_theme", "theme_names"]
