"""Line-oriented console output.

Every physical line written through a sink carries the configured log
prefix. External tools extract summary sections by looking for prefixed
marker lines, so a message that spans several lines must never leak an
unprefixed line.
"""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.text import Text


class OutputSink(Protocol):
    """Anything that accepts whole lines of output."""

    def write_line(self, text: str | Text) -> None:
        """Write ``text``, one physical line per embedded newline."""
        ...


def split_lines(text: str | Text) -> list[Text]:
    """Split on ``\\n`` and drop trailing carriage returns from each piece."""
    if isinstance(text, str):
        text = Text(text)
    lines: list[Text] = []
    for line in text.split("\n", allow_blank=True):
        plain = line.plain
        trimmed = len(plain) - len(plain.rstrip("\r"))
        if trimmed:
            line.right_crop(trimmed)
        lines.append(line)
    return lines


class ConsoleSink:
    """Writes prefixed lines to a rich console."""

    def __init__(self, console: Console, prefix: str = "") -> None:
        self.console = console
        self.prefix = prefix or ""

    def write_line(self, text: str | Text) -> None:
        for line in split_lines(text):
            self.console.print(
                Text.assemble(self.prefix, line),
                soft_wrap=True,
                highlight=False,
            )


__all__ = ["ConsoleSink", "OutputSink", "split_lines"]
