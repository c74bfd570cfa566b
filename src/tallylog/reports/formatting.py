"""Formatting helpers for durations, timestamps and multi-line bodies."""

from __future__ import annotations

from datetime import datetime, timedelta

from tallylog.config.options import DEFAULT_TIMESTAMP_FORMAT


_ONE_MS = timedelta(milliseconds=1)


def format_duration(duration: timedelta) -> str:
    """Render a test duration for humans.

    >>> format_duration(timedelta(microseconds=400))
    '< 1 ms'
    >>> format_duration(timedelta(milliseconds=50))
    '50 ms'
    >>> format_duration(timedelta(milliseconds=1500))
    '1.50 s'
    """
    ms = duration / _ONE_MS
    if ms < 1:
        return "< 1 ms"
    if ms < 1000:
        return f"{ms:g} ms"
    if ms < 60_000:
        return f"{ms / 1000:.2f} s"
    return str(duration)


def format_timestamp(moment: datetime, fmt: str | None = None) -> str:
    return moment.strftime(fmt or DEFAULT_TIMESTAMP_FORMAT)


def indent_lines(body: str | None, indent: str) -> list[str]:
    """Split ``body`` into indented lines; ``None`` or ``""`` yields nothing."""
    if not body:
        return []
    lines = (line.rstrip("\r") for line in body.split("\n"))
    return [f"{indent}{line}" for line in lines]


__all__ = ["format_duration", "format_timestamp", "indent_lines"]
