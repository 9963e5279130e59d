"""Text formatting helpers for benchmark reports.

Times are always given in nanoseconds and scaled to the largest unit
that keeps the value below 1000.  Colours go through ``click.style`` so
they are stripped automatically when output is not a terminal.
"""

from __future__ import annotations

import math

import click

_NANO_LIMIT = 1000.0
_MICRO_LIMIT = _NANO_LIMIT * 1000.0
_MILLI_LIMIT = _MICRO_LIMIT * 1000.0


def fmt_time(nanos: float) -> str:
    """Format a duration in nanoseconds with an adaptive unit.

    Examples: ``'5.15ns'``, ``'1.50µs'``, ``'3.33ms'``, ``'68.00s'``.
    """
    if math.isnan(nanos):
        return "N/A"
    if nanos < _NANO_LIMIT:
        return f"{nanos:.2f}ns"
    if nanos < _MICRO_LIMIT:
        return f"{nanos / _NANO_LIMIT:.2f}µs"
    if nanos < _MILLI_LIMIT:
        return f"{nanos / _MICRO_LIMIT:.2f}ms"
    return f"{nanos / _MILLI_LIMIT:.2f}s"


def fmt_num(num: float) -> str:
    """Format a count with a magnitude suffix.

    Examples: ``'5.1'``, ``'35.0 thousand'``, ``'97.0M'``, ``'7.9B'``.
    """
    if num < _NANO_LIMIT:
        return f"{num:.1f}"
    if num < _MICRO_LIMIT:
        return f"{num / _NANO_LIMIT:.1f} thousand"
    if num < _MILLI_LIMIT:
        return f"{num / _MICRO_LIMIT:.1f}M"
    return f"{num / _MILLI_LIMIT:.1f}B"


def fmt_change(pct: float) -> str:
    """Format a relative change already expressed in percent."""
    if math.isnan(pct):
        return "N/A"
    return f"{pct:.4f}%"


def fmt_p_value(p: float) -> str:
    """Format a p-value for the change line."""
    if math.isnan(p):
        return "p = N/A"
    return f"p = {p:.2f}"


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------


def label_style(text: str) -> str:
    return click.style(text, fg="green", bold=True)


def emphasis(text: str) -> str:
    return click.style(text, fg="bright_white")


def muted(text: str) -> str:
    return click.style(text, fg="white")


def good(text: str) -> str:
    return click.style(text, fg="bright_green")


def bad(text: str) -> str:
    return click.style(text, fg="bright_red")
