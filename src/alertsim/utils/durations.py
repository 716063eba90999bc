"""Parsing for Go-style duration strings such as ``1m30s`` or ``250ms``."""
from __future__ import annotations

import re
from datetime import timedelta

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """
    Parse a duration.

    Strings use Go's ``time.ParseDuration`` syntax (``"10s"``, ``"1m30s"``,
    ``"1.5h"``, ``"0"``); bare numbers are seconds.

    Raises:
        ValueError: If the value is negative or not a valid duration
    """
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    elif isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        if text in ("", "0"):
            return timedelta(0)
        try:
            seconds = float(text)
        except ValueError:
            seconds = _parse_components(text)

    if seconds < 0:
        raise ValueError(f"negative duration: {value!r}")
    return timedelta(seconds=seconds)


def _parse_components(text: str) -> float:
    pos = 0
    total = 0.0
    for match in _COMPONENT.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {text!r}")
    return total


def format_duration(value: timedelta) -> str:
    """Render a timedelta the way Go prints durations (``1m30s``)."""
    seconds = value.total_seconds()
    if seconds == 0:
        return "0s"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    out = ""
    if hours:
        out += f"{int(hours)}h"
    if hours or minutes:
        out += f"{int(minutes)}m"
    out += f"{secs:g}s"
    return out
