"""Timestamp bucketing and duration strings.

Buckets are fixed-length and aligned on the unix epoch, so a DAY bucket
starts at UTC midnight.
"""

from __future__ import annotations

import re

from yieldind.core.constants import DAY, HOUR, WEEK

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": HOUR, "d": DAY, "w": WEEK}


def interval_from_timestamp(timestamp: int, period: int) -> int:
    """Start of the `period` bucket containing `timestamp`."""
    return timestamp - timestamp % period


def parse_duration(text: str) -> int:
    """Parse "30d", "12h", "15m", "1w" or a bare number of seconds."""
    m = _DURATION_RE.match(text.lower())
    if m is None:
        raise ValueError(f"Invalid duration: {text!r}")
    return int(m.group(1)) * _DURATION_UNITS[m.group(2)]


def format_duration(seconds: int) -> str:
    """Inverse of `parse_duration`, using the largest unit that divides exactly."""
    for suffix in ("w", "d", "h", "m"):
        unit = _DURATION_UNITS[suffix]
        if seconds and seconds % unit == 0:
            return f"{seconds // unit}{suffix}"
    return f"{seconds}s"
