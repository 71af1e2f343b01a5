# services/duration.py
# TubeTally - ISO-8601 video duration parsing
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import math
import re
from enum import Enum
from fractions import Fraction
from typing import Any

__all__ = ["DurationMode", "DurationError", "parse_duration", "round_minutes"]

# P[nD][T[nH][nM][nS]]; YouTube sends "P0D" for live streams and days for 24h+ videos
_DURATION_RE = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$",
    re.I,
)


class DurationMode(Enum):
    ROUND = "round"          # whole minutes, seconds rounded half-up
    TRUNCATE = "truncate"    # whole minutes, seconds dropped
    FRACTION = "fraction"    # float minutes


class DurationError(ValueError):
    pass


def round_minutes(minutes: float | int | Fraction) -> int:
    """Half-up rounding to whole minutes (0.5 -> 1)."""
    return int(math.floor(Fraction(minutes) + Fraction(1, 2)))


def parse_duration(value: Any, mode: DurationMode = DurationMode.ROUND) -> int | float:
    """Convert an ISO-8601 duration ("PT1H2M3S") to minutes.

    Missing components count as zero. Anything that does not match the grammar
    raises DurationError so the caller can drop the one record.
    """
    if not isinstance(value, str):
        raise DurationError(f"duration must be a string, got {type(value).__name__}")
    m = _DURATION_RE.match(value.strip())
    # "P" and "PT" match the grammar but carry no component at all
    if not m or not any(m.groups()):
        raise DurationError(f"malformed duration: {value!r}")
    days, hours, minutes, seconds = m.groups()
    whole = int(days or 0) * 1440 + int(hours or 0) * 60 + int(minutes or 0)
    secs = Fraction(seconds) if seconds else Fraction(0)

    if mode is DurationMode.FRACTION:
        return float(whole + secs / 60)
    if mode is DurationMode.TRUNCATE:
        return whole + int(secs // 60)
    return whole + round_minutes(secs / 60)
