# services/buckets.py
# TubeTally - Trailing-window daily buckets
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from fractions import Fraction
from typing import Iterable, Mapping

from .models import DailyStat, WatchRecord

__all__ = ["DailyBucketIndex", "build", "accumulate", "fold", "merge_daily_stats", "window_dates"]

# Ordered ISO date -> DailyStat; insertion order is chronological
DailyBucketIndex = dict[str, DailyStat]


def _as_utc_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).date()
    return value


def window_dates(window_days: int, end_date: date | datetime) -> list[date]:
    if int(window_days) < 1:
        raise ValueError(f"window_days must be >= 1, got {window_days}")
    end = _as_utc_date(end_date)
    start = end - timedelta(days=int(window_days) - 1)
    return [start + timedelta(days=i) for i in range(int(window_days))]


def build(window_days: int, end_date: date | datetime) -> DailyBucketIndex:
    """Zeroed buckets for the `window_days` days ending at `end_date` (inclusive)."""
    return {d.isoformat(): DailyStat() for d in window_dates(window_days, end_date)}


def accumulate(index: DailyBucketIndex, day: date | datetime | str, minutes: float | int | Fraction) -> bool:
    """Add one video to the bucket for `day`. Days outside the window are dropped."""
    key = day if isinstance(day, str) else _as_utc_date(day).isoformat()
    stat = index.get(key)
    if stat is None:
        if Fraction(minutes) < 0:
            raise ValueError(f"minutes must be >= 0, got {minutes}")
        return False
    index[key] = stat.add(minutes)
    return True


def fold(records: Iterable[WatchRecord], index: DailyBucketIndex) -> int:
    landed = 0
    for rec in records:
        if accumulate(index, rec.watched_on, rec.duration_minutes):
            landed += 1
    return landed


def merge_daily_stats(base: Mapping[str, DailyStat], extra: Mapping[str, DailyStat]) -> DailyBucketIndex:
    """Union of both mappings; shared dates are summed. Inputs are left untouched."""
    out: DailyBucketIndex = {d: DailyStat(s.total_minutes, s.video_count) for d, s in base.items()}
    for d, s in extra.items():
        cur = out.get(d)
        out[d] = cur.merged(s) if cur is not None else DailyStat(s.total_minutes, s.video_count)
    return dict(sorted(out.items()))
