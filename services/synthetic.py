# services/synthetic.py
# TubeTally - Demo watch history for accounts without usable history
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, time as dtime, timedelta, timezone
from typing import Sequence

from .buckets import DailyBucketIndex, build, fold, window_dates
from .models import Provenance, WatchRecord

__all__ = ["SampleVideo", "SAMPLE_VIDEOS", "SyntheticBatch", "MAX_PER_DAY", "generate_synthetic"]

MAX_PER_DAY = 5


@dataclass(frozen=True)
class SampleVideo:
    title: str
    duration: int
    channel: str


SAMPLE_VIDEOS: tuple[SampleVideo, ...] = (
    SampleVideo("JavaScript Tutorial - Full Course", 45, "CodeSchool"),
    SampleVideo("React Hooks Explained", 28, "TechTalks"),
    SampleVideo("Node.js Best Practices", 35, "WebDev Pro"),
    SampleVideo("CSS Grid Layout Guide", 22, "DesignMaster"),
    SampleVideo("API Design Patterns", 40, "DevTips"),
    SampleVideo("Database Optimization Tips", 33, "DataGuru"),
    SampleVideo("Machine Learning Basics", 55, "AI Academy"),
    SampleVideo("Python for Beginners", 42, "CodePython"),
    SampleVideo("Docker Complete Guide", 38, "DevOps Hub"),
    SampleVideo("Git Workflow Strategies", 25, "GitMaster"),
)


@dataclass(frozen=True)
class SyntheticBatch:
    records: tuple[WatchRecord, ...]
    daily_stats: DailyBucketIndex

    def __len__(self) -> int:
        return len(self.records)


def generate_synthetic(
    now: datetime | None = None,
    *,
    window_days: int = 30,
    rng: random.Random | None = None,
    catalog: Sequence[SampleVideo] = SAMPLE_VIDEOS,
) -> SyntheticBatch:
    """Random 0-5 views per day over the trailing window, oldest day first.

    Pass a seeded `rng` for reproducible output.
    """
    if not catalog:
        raise ValueError("catalog must not be empty")
    rng = rng or random.Random()
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    today = now.date()

    records: list[WatchRecord] = []
    for i, day in enumerate(window_dates(window_days, today)):
        midnight = datetime.combine(day, dtime.min, tzinfo=timezone.utc)
        # no views later than "now" on the current day
        span = int((now - midnight).total_seconds()) if day == today else 86399
        for j in range(rng.randint(0, MAX_PER_DAY)):
            video = rng.choice(catalog)
            records.append(WatchRecord(
                title=video.title,
                watched_at=midnight + timedelta(seconds=rng.randint(0, max(0, span))),
                duration_minutes=video.duration,
                external_id=f"demo_{i}_{j}",
                channel_title=video.channel,
                provenance=Provenance.SYNTHETIC,
                source="demo",
            ))

    stats = build(window_days, today)
    fold(records, stats)
    return SyntheticBatch(records=tuple(records), daily_stats=stats)
