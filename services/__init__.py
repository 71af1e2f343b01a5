# services/__init__.py
from __future__ import annotations

from .blending import BlendPolicy, BlendResult, Outcome, blend
from .buckets import accumulate, build, fold, merge_daily_stats
from .duration import DurationError, DurationMode, parse_duration
from .models import (
    ActivityItem,
    DailyStat,
    HistoryItem,
    Provenance,
    Report,
    SearchItem,
    UploadItem,
    VideoDetails,
    WatchRecord,
)
from .normalizer import normalize, normalize_all
from .report import build_report, get_watch_report
from .synthetic import SAMPLE_VIDEOS, generate_synthetic

__all__ = [
    "ActivityItem",
    "BlendPolicy",
    "BlendResult",
    "DailyStat",
    "DurationError",
    "DurationMode",
    "HistoryItem",
    "Outcome",
    "Provenance",
    "Report",
    "SAMPLE_VIDEOS",
    "SearchItem",
    "UploadItem",
    "VideoDetails",
    "WatchRecord",
    "accumulate",
    "blend",
    "build",
    "build_report",
    "fold",
    "generate_synthetic",
    "get_watch_report",
    "merge_daily_stats",
    "normalize",
    "normalize_all",
    "parse_duration",
]
