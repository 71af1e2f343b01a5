# services/models.py
# TubeTally - Watch records, raw source shapes and report types
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from fractions import Fraction
from types import MappingProxyType
from typing import Any, Mapping, Union


# Timestamps

def parse_timestamp(value: Any) -> datetime:
    """Parse an RFC 3339 / ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken as UTC. Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        s = str(value or "").strip()
        if not s:
            raise ValueError("empty timestamp")
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Provenance

class Provenance(Enum):
    REAL = "real"
    SYNTHETIC = "synthetic"


# Canonical record

@dataclass(frozen=True)
class WatchRecord:
    title: str
    watched_at: datetime
    duration_minutes: float
    external_id: str
    channel_title: str
    provenance: Provenance = Provenance.REAL
    source: str = "upload"
    view_count: int | None = None

    def __post_init__(self) -> None:
        if self.duration_minutes < 0:
            raise ValueError(f"duration_minutes must be >= 0, got {self.duration_minutes}")
        object.__setattr__(self, "watched_at", parse_timestamp(self.watched_at))

    @property
    def watched_on(self) -> date:
        return self.watched_at.date()

    @property
    def is_synthetic(self) -> bool:
        return self.provenance is Provenance.SYNTHETIC

    def to_dict(self) -> dict[str, Any]:
        from .duration import round_minutes

        out: dict[str, Any] = {
            "title": self.title,
            "watchedAt": iso_utc(self.watched_at),
            "duration": round_minutes(self.duration_minutes),
            "durationMinutes": self.duration_minutes,
            "videoId": self.external_id,
            "channelTitle": self.channel_title,
            "provenance": self.provenance.value,
            "source": self.source,
            "isDemo": self.is_synthetic,
        }
        if self.view_count is not None:
            out["viewCount"] = self.view_count
        return out


# Daily accumulator

@dataclass(frozen=True)
class DailyStat:
    total_minutes: Fraction = field(default_factory=Fraction)
    video_count: int = 0

    def add(self, minutes: float | int | Fraction) -> "DailyStat":
        """One more video of `minutes`, as a new stat."""
        m = Fraction(minutes)
        if m < 0:
            raise ValueError(f"minutes must be >= 0, got {minutes}")
        return DailyStat(self.total_minutes + m, self.video_count + 1)

    def merged(self, other: "DailyStat") -> "DailyStat":
        return DailyStat(self.total_minutes + other.total_minutes, self.video_count + other.video_count)

    def to_dict(self) -> dict[str, Any]:
        return {"totalMinutes": float(self.total_minutes), "videoCount": self.video_count}


# Secondary lookup

@dataclass(frozen=True)
class VideoDetails:
    video_id: str
    title: str
    channel_title: str
    published_at: str
    duration: str
    view_count: int | None = None

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "VideoDetails | None":
        vid = str(item.get("id") or "").strip()
        if not vid:
            return None
        sn = item.get("snippet") or {}
        cd = item.get("contentDetails") or {}
        st = item.get("statistics") or {}
        try:
            views: int | None = int(st["viewCount"]) if "viewCount" in st else None
        except (TypeError, ValueError):
            views = None
        return cls(
            video_id=vid,
            title=str(sn.get("title") or ""),
            channel_title=str(sn.get("channelTitle") or ""),
            published_at=str(sn.get("publishedAt") or ""),
            duration=str(cd.get("duration") or ""),
            view_count=views,
        )


# Raw source shapes (tagged union)

def _resource_video_id(snippet: Mapping[str, Any]) -> str:
    return str(((snippet.get("resourceId") or {}).get("videoId")) or "").strip()


@dataclass(frozen=True)
class UploadItem:
    """playlistItems.list row from the channel's uploads playlist."""
    video_id: str
    published_at: str
    title: str = ""

    kind = "upload"

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "UploadItem | None":
        sn = item.get("snippet") or {}
        vid = _resource_video_id(sn) or str((item.get("contentDetails") or {}).get("videoId") or "").strip()
        if not vid:
            return None
        return cls(video_id=vid, published_at=str(sn.get("publishedAt") or ""), title=str(sn.get("title") or ""))


@dataclass(frozen=True)
class HistoryItem:
    """playlistItems.list row from the watch-history playlist; publishedAt is when it was added."""
    video_id: str
    published_at: str
    title: str = ""

    kind = "history"

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "HistoryItem | None":
        sn = item.get("snippet") or {}
        vid = _resource_video_id(sn) or str((item.get("contentDetails") or {}).get("videoId") or "").strip()
        if not vid:
            return None
        return cls(video_id=vid, published_at=str(sn.get("publishedAt") or ""), title=str(sn.get("title") or ""))


_ACTIVITY_ID_PATHS: tuple[tuple[str, ...], ...] = (
    ("upload", "videoId"),
    ("like", "resourceId", "videoId"),
    ("favorite", "resourceId", "videoId"),
    ("playlistItem", "resourceId", "videoId"),
    ("recommendation", "resourceId", "videoId"),
    ("bulletin", "resourceId", "videoId"),
)


@dataclass(frozen=True)
class ActivityItem:
    """activities.list row; only activities pointing at a video are kept."""
    video_id: str
    published_at: str
    activity_type: str = ""
    title: str = ""
    channel_title: str = ""

    kind = "activity"

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "ActivityItem | None":
        sn = item.get("snippet") or {}
        cd = item.get("contentDetails") or {}
        vid = ""
        for path in _ACTIVITY_ID_PATHS:
            node: Any = cd
            for key in path:
                node = node.get(key) if isinstance(node, Mapping) else None
            if node:
                vid = str(node).strip()
                break
        if not vid:
            return None
        return cls(
            video_id=vid,
            published_at=str(sn.get("publishedAt") or ""),
            activity_type=str(sn.get("type") or ""),
            title=str(sn.get("title") or ""),
            channel_title=str(sn.get("channelTitle") or ""),
        )


@dataclass(frozen=True)
class SearchItem:
    """search.list row (type=video)."""
    video_id: str
    published_at: str
    title: str = ""
    channel_title: str = ""

    kind = "search"

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "SearchItem | None":
        ident = item.get("id") or {}
        vid = str((ident.get("videoId") if isinstance(ident, Mapping) else ident) or "").strip()
        if not vid:
            return None
        sn = item.get("snippet") or {}
        return cls(
            video_id=vid,
            published_at=str(sn.get("publishedAt") or ""),
            title=str(sn.get("title") or ""),
            channel_title=str(sn.get("channelTitle") or ""),
        )


RawActivityRecord = Union[UploadItem, HistoryItem, ActivityItem, SearchItem]


# Report

@dataclass(frozen=True)
class Report:
    watch_history: tuple[WatchRecord, ...]
    daily_stats: Mapping[str, DailyStat]
    is_demo: bool
    is_mixed: bool
    real_data_count: int
    message: str
    table: tuple[Mapping[str, Any], ...] = ()
    chart: Mapping[str, tuple[Any, ...]] = field(default_factory=lambda: {"labels": [], "data": []})
    diagnostics: tuple[Mapping[str, Any], ...] = ()
    error: str | None = None
    generated_at: str = ""

    def __post_init__(self) -> None:
        # read-only views
        object.__setattr__(self, "watch_history", tuple(self.watch_history))
        object.__setattr__(self, "daily_stats", MappingProxyType(dict(self.daily_stats)))
        object.__setattr__(self, "table", tuple(MappingProxyType(dict(r)) for r in self.table))
        object.__setattr__(self, "chart", MappingProxyType({k: tuple(v) for k, v in self.chart.items()}))
        object.__setattr__(self, "diagnostics", tuple(MappingProxyType(dict(e)) for e in self.diagnostics))

    @property
    def synthetic_count(self) -> int:
        return sum(1 for r in self.watch_history if r.is_synthetic)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "watchHistory": [r.to_dict() for r in self.watch_history],
            "dailyStats": {d: s.to_dict() for d, s in self.daily_stats.items()},
            "isDemo": self.is_demo,
            "isMixed": self.is_mixed,
            "realDataCount": self.real_data_count,
            "message": self.message,
            "table": [dict(row) for row in self.table],
            "chart": {k: list(v) for k, v in self.chart.items()},
            "diagnostics": [dict(e) for e in self.diagnostics],
            "generatedAt": self.generated_at,
        }
        if self.error:
            out["error"] = self.error
        return out
