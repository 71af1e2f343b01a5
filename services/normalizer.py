# services/normalizer.py
# TubeTally - Raw YouTube rows -> canonical watch records
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from typing import Callable, Iterable, Mapping

from _logging import EventLog

from .duration import DurationError, DurationMode, parse_duration
from .models import (
    ActivityItem,
    HistoryItem,
    Provenance,
    RawActivityRecord,
    SearchItem,
    UploadItem,
    VideoDetails,
    WatchRecord,
    parse_timestamp,
)

__all__ = ["normalize", "normalize_all"]


def _record(raw: RawActivityRecord, d: VideoDetails, watched_at: str, title: str, channel: str) -> WatchRecord:
    return WatchRecord(
        title=title,
        watched_at=parse_timestamp(watched_at),
        duration_minutes=parse_duration(d.duration, DurationMode.FRACTION),
        external_id=raw.video_id,
        channel_title=channel,
        provenance=Provenance.REAL,
        source=raw.kind,
        view_count=d.view_count,
    )


def _from_upload(raw: UploadItem, d: VideoDetails) -> WatchRecord:
    # own uploads have no watch time; the video's publish time stands in
    return _record(raw, d, d.published_at or raw.published_at, d.title or raw.title, d.channel_title)


def _from_history(raw: HistoryItem, d: VideoDetails) -> WatchRecord:
    return _record(raw, d, raw.published_at, d.title or raw.title, d.channel_title)


def _from_activity(raw: ActivityItem, d: VideoDetails) -> WatchRecord:
    return _record(raw, d, raw.published_at, d.title or raw.title, d.channel_title or raw.channel_title)


def _from_search(raw: SearchItem, d: VideoDetails) -> WatchRecord:
    return _record(raw, d, raw.published_at or d.published_at, d.title or raw.title, d.channel_title or raw.channel_title)


_HANDLERS: dict[type, Callable[..., WatchRecord]] = {
    UploadItem: _from_upload,
    HistoryItem: _from_history,
    ActivityItem: _from_activity,
    SearchItem: _from_search,
}


def normalize(
    raw: RawActivityRecord,
    details: VideoDetails | None,
    events: EventLog | None = None,
) -> WatchRecord | None:
    """One raw row plus its videos.list lookup -> WatchRecord, or None to drop it."""
    handler = _HANDLERS.get(type(raw))
    if handler is None:
        if events is not None:
            events.warn("record.unknown_shape", f"unknown record shape {type(raw).__name__}")
        return None
    if details is None:
        if events is not None:
            events.warn("record.no_details", f"no video details for {raw.video_id}; record dropped",
                        video_id=raw.video_id, source=raw.kind)
        return None
    try:
        return handler(raw, details)
    except DurationError as e:
        if events is not None:
            events.warn("record.bad_duration", f"{raw.kind} {raw.video_id}: {e}",
                        video_id=raw.video_id, source=raw.kind)
    except ValueError as e:
        if events is not None:
            events.warn("record.bad_record", f"{raw.kind} {raw.video_id}: {e}",
                        video_id=raw.video_id, source=raw.kind)
    return None


def normalize_all(
    raws: Iterable[RawActivityRecord],
    details_by_id: Mapping[str, VideoDetails | None],
    events: EventLog | None = None,
) -> list[WatchRecord]:
    out: list[WatchRecord] = []
    for raw in raws:
        rec = normalize(raw, details_by_id.get(raw.video_id), events)
        if rec is not None:
            out.append(rec)
    return out
