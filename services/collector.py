# services/collector.py
# TubeTally - Pull raw rows from every YouTube source and resolve video details
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Mapping, Protocol

from _logging import EventLog

from .models import (
    ActivityItem,
    HistoryItem,
    RawActivityRecord,
    SearchItem,
    UploadItem,
    VideoDetails,
    WatchRecord,
)
from .normalizer import normalize_all

__all__ = ["VideoPlatformClient", "collect_raw", "lookup_details", "collect_real_records", "DEFAULT_SOURCES"]

DEFAULT_SOURCES: dict[str, bool] = {"uploads": True, "history": True, "activities": True, "search": True}


class VideoPlatformClient(Protocol):
    def my_channel(self) -> dict[str, Any] | None: ...
    def playlist_items(self, playlist_id: str, max_results: int = 50) -> list[dict[str, Any]]: ...
    def activities(self, max_results: int = 50) -> list[dict[str, Any]]: ...
    def search_mine(self, max_results: int = 50) -> list[dict[str, Any]]: ...
    def video_details(self, video_id: str) -> dict[str, Any] | None: ...


def _rows(items: list[dict[str, Any]], parse: Callable[[Mapping[str, Any]], RawActivityRecord | None]) -> list[RawActivityRecord]:
    out: list[RawActivityRecord] = []
    for it in items or []:
        row = parse(it)
        if row is not None:
            out.append(row)
    return out


def collect_raw(
    client: VideoPlatformClient,
    *,
    sources: Mapping[str, bool] | None = None,
    max_results: int = 50,
    events: EventLog | None = None,
) -> list[RawActivityRecord]:
    """Rows from every enabled source, in source order. A failing source adds nothing."""
    events = events if events is not None else EventLog()
    on = dict(DEFAULT_SOURCES)
    on.update(sources or {})
    raws: list[RawActivityRecord] = []

    try:
        channel = client.my_channel()
    except Exception as e:
        events.error("source.channel_failed", f"channel lookup failed: {e}", source="channel")
        channel = None

    playlists: dict[str, Any] = {}
    if channel:
        playlists = ((channel.get("contentDetails") or {}).get("relatedPlaylists") or {})
        title = ((channel.get("snippet") or {}).get("title")) or ""
        events.info("source.channel", f"found user channel: {title}", channel=title)
    else:
        events.warn("source.no_channel", "no channel for this account; channel sources skipped")

    plan: list[tuple[str, Callable[[], list[dict[str, Any]]], Callable[..., Any]]] = []
    if on.get("uploads") and playlists.get("uploads"):
        pid = playlists["uploads"]
        plan.append(("uploads", lambda: client.playlist_items(pid, max_results), UploadItem.from_api))
    if on.get("history"):
        hid = playlists.get("watchHistory")
        if hid:
            plan.append(("history", lambda: client.playlist_items(hid, max_results), HistoryItem.from_api))
        elif channel:
            events.info("source.history_unavailable", "watch-history playlist is not exposed for this channel")
    if on.get("activities") and channel:
        plan.append(("activities", lambda: client.activities(max_results), ActivityItem.from_api))
    if on.get("search"):
        plan.append(("search", lambda: client.search_mine(max_results), SearchItem.from_api))

    for name, fetch, parse in plan:
        try:
            rows = _rows(fetch(), parse)
        except Exception as e:
            events.warn("source.failed", f"{name}: {e}", source=name)
            continue
        events.info("source.fetched", f"{name}: {len(rows)} item(s)", source=name, count=len(rows))
        raws.extend(rows)
    return raws


def lookup_details(
    client: VideoPlatformClient,
    video_ids: list[str],
    *,
    workers: int = 4,
    events: EventLog | None = None,
) -> dict[str, VideoDetails | None]:
    """videos.list per id, concurrently. A failed lookup maps to None."""
    events = events if events is not None else EventLog()
    out: dict[str, VideoDetails | None] = {}
    unique = list(dict.fromkeys(v for v in video_ids if v))
    if not unique:
        return out

    def _fetch_one(vid: str) -> VideoDetails | None:
        item = client.video_details(vid)
        return VideoDetails.from_api(item) if item else None

    with ThreadPoolExecutor(max_workers=max(1, min(int(workers), len(unique)))) as ex:
        futs = {ex.submit(_fetch_one, vid): vid for vid in unique}
        for fut in as_completed(futs):
            vid = futs[fut]
            try:
                out[vid] = fut.result()
            except Exception as e:
                events.warn("lookup.failed", f"video {vid}: {e}", video_id=vid)
                out[vid] = None
                continue
            if out[vid] is None:
                events.warn("lookup.missing", f"video {vid} not found", video_id=vid)
    return out


def _first_per_video(records: list[WatchRecord], events: EventLog) -> list[WatchRecord]:
    """Keep the first record per video id; sources are already in priority order."""
    seen: set[str] = set()
    out: list[WatchRecord] = []
    for rec in records:
        if rec.external_id in seen:
            events.info("collect.duplicate", f"{rec.source} {rec.external_id}: already counted",
                        video_id=rec.external_id, source=rec.source)
            continue
        seen.add(rec.external_id)
        out.append(rec)
    return out


def collect_real_records(
    client: VideoPlatformClient,
    *,
    sources: Mapping[str, bool] | None = None,
    max_results: int = 50,
    workers: int = 4,
    events: EventLog | None = None,
) -> list[WatchRecord]:
    events = events if events is not None else EventLog()
    raws = collect_raw(client, sources=sources, max_results=max_results, events=events)
    details = lookup_details(client, [r.video_id for r in raws], workers=workers, events=events)
    records = _first_per_video(normalize_all(raws, details, events), events)
    events.info("collect.done", f"{len(records)} real record(s) from {len(raws)} row(s)",
                rows=len(raws), records=len(records))
    return records
