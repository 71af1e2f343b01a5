# TubeTally test scripts
from __future__ import annotations

import threading

import requests

from _logging import EventLog
from conftest import FakeYouTube, channel_item, playlist_row, video_item
from services.collector import collect_raw, collect_real_records, lookup_details
from services.models import ActivityItem, HistoryItem, SearchItem, UploadItem


def _activity(vid: str, kind: str = "like") -> dict:
    return {"snippet": {"type": kind, "publishedAt": "2024-01-04T10:00:00Z", "title": f"Act {vid}", "channelTitle": "A"},
            "contentDetails": {kind: {"resourceId": {"videoId": vid}}}}


def _hit(vid: str) -> dict:
    return {"id": {"kind": "youtube#video", "videoId": vid},
            "snippet": {"publishedAt": "2024-01-03T10:00:00Z", "title": f"Hit {vid}", "channelTitle": "S"}}


def test_collects_every_source_in_order() -> None:
    api = FakeYouTube(
        channel=channel_item(uploads="UU1", history="HL"),
        playlists={"UU1": [playlist_row("u1")], "HL": [playlist_row("h1")]},
        activities=[_activity("a1"), _activity("x", kind="subscription")],
        search=[_hit("s1")],
    )
    raws = collect_raw(api)
    assert [(type(r), r.video_id) for r in raws] == [
        (UploadItem, "u1"), (HistoryItem, "h1"), (ActivityItem, "a1"), (SearchItem, "s1"),
    ]


def test_failing_source_adds_nothing_but_others_continue() -> None:
    events = EventLog()
    api = FakeYouTube(
        channel=channel_item(uploads="UU1"),
        playlists={"UU1": requests.HTTPError("403")},
        search=[_hit("s1")],
    )
    raws = collect_raw(api, events=events)
    assert [r.video_id for r in raws] == ["s1"]
    failed = [e for e in events.events if e["event"] == "source.failed"]
    assert [e["source"] for e in failed] == ["uploads"]
    assert any(e["event"] == "source.history_unavailable" for e in events.events)


def test_search_runs_without_a_channel() -> None:
    events = EventLog()
    api = FakeYouTube(channel=None, activities=[_activity("a1")], search=[_hit("s1")])
    raws = collect_raw(api, events=events)
    assert [r.video_id for r in raws] == ["s1"]
    assert ("activities", None) not in api.calls
    assert events.by_level("warn")[0]["event"] == "source.no_channel"


def test_disabled_sources_are_not_called() -> None:
    api = FakeYouTube(channel=channel_item(uploads="UU1"), playlists={"UU1": [playlist_row("u1")]}, search=[_hit("s1")])
    raws = collect_raw(api, sources={"uploads": False, "search": False})
    assert raws == []
    assert [c[0] for c in api.calls] == ["my_channel", "activities"]


def test_lookup_details_dedupes_and_isolates_failures() -> None:
    events = EventLog()
    api = FakeYouTube(videos={
        "a": video_item("a"),
        "b": requests.Timeout("slow"),
    })
    out = lookup_details(api, ["a", "b", "a", "c", ""], workers=3, events=events)
    assert set(out) == {"a", "b", "c"}
    assert out["a"] is not None and out["a"].duration == "PT10M"
    assert out["b"] is None and out["c"] is None
    assert sorted(c[1] for c in api.calls) == ["a", "b", "c"]
    kinds = sorted(e["event"] for e in events.events)
    assert kinds == ["lookup.failed", "lookup.missing"]


def test_lookup_details_runs_concurrently() -> None:
    barrier = threading.Barrier(3, timeout=5)

    class Slow(FakeYouTube):
        def video_details(self, video_id: str):
            barrier.wait()
            return video_item(video_id)

    out = lookup_details(Slow(), ["a", "b", "c"], workers=3)
    assert all(out[v] is not None for v in "abc")


def test_lookup_details_empty() -> None:
    api = FakeYouTube()
    assert lookup_details(api, []) == {}
    assert api.calls == []


def test_collect_real_records_end_to_end() -> None:
    events = EventLog()
    api = FakeYouTube(
        channel=channel_item(uploads="UU1"),
        playlists={"UU1": [playlist_row("u1"), playlist_row("u2")]},
        search=[_hit("u1")],
        videos={"u1": video_item("u1", duration="PT2M", views=7), "u2": video_item("u2", duration="P1DT1H")},
    )
    recs = collect_real_records(api, events=events)
    assert [(r.external_id, r.source, r.duration_minutes) for r in recs] == [("u1", "upload", 2), ("u2", "upload", 1500)]
    assert recs[0].view_count == 7
    assert [c[1] for c in api.calls if c[0] == "video_details"].count("u1") == 1
    assert events.events[-1]["event"] == "collect.done"
    assert events.events[-1]["records"] == 2


def test_video_seen_by_two_sources_counts_once() -> None:
    events = EventLog()
    api = FakeYouTube(
        channel=channel_item(uploads="UU1"),
        playlists={"UU1": [playlist_row("abc")]},
        search=[_hit("abc")],
        videos={"abc": video_item("abc", duration="PT10M")},
    )
    recs = collect_real_records(api, events=events)
    assert [(r.external_id, r.source) for r in recs] == [("abc", "upload")]
    dup = [e for e in events.events if e["event"] == "collect.duplicate"]
    assert [(e["video_id"], e["source"]) for e in dup] == [("abc", "search")]
