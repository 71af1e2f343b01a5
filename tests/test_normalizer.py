# TubeTally test scripts
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from _logging import EventLog
from services.models import (
    ActivityItem,
    HistoryItem,
    Provenance,
    SearchItem,
    UploadItem,
    VideoDetails,
)
from services.normalizer import normalize, normalize_all


def _details(vid: str = "v1", duration: str = "PT10M", published: str = "2024-01-03T10:00:00Z") -> VideoDetails:
    return VideoDetails(video_id=vid, title="Real Title", channel_title="Real Channel",
                        published_at=published, duration=duration, view_count=12)


def test_upload_uses_video_publish_time() -> None:
    raw = UploadItem(video_id="v1", published_at="2024-01-04T00:00:00Z")
    rec = normalize(raw, _details())
    assert rec is not None
    assert rec.watched_at == datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)
    assert rec.duration_minutes == 10
    assert rec.provenance is Provenance.REAL
    assert (rec.title, rec.channel_title, rec.source, rec.view_count) == ("Real Title", "Real Channel", "upload", 12)


def test_history_uses_playlist_add_time() -> None:
    raw = HistoryItem(video_id="v1", published_at="2024-01-04T21:15:00Z")
    rec = normalize(raw, _details())
    assert rec is not None
    assert rec.watched_on.isoformat() == "2024-01-04"
    assert rec.source == "history"


def test_activity_and_search_fall_back_to_row_snippet() -> None:
    d = VideoDetails(video_id="v1", title="", channel_title="", published_at="", duration="PT1M30S")
    act = normalize(ActivityItem(video_id="v1", published_at="2024-01-02T00:00:00Z",
                                 activity_type="like", title="Liked", channel_title="Chan A"), d)
    hit = normalize(SearchItem(video_id="v1", published_at="2024-01-01T00:00:00Z",
                               title="Found", channel_title="Chan B"), d)
    assert act is not None and hit is not None
    assert (act.title, act.channel_title, act.source) == ("Liked", "Chan A", "activity")
    assert (hit.title, hit.channel_title, hit.source) == ("Found", "Chan B", "search")
    assert act.duration_minutes == pytest.approx(1.5)


def test_missing_details_drops_record() -> None:
    events = EventLog()
    assert normalize(UploadItem(video_id="gone", published_at="2024-01-01T00:00:00Z"), None, events) is None
    assert [e["event"] for e in events.events] == ["record.no_details"]


def test_bad_duration_drops_only_that_record() -> None:
    events = EventLog()
    raws = [
        UploadItem(video_id="ok", published_at=""),
        UploadItem(video_id="bad", published_at=""),
        HistoryItem(video_id="ok", published_at="2024-01-04T00:00:00Z"),
    ]
    details = {"ok": _details("ok"), "bad": _details("bad", duration="ten minutes")}
    out = normalize_all(raws, details, events)
    assert [r.external_id for r in out] == ["ok", "ok"]
    assert [e["event"] for e in events.by_level("warn")] == ["record.bad_duration"]


def test_bad_timestamp_drops_record() -> None:
    events = EventLog()
    rec = normalize(HistoryItem(video_id="v1", published_at="yesterday"), _details(), events)
    assert rec is None
    assert events.events[0]["event"] == "record.bad_record"


def test_unknown_shape_is_dropped() -> None:
    assert normalize({"video_id": "x"}, _details()) is None  # type: ignore[arg-type]


def test_raw_shapes_from_api_rows() -> None:
    up = UploadItem.from_api({"snippet": {"publishedAt": "t", "resourceId": {"videoId": "a"}}})
    act = ActivityItem.from_api({"snippet": {"type": "like", "publishedAt": "t"},
                                 "contentDetails": {"like": {"resourceId": {"videoId": "b"}}}})
    act_up = ActivityItem.from_api({"snippet": {"type": "upload"}, "contentDetails": {"upload": {"videoId": "c"}}})
    hit = SearchItem.from_api({"id": {"kind": "youtube#video", "videoId": "d"}, "snippet": {"title": "x"}})
    assert (up.video_id, act.video_id, act_up.video_id, hit.video_id) == ("a", "b", "c", "d")
    assert ActivityItem.from_api({"snippet": {"type": "subscription"}, "contentDetails": {"subscription": {}}}) is None
    assert SearchItem.from_api({"id": {"kind": "youtube#channel", "channelId": "UC"}}) is None
    assert HistoryItem.from_api({"snippet": {}}) is None


def test_video_details_from_api() -> None:
    d = VideoDetails.from_api({
        "id": "v9",
        "snippet": {"title": "T", "channelTitle": "C", "publishedAt": "2024-01-01T00:00:00Z"},
        "contentDetails": {"duration": "PT3M"},
        "statistics": {"viewCount": "1234"},
    })
    assert d == VideoDetails("v9", "T", "C", "2024-01-01T00:00:00Z", "PT3M", 1234)
    assert VideoDetails.from_api({"snippet": {}}) is None
