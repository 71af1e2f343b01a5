# TubeTally test scripts
from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from services.models import Provenance, WatchRecord  # noqa: E402

NOW = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def config_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CONFIG_BASE", str(tmp_path))
    monkeypatch.delenv("TT_DEBUG", raising=False)
    import _logging
    _logging._reset_debug_cache()
    return tmp_path


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def make_record() -> Callable[..., WatchRecord]:
    def _make(
        watched_at: str = "2024-01-05T08:00:00Z",
        minutes: float = 10,
        *,
        vid: str = "vid1",
        synthetic: bool = False,
        **kw: Any,
    ) -> WatchRecord:
        return WatchRecord(
            title=kw.pop("title", f"Video {vid}"),
            watched_at=watched_at,
            duration_minutes=minutes,
            external_id=vid,
            channel_title=kw.pop("channel_title", "Some Channel"),
            provenance=Provenance.SYNTHETIC if synthetic else Provenance.REAL,
            source=kw.pop("source", "demo" if synthetic else "upload"),
            **kw,
        )

    return _make


class FakeYouTube:
    """In-memory stand-in for YouTubeClient; any value may be an Exception to raise."""

    def __init__(
        self,
        *,
        channel: Any = None,
        playlists: dict[str, Any] | None = None,
        activities: Any = (),
        search: Any = (),
        videos: dict[str, Any] | None = None,
    ) -> None:
        self.channel = channel
        self.playlists = playlists or {}
        self._activities = activities
        self._search = search
        self.videos = videos or {}
        self.calls: list[tuple[str, Any]] = []

    @staticmethod
    def _ret(v: Any) -> Any:
        if isinstance(v, Exception):
            raise v
        return v

    def my_channel(self) -> Any:
        self.calls.append(("my_channel", None))
        return self._ret(self.channel)

    def playlist_items(self, playlist_id: str, max_results: int = 50) -> Any:
        self.calls.append(("playlist_items", playlist_id))
        return list(self._ret(self.playlists.get(playlist_id, [])))

    def activities(self, max_results: int = 50) -> Any:
        self.calls.append(("activities", None))
        return list(self._ret(self._activities))

    def search_mine(self, max_results: int = 50) -> Any:
        self.calls.append(("search_mine", None))
        return list(self._ret(self._search))

    def video_details(self, video_id: str) -> Any:
        self.calls.append(("video_details", video_id))
        return self._ret(self.videos.get(video_id))


def video_item(vid: str, duration: str = "PT10M", published: str = "2024-01-05T08:00:00Z", **kw: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": vid,
        "snippet": {
            "title": kw.get("title", f"Title {vid}"),
            "channelTitle": kw.get("channel", "My Channel"),
            "publishedAt": published,
        },
        "contentDetails": {"duration": duration},
    }
    if "views" in kw:
        item["statistics"] = {"viewCount": str(kw["views"])}
    return item


def playlist_row(vid: str, published: str = "2024-01-05T09:00:00Z") -> dict[str, Any]:
    return {"snippet": {"publishedAt": published, "title": f"Row {vid}", "resourceId": {"kind": "youtube#video", "videoId": vid}}}


def channel_item(uploads: str | None = "UU1", history: str | None = None, title: str = "My Channel") -> dict[str, Any]:
    rel: dict[str, str] = {}
    if uploads:
        rel["uploads"] = uploads
    if history:
        rel["watchHistory"] = history
    return {"id": "UC1", "snippet": {"title": title}, "contentDetails": {"relatedPlaylists": rel}}
