# /providers/youtube/client.py
# TubeTally - YouTube Data API v3 client
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from typing import Any, Mapping

import requests

from .._mod_common import build_session, request_with_retries, safe_json

__all__ = ["YouTubeClient", "YouTubeAPIError", "API_BASE"]

API_BASE = "https://www.googleapis.com/youtube/v3"
URL_CHANNELS = f"{API_BASE}/channels"
URL_PLAYLIST_ITEMS = f"{API_BASE}/playlistItems"
URL_ACTIVITIES = f"{API_BASE}/activities"
URL_SEARCH = f"{API_BASE}/search"
URL_VIDEOS = f"{API_BASE}/videos"


class YouTubeAPIError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None, reason: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason


def _error_of(status: int, body: Any) -> YouTubeAPIError:
    err = (body or {}).get("error") if isinstance(body, Mapping) else None
    msg, reason = f"HTTP {status}", None
    if isinstance(err, Mapping):
        msg = str(err.get("message") or msg)
        errs = err.get("errors") or []
        if errs and isinstance(errs[0], Mapping):
            reason = errs[0].get("reason")
    return YouTubeAPIError(f"YouTube API error {status}: {msg}", status=status, reason=reason)


class YouTubeClient:
    """Thin, read-only wrapper over the endpoints the report needs."""

    def __init__(
        self,
        access_token: str,
        *,
        timeout: float = 10.0,
        max_retries: int = 3,
        session: requests.Session | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token required")
        self.timeout = float(timeout)
        self.max_retries = int(max_retries)
        self.session = session or build_session()
        self.session.headers["Authorization"] = f"Bearer {access_token}"

    def _get(self, url: str, params: Mapping[str, Any]) -> dict[str, Any]:
        try:
            r = request_with_retries(
                self.session, "GET", url,
                params=dict(params), timeout=self.timeout, max_retries=self.max_retries,
            )
        except requests.RequestException as e:
            raise YouTubeAPIError(f"YouTube API unreachable: {e}") from e
        body = safe_json(r)
        if not r.ok:
            raise _error_of(r.status_code, body)
        return body if isinstance(body, dict) else {}

    def _items(self, url: str, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        items = self._get(url, params).get("items") or []
        return [it for it in items if isinstance(it, dict)]

    # Endpoints

    def my_channel(self) -> dict[str, Any] | None:
        items = self._items(URL_CHANNELS, {"part": "contentDetails,statistics,snippet", "mine": "true"})
        return items[0] if items else None

    def playlist_items(self, playlist_id: str, max_results: int = 50) -> list[dict[str, Any]]:
        return self._items(URL_PLAYLIST_ITEMS, {
            "part": "snippet,contentDetails",
            "playlistId": playlist_id,
            "maxResults": max_results,
        })

    def activities(self, max_results: int = 50) -> list[dict[str, Any]]:
        return self._items(URL_ACTIVITIES, {
            "part": "snippet,contentDetails",
            "mine": "true",
            "maxResults": max_results,
        })

    def search_mine(self, max_results: int = 50) -> list[dict[str, Any]]:
        return self._items(URL_SEARCH, {
            "part": "snippet",
            "forMine": "true",
            "type": "video",
            "order": "date",
            "maxResults": max_results,
        })

    def video_details(self, video_id: str) -> dict[str, Any] | None:
        items = self._items(URL_VIDEOS, {"part": "contentDetails,snippet,statistics", "id": video_id})
        return items[0] if items else None

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "YouTubeClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
