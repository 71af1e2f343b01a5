# /providers/youtube/__init__.py
from __future__ import annotations

from .client import API_BASE, YouTubeAPIError, YouTubeClient

__all__ = ["API_BASE", "YouTubeAPIError", "YouTubeClient"]
