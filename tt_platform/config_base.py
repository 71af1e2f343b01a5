# tt_platform/config_base.py
# TubeTally - Configuration
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import copy
import json
import os
import secrets
import threading
import time
from pathlib import Path
from typing import Any, Dict, List

# ------------------------------------------------------------
# Base dir resolution
# ------------------------------------------------------------
def CONFIG_BASE() -> Path:
    """
    Determine the base directory for config files.

    Priority:
      1) $CONFIG_BASE if set
      2) /config (when running in container that mounts /config)
      3) Project root (one level up from this file)
    """
    env = os.getenv("CONFIG_BASE")
    if env:
        return Path(env)

    if Path("/app").exists():
        return Path("/config")

    return Path(__file__).resolve().parents[1]


YOUTUBE_SCOPES: List[str] = [
    "openid",
    "profile",
    "email",
    "https://www.googleapis.com/auth/youtube.readonly",
]

# Default config structure
DEFAULT_CFG: Dict[str, Any] = {
    # --- Provider ------------------------------------------------------------
    "youtube": {
        "client_id": "",                                # From your Google Cloud OAuth client
        "client_secret": "",                            # From your Google Cloud OAuth client
        "redirect_uri": "http://localhost:8787/auth/google/callback",
        "access_token": "",                             # OAuth2 access token
        "refresh_token": "",                            # OAuth2 refresh token
        "token_expires_at": 0,                          # Epoch when access_token expires
        "scopes": list(YOUTUBE_SCOPES),
        "account": "",                                  # Channel title; stored by /api/watch-history

        "timeout": 10.0,                                # HTTP timeout (seconds)
        "max_retries": 3,                               # Retry budget for API calls (429/5xx backoff)
        "max_results": 50,                              # Items per source (YouTube caps a page at 50)
        "lookup_workers": 4,                            # Parallel videos.list lookups

        # Record sources; a disabled source contributes nothing
        "sources": {
            "uploads": True,                            # Own channel uploads playlist
            "history": True,                            # Watch-history playlist (rarely exposed anymore)
            "activities": True,                         # activities.list?mine=true
            "search": True,                             # search.list?forMine=true
        },
    },

    # --- Report --------------------------------------------------------------
    "report": {
        "window_days": 30,                              # Trailing window, today inclusive
        "target_total": 50,                             # Mixed reports are topped up to this many records
        "sufficient_threshold": 50,                     # Real records needed to skip demo filler entirely
    },

    # --- Runtime -------------------------------------------------------------
    "runtime": {
        "debug": False,                                 # Emit debug lines and keep debug diagnostics
    },

    # --- Server --------------------------------------------------------------
    "server": {
        "host": "0.0.0.0",
        "port": 8787,
    },
}

_SECRET_PATHS: List[tuple[str, str]] = [
    ("youtube", "client_secret"),
    ("youtube", "access_token"),
    ("youtube", "refresh_token"),
]
MASK = "••••••••"


# ------------------------------------------------------------
# Helpers: paths, IO, merging
# ------------------------------------------------------------
def _cfg_file() -> Path:
    return CONFIG_BASE() / "config.json"

def config_path() -> Path:
    """Public accessor for the active config.json path."""
    return _cfg_file()


def _read_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json_atomic(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = f".{time.time_ns()}.{os.getpid()}.{threading.get_ident()}.{secrets.token_hex(4)}.tmp"
    tmp = p.with_suffix(suffix)

    with tmp.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    tmp.replace(p)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)  # type: ignore[assignment]
        else:
            out[k] = v
    return out


def _as_int(value: Any, default: int, *, lo: int, hi: int | None = None) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        n = default
    n = max(lo, n)
    return min(hi, n) if hi is not None else n


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Read config.json merged over the defaults.
    """
    p = _cfg_file()
    user_cfg: Dict[str, Any] = {}
    if p.exists():
        try:
            user_cfg = _read_json(p)
        except Exception:
            user_cfg = {}
    if not isinstance(user_cfg, dict):
        user_cfg = {}
    return _deep_merge(DEFAULT_CFG, user_cfg)


def save_config(cfg: Dict[str, Any]) -> None:
    """
    Write to config.json
    """
    _write_json_atomic(_cfg_file(), dict(cfg or {}))


def redact_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(cfg or {})
    for section, key in _SECRET_PATHS:
        node = out.get(section)
        if isinstance(node, dict) and node.get(key):
            node[key] = MASK
    return out


def report_settings(cfg: Dict[str, Any] | None = None) -> Dict[str, int]:
    """Typed, clamped report parameters."""
    rep = ((cfg if cfg is not None else load_config()).get("report") or {})
    d = DEFAULT_CFG["report"]
    target = _as_int(rep.get("target_total"), d["target_total"], lo=0)
    return {
        "window_days": _as_int(rep.get("window_days"), d["window_days"], lo=1, hi=366),
        "target_total": target,
        "sufficient_threshold": _as_int(rep.get("sufficient_threshold"), d["sufficient_threshold"], lo=1),
    }


def youtube_settings(cfg: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Typed, clamped API client parameters."""
    yt = ((cfg if cfg is not None else load_config()).get("youtube") or {})
    d = DEFAULT_CFG["youtube"]
    try:
        timeout = float(yt.get("timeout", d["timeout"]))
    except (TypeError, ValueError):
        timeout = d["timeout"]
    src = dict(d["sources"])
    src.update({k: bool(v) for k, v in (yt.get("sources") or {}).items() if k in src})
    return {
        "timeout": max(1.0, timeout),
        "max_retries": _as_int(yt.get("max_retries"), d["max_retries"], lo=1, hi=10),
        "max_results": _as_int(yt.get("max_results"), d["max_results"], lo=1, hi=50),
        "lookup_workers": _as_int(yt.get("lookup_workers"), d["lookup_workers"], lo=1, hi=16),
        "sources": src,
    }
