# /api/reportAPI.py
# TubeTally - Watch report API
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import random
from typing import Any, Iterable, Mapping

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from _logging import log
from providers.auth._auth_YOUTUBE import PROVIDER as YT_AUTH
from services.report import get_watch_report
from tt_platform.config_base import load_config, save_config

__all__ = ["router", "resolve_identity", "hydrate_account"]

router = APIRouter(prefix="/api", tags=["report"])
_log = log.child("API")


def _nostore(res: JSONResponse) -> JSONResponse:
    res.headers["Cache-Control"] = "no-store"
    return res


def hydrate_account(cfg: dict[str, Any], diagnostics: Iterable[Mapping[str, Any]]) -> bool:
    """Store the channel title seen during collection as `youtube.account`."""
    title = next((str(e.get("channel") or "") for e in diagnostics if e.get("event") == "source.channel"), "")
    yt = cfg.setdefault("youtube", {})
    if not title or yt.get("account") == title:
        return False
    yt["account"] = title
    return True


def resolve_identity(cfg: dict[str, Any]) -> tuple[bool, str | None]:
    """(is_authenticated, access_token) for the stored YouTube credentials; refreshes when due."""
    if YT_AUTH.needs_refresh(cfg):
        try:
            YT_AUTH.refresh(cfg)
            save_config(cfg)
        except Exception as e:
            _log.warn(f"token refresh failed: {e}")
    token = YT_AUTH.access_token(cfg)
    return bool(token), token


@router.get("/watch-history")
def api_watch_history() -> JSONResponse:
    try:
        cfg = load_config()
    except Exception as e:
        _log.error(f"config load failed: {e}")
        cfg = {}
    authed, token = resolve_identity(cfg)
    report = get_watch_report(authed, token, cfg=cfg)
    if authed and hydrate_account(cfg, report.diagnostics):
        try:
            save_config(cfg)
        except Exception as e:
            _log.warn(f"saving account failed: {e}")
    return _nostore(JSONResponse(report.to_dict()))


@router.get("/watch-history/demo")
def api_watch_history_demo(seed: int | None = Query(None)) -> JSONResponse:
    rng = random.Random(seed) if seed is not None else None
    report = get_watch_report(False, rng=rng)
    return _nostore(JSONResponse(report.to_dict()))
