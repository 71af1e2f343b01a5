# api/authenticationAPI.py
# TubeTally - Google sign-in routes
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import secrets
from dataclasses import asdict
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from providers.auth._auth_YOUTUBE import PROVIDER as YT_AUTH
from tt_platform.config_base import load_config, save_config

__all__ = ["register_auth", "OAUTH_STATE"]

OAUTH_STATE: dict[str, Any] = {}


def _safe_log(fn: Optional[Callable[[str, str], None]], tag: str, msg: str) -> None:
    try:
        if callable(fn): fn(tag, msg)
    except Exception:
        pass


def _redirect_uri(cfg: dict[str, Any], request: Request) -> str:
    uri = str((cfg.get("youtube") or {}).get("redirect_uri") or "").strip()
    return uri or str(request.url_for("oauth_google_callback"))


def register_auth(app: FastAPI, *, log_fn: Optional[Callable[[str, str], None]] = None) -> None:
    @app.get("/api/auth/status", tags=["auth"])
    def api_auth_status() -> dict[str, Any]:
        cfg = load_config()
        return {"ok": True, "manifest": asdict(YT_AUTH.manifest()), "status": asdict(YT_AUTH.get_status(cfg))}

    @app.get("/auth/google", tags=["auth"])
    def oauth_google_start(request: Request):
        cfg = load_config()
        state = secrets.token_urlsafe(24)
        redirect_uri = _redirect_uri(cfg, request)
        try:
            url = YT_AUTH.start(cfg, redirect_uri=redirect_uri, state=state)["url"]
        except Exception as e:
            _safe_log(log_fn, "YOUTUBE", f"[YOUTUBE] ERROR: {e}")
            return PlainTextResponse(f"Cannot start Google sign-in: {e}", 400)
        OAUTH_STATE["state"], OAUTH_STATE["redirect_uri"] = state, redirect_uri
        return RedirectResponse(url, status_code=302)

    @app.get("/auth/google/callback", tags=["auth"])
    def oauth_google_callback(request: Request) -> PlainTextResponse:
        params = dict(request.query_params)
        if params.get("error"):
            return PlainTextResponse(f"Google sign-in failed: {params['error']}", 400)
        code = params.get("code"); state = params.get("state")
        if not code or not state: return PlainTextResponse("Missing code or state.", 400)
        if state != OAUTH_STATE.get("state"): return PlainTextResponse("State mismatch.", 400)
        try:
            cfg = load_config()
            YT_AUTH.finish(cfg, code=code, redirect_uri=OAUTH_STATE.get("redirect_uri") or "")
            save_config(cfg)
        except Exception as e:
            _safe_log(log_fn, "YOUTUBE", f"[YOUTUBE] ERROR: {e}")
            return PlainTextResponse(f"Error: {e}", 500)
        OAUTH_STATE.clear()
        _safe_log(log_fn, "YOUTUBE", "[YOUTUBE] Access token saved.")
        return PlainTextResponse("YouTube authorized. You can close this tab and return to the app.", 200)

    @app.get("/logout", tags=["auth"])
    def logout() -> RedirectResponse:
        cfg = load_config()
        try:
            YT_AUTH.disconnect(cfg)
        finally:
            save_config(cfg)
        return RedirectResponse("/", status_code=302)
