# providers/auth/_auth_YOUTUBE.py
# TubeTally - Google / YouTube Authentication Provider
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import time
from collections.abc import Mapping, MutableMapping
from typing import Any
from urllib.parse import urlencode

import requests

from _logging import log
from tt_platform.config_base import YOUTUBE_SCOPES

from ._auth_base import AuthManifest, AuthProvider, AuthStatus

GOOGLE_AUTH = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE = "https://oauth2.googleapis.com/revoke"
UA = "TubeTally/1.0"

__VERSION__ = "1.0.0"

# refresh this many seconds before expiry
_EXPIRY_SLACK = 60


class AuthError(RuntimeError): ...


def _now() -> int:
    return int(time.time())


class YouTubeAuth(AuthProvider):
    name = "YOUTUBE"

    def manifest(self) -> AuthManifest:
        return AuthManifest(
            name="YOUTUBE",
            label="YouTube",
            flow="oauth",
            fields=[
                {"key": "youtube.client_id", "label": "Client ID", "type": "text", "required": True},
                {"key": "youtube.client_secret", "label": "Client Secret", "type": "password", "required": True},
            ],
            actions={"start": True, "finish": True, "refresh": True, "disconnect": True},
            notes="Sign in with Google; read-only YouTube access is requested.",
        )

    def get_status(self, cfg: Mapping[str, Any]) -> AuthStatus:
        s = cfg.get("youtube") or {}
        exp = int(s.get("token_expires_at") or 0) or None
        ok = bool(s.get("access_token")) and not (exp and exp <= _now())
        return AuthStatus(
            connected=ok,
            label="YouTube",
            user=s.get("account") or None,
            expires_at=exp,
            scopes=list(s.get("scopes") or []) or None,
        )

    def access_token(self, cfg: Mapping[str, Any]) -> str | None:
        if not self.get_status(cfg).connected:
            return None
        return str((cfg.get("youtube") or {}).get("access_token") or "") or None

    def needs_refresh(self, cfg: Mapping[str, Any]) -> bool:
        s = cfg.get("youtube") or {}
        exp = int(s.get("token_expires_at") or 0)
        return bool(s.get("refresh_token")) and bool(exp) and exp - _EXPIRY_SLACK <= _now()

    def start(self, cfg: MutableMapping[str, Any], redirect_uri: str, state: str = "") -> dict[str, Any]:
        s = cfg.get("youtube") or {}
        client_id = str(s.get("client_id") or "").strip()
        if not client_id:
            raise AuthError("youtube.client_id is not configured")
        q = {
            "response_type": "code",
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(s.get("scopes") or YOUTUBE_SCOPES),
            "access_type": "offline",
            "include_granted_scopes": "true",
            "prompt": "consent",
        }
        if state:
            q["state"] = state
        log("YouTube: start OAuth", level="INFO", module="AUTH", extra={"redirect_uri": redirect_uri})
        return {"url": f"{GOOGLE_AUTH}?{urlencode(q)}"}

    def _token_request(self, data: dict[str, Any]) -> dict[str, Any]:
        r = requests.post(GOOGLE_TOKEN, data=data, headers={"User-Agent": UA, "Accept": "application/json"}, timeout=12)
        if not r.ok:
            raise AuthError(f"token endpoint returned {r.status_code}")
        j = r.json()
        if not isinstance(j, dict) or not j.get("access_token"):
            raise AuthError("token endpoint returned no access_token")
        return j

    def _store(self, s: MutableMapping[str, Any], j: Mapping[str, Any]) -> None:
        s["access_token"] = j.get("access_token", "")
        s["refresh_token"] = j.get("refresh_token", "") or s.get("refresh_token", "")
        s["token_expires_at"] = _now() + int(j.get("expires_in", 0) or 0) if j.get("expires_in") else 0
        if j.get("scope"):
            s["scopes"] = str(j["scope"]).split()

    def finish(self, cfg: MutableMapping[str, Any], **payload: Any) -> AuthStatus:
        s = cfg.setdefault("youtube", {})
        data = {
            "grant_type": "authorization_code",
            "client_id": s.get("client_id", ""),
            "client_secret": s.get("client_secret", ""),
            "redirect_uri": payload.get("redirect_uri", "") or s.get("redirect_uri", ""),
            "code": payload.get("code", ""),
        }
        log("YouTube: exchange code", level="INFO", module="AUTH")
        self._store(s, self._token_request(data))
        log("YouTube: tokens stored", level="SUCCESS", module="AUTH")
        return self.get_status(cfg)

    def refresh(self, cfg: MutableMapping[str, Any]) -> AuthStatus:
        s = cfg.setdefault("youtube", {})
        if not s.get("refresh_token"):
            log("YouTube: no refresh token", level="WARNING", module="AUTH")
            return self.get_status(cfg)
        data = {
            "grant_type": "refresh_token",
            "client_id": s.get("client_id", ""),
            "client_secret": s.get("client_secret", ""),
            "refresh_token": s.get("refresh_token", ""),
        }
        log("YouTube: refresh token", level="INFO", module="AUTH")
        self._store(s, self._token_request(data))
        log("YouTube: refresh ok", level="SUCCESS", module="AUTH")
        return self.get_status(cfg)

    def disconnect(self, cfg: MutableMapping[str, Any]) -> AuthStatus:
        s = cfg.setdefault("youtube", {})
        tok = s.get("refresh_token") or s.get("access_token")
        if tok:
            try:
                requests.post(GOOGLE_REVOKE, data={"token": tok}, headers={"User-Agent": UA}, timeout=8)
            except requests.RequestException as e:
                log(f"YouTube: revoke failed: {e}", level="WARNING", module="AUTH")
        for k in ("access_token", "refresh_token", "account"):
            s[k] = ""
        s["token_expires_at"] = 0
        log("YouTube: disconnected", level="INFO", module="AUTH")
        return self.get_status(cfg)


PROVIDER = YouTubeAuth()
