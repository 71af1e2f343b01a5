# api/configAPI.py
# TubeTally - Configuration API
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tt_platform import config_base
from tt_platform.config_base import MASK, load_config, redact_config, report_settings, save_config

def _nostore(res: JSONResponse) -> JSONResponse:
    res.headers["Cache-Control"] = "no-store"
    return res

router = APIRouter(prefix="/api", tags=["config"])

_SECRETS = [
    ("youtube", "client_secret"),
    ("youtube", "access_token"),
    ("youtube", "refresh_token"),
]


class ReportSettingsIn(BaseModel):
    window_days: int | None = Field(None, ge=1, le=366)
    target_total: int | None = Field(None, ge=0)
    sufficient_threshold: int | None = Field(None, ge=1)


@router.get("/config")
def api_config() -> JSONResponse:
    return _nostore(JSONResponse(redact_config(load_config())))

@router.post("/config")
def api_config_save(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    incoming = dict(payload or {})
    current = load_config()
    merged = config_base._deep_merge(current, incoming)

    def _blank(v: Any) -> bool:
        s = ("" if v is None else str(v)).strip()
        return s in {"", MASK}

    # masked or blank secrets keep the stored value
    for section, key in _SECRETS:
        inc = incoming.get(section)
        if not isinstance(inc, dict) or key not in inc:
            continue
        if _blank(inc.get(key)):
            merged.setdefault(section, {})[key] = (current.get(section) or {}).get(key, "")

    save_config(merged)
    return {"ok": True}

@router.post("/config/report")
def api_config_report(payload: ReportSettingsIn) -> dict[str, Any]:
    upd = payload.model_dump(exclude_unset=True, exclude_none=True)
    cfg = load_config()
    cfg.setdefault("report", {}).update(upd)
    save_config(cfg)
    return {"ok": True, "report": report_settings(cfg)}
