# /tubetally.py
# TubeTally - YouTube watch-time reports
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations
from typing import Any, Dict, List

import os
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from _logging import log
from api import register as register_api
from tt_platform.config_base import config_path, load_config

__version__ = os.getenv("APP_VERSION", "v0.1.0")

_log = log.child("HTTP")

# Log buffers
MAX_LOG_LINES = 1000
LOG_BUFFERS: Dict[str, List[str]] = {"YOUTUBE": [], "HTTP": []}

def _append_log(tag: str, raw_line: str) -> None:
    buf = LOG_BUFFERS.setdefault(tag, [])
    buf.append(raw_line.rstrip("\n"))
    if len(buf) > MAX_LOG_LINES:
        LOG_BUFFERS[tag] = buf[-MAX_LOG_LINES:]
    log(raw_line, level="INFO", module=tag)

def _is_debug_enabled() -> bool:
    try:
        return bool((load_config().get("runtime") or {}).get("debug"))
    except Exception:
        return False

# API
app = FastAPI(title="TubeTally", version=__version__.lstrip("v"))

@app.middleware("http")
async def conditional_access_logger(request: Request, call_next):
    t0 = time.time()
    response = None
    err = None
    try:
        response = await call_next(request)
        status = getattr(response, "status_code", 0) or 0
    except Exception as e:
        err = e
        status = 500
    finally:
        should_log = (err is not None) or (status >= 500) or (status >= 400 and _is_debug_enabled())
        if should_log:
            dt_ms = int((time.time() - t0) * 1000)
            client = request.client
            host = f"{client.host}:{client.port}" if client else "-"
            line = f"{host} {request.method} {request.url.path} -> {status} ({dt_ms} ms)"
            _append_log("HTTP", line)
    if err is not None:
        raise err
    return response

register_api(app, log_fn=_append_log)

@app.get("/", tags=["meta"])
def index() -> JSONResponse:
    return JSONResponse({
        "name": "TubeTally",
        "version": __version__.lstrip("v"),
        "routes": {
            "report": "/api/watch-history",
            "demo": "/api/watch-history/demo",
            "login": "/auth/google",
            "logout": "/logout",
            "auth_status": "/api/auth/status",
        },
    })

@app.get("/api/logs", tags=["meta"])
def api_logs(tag: str = "HTTP", tail: int = 200) -> Dict[str, Any]:
    lines = LOG_BUFFERS.get(tag.upper(), [])
    return {"tag": tag.upper(), "lines": lines[-max(0, int(tail)):]}

def main(host: str | None = None, port: int | None = None) -> None:
    cfg = load_config()
    srv = cfg.get("server") or {}
    host = host or str(srv.get("host") or "0.0.0.0")
    port = int(port or srv.get("port") or 8787)
    debug = bool((cfg.get("runtime") or {}).get("debug"))

    print("\nTubeTally running:")
    print(f"  Local:   http://127.0.0.1:{port}")
    print(f"  Bind:    {host}:{port}")
    print(f"  Config:  {config_path()} (JSON)\n")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=("debug" if debug else "warning"),
        access_log=debug,
    )

if __name__ == "__main__":
    main()
