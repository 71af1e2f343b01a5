from __future__ import annotations

from typing import Callable
from fastapi import FastAPI

from .configAPI import router as config_router
from .reportAPI import router as report_router
from .authenticationAPI import register_auth

__all__ = [
    "config_router",
    "report_router",
    "register_auth",
    "register",
]

def register(
    app: FastAPI,
    *,
    log_fn: Callable[[str, str], None] | None = None,
) -> None:
    app.include_router(config_router)
    app.include_router(report_router)
    register_auth(app, log_fn=log_fn)
