# services/report.py
# TubeTally - Daily watch-time report
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from _logging import EventLog
from tt_platform.config_base import load_config, report_settings, youtube_settings

from .blending import MESSAGES, BlendPolicy, BlendResult, Outcome, blend
from .buckets import DailyBucketIndex, build, fold, merge_daily_stats
from .collector import VideoPlatformClient, collect_real_records
from .duration import round_minutes
from .models import Report, iso_utc
from .synthetic import generate_synthetic

__all__ = ["tabulate", "chart_series", "build_report", "get_watch_report"]

ClientFactory = Callable[[str, Mapping[str, Any]], VideoPlatformClient]


def tabulate(index: DailyBucketIndex) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for i, day in enumerate(sorted(index), start=1):
        st = index[day]
        rows.append({
            "day": i,
            "date": day,
            "minutes": round_minutes(st.total_minutes),
            "videos": st.video_count,
        })
    return rows


def chart_series(table: list[dict[str, Any]]) -> dict[str, list[Any]]:
    return {"labels": [r["day"] for r in table], "data": [r["minutes"] for r in table]}


def build_report(
    result: BlendResult,
    *,
    now: datetime | None = None,
    window_days: int = 30,
    message: str | None = None,
    error: str | None = None,
    events: EventLog | None = None,
) -> Report:
    """Fold blended records into the trailing window and emit table + chart views."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    real_idx, demo_idx = build(window_days, now), build(window_days, now)
    real = [r for r in result.records if not r.is_synthetic]
    demo = [r for r in result.records if r.is_synthetic]
    landed = fold(real, real_idx)
    fold(demo, demo_idx)
    if events is not None and landed < len(real):
        events.info("report.out_of_window", f"{len(real) - landed} real record(s) fall outside the {window_days}-day window",
                    dropped=len(real) - landed)

    daily = merge_daily_stats(real_idx, demo_idx)
    table = tabulate(daily)
    return Report(
        watch_history=result.records,
        daily_stats=daily,
        is_demo=result.is_demo,
        is_mixed=result.is_mixed,
        real_data_count=result.real_count,
        message=message or result.message,
        table=tuple(table),
        chart=chart_series(table),
        diagnostics=tuple(events.events) if events is not None else (),
        error=error,
        generated_at=iso_utc(now),
    )


def _default_client(token: str, yt: Mapping[str, Any]) -> VideoPlatformClient:
    from providers.youtube import YouTubeClient
    return YouTubeClient(token, timeout=yt["timeout"], max_retries=yt["max_retries"])


def get_watch_report(
    is_authenticated: bool,
    credential: str | None = None,
    *,
    client: VideoPlatformClient | None = None,
    client_factory: ClientFactory | None = None,
    cfg: Mapping[str, Any] | None = None,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> Report:
    """Best-effort report for one request. Never raises."""
    events = EventLog()
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    try:
        conf = dict(cfg) if cfg is not None else load_config()
        rep = report_settings(conf)
        yt = youtube_settings(conf)
    except Exception as e:
        events.error("config.failed", f"config unreadable, using defaults: {e}")
        conf, rep, yt = {}, report_settings({}), youtube_settings({})
    window = rep["window_days"]

    def synthesize():
        return generate_synthetic(now, window_days=window, rng=rng)

    if not is_authenticated or not credential:
        events.info("report.demo", "unauthenticated request; serving demo data")
        return build_report(blend([], synthesize), now=now, window_days=window,
                            message=MESSAGES["unauthenticated"], events=events)

    try:
        api = client or (client_factory or _default_client)(credential, yt)
        real = collect_real_records(
            api,
            sources=yt["sources"],
            max_results=yt["max_results"],
            workers=yt["lookup_workers"],
            events=events,
        )
        result = blend(real, synthesize, BlendPolicy.from_settings(rep))
        if result.outcome is Outcome.MIXED:
            events.info("report.mixed", f"{result.real_count} real record(s), topped up with {result.synthetic_count} demo",
                        real=result.real_count, synthetic=result.synthetic_count)
        elif result.outcome is Outcome.DEMO:
            events.info("report.demo", "no real records; serving demo data with explanation")
        return build_report(result, now=now, window_days=window, events=events)
    except Exception as e:
        events.error("report.failed", f"watch history failed: {e}")
        return build_report(blend([], synthesize), now=now, window_days=window,
                            message=MESSAGES["api_error"], error=str(e), events=events)
