# TubeTally test scripts
from __future__ import annotations

import itertools
from datetime import date, datetime, timedelta, timezone
from fractions import Fraction

import pytest

from services.buckets import accumulate, build, fold, merge_daily_stats
from services.models import DailyStat


def test_build_covers_thirty_consecutive_days_ending_today() -> None:
    today = date(2024, 3, 1)
    idx = build(30, today)
    keys = list(idx)
    assert len(keys) == 30 == len(set(keys))
    assert keys[-1] == "2024-03-01"
    assert keys[0] == "2024-02-01"
    days = [date.fromisoformat(k) for k in keys]
    assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))
    assert all(s.total_minutes == 0 and s.video_count == 0 for s in idx.values())


def test_build_uses_utc_date_of_aware_datetime() -> None:
    # 23:30 at UTC-5 is already the next day in UTC
    end = datetime(2024, 1, 4, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert list(build(1, end)) == ["2024-01-05"]


def test_build_rejects_empty_window() -> None:
    with pytest.raises(ValueError):
        build(0, date(2024, 1, 1))


def test_accumulate_inside_and_outside_window() -> None:
    idx = build(30, date(2024, 1, 5))
    assert accumulate(idx, date(2024, 1, 5), 10) is True
    assert accumulate(idx, "2024-01-05", 2.5) is True
    assert idx["2024-01-05"].total_minutes == Fraction(25, 2)
    assert idx["2024-01-05"].video_count == 2

    assert accumulate(idx, date(2023, 11, 1), 99) is False
    assert accumulate(idx, date(2024, 1, 6), 99) is False
    assert sum(s.video_count for s in idx.values()) == 2


def test_accumulate_rejects_negative_minutes() -> None:
    idx = build(3, date(2024, 1, 5))
    with pytest.raises(ValueError):
        accumulate(idx, date(2024, 1, 5), -1)


def test_fold_is_order_independent(make_record) -> None:
    recs = [
        make_record("2024-01-05T01:00:00Z", 62.05, vid="a"),
        make_record("2024-01-05T02:00:00Z", 0.1, vid="b"),
        make_record("2024-01-04T03:00:00Z", 0.2, vid="c"),
        make_record("2024-01-05T04:00:00Z", 0.3, vid="d"),
        make_record("2023-10-01T04:00:00Z", 7, vid="old"),
    ]
    outputs = set()
    for perm in itertools.permutations(recs):
        idx = build(30, date(2024, 1, 5))
        fold(perm, idx)
        outputs.add(tuple((d, s.total_minutes, s.video_count) for d, s in idx.items()))
    assert len(outputs) == 1


def test_fold_counts_only_records_in_window(make_record) -> None:
    idx = build(30, date(2024, 1, 5))
    landed = fold([make_record("2024-01-05T01:00:00Z"), make_record("2022-01-05T01:00:00Z")], idx)
    assert landed == 1


def test_merge_daily_stats_is_additive_union() -> None:
    real = {"2024-01-04": DailyStat(Fraction(10), 1), "2024-01-05": DailyStat(Fraction(5), 1)}
    demo = {"2024-01-05": DailyStat(Fraction(30), 2), "2024-01-03": DailyStat(Fraction(22), 1)}

    merged = merge_daily_stats(real, demo)

    assert list(merged) == ["2024-01-03", "2024-01-04", "2024-01-05"]
    assert merged["2024-01-05"] == DailyStat(Fraction(35), 3)
    assert merged["2024-01-04"] == DailyStat(Fraction(10), 1)
    # inputs untouched
    assert real["2024-01-05"] == DailyStat(Fraction(5), 1)
