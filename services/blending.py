# services/blending.py
# TubeTally - Real/demo record blending
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from .models import WatchRecord
from .synthetic import SyntheticBatch

__all__ = ["Outcome", "BlendPolicy", "BlendResult", "blend", "MESSAGES"]


class Outcome(Enum):
    DEMO = "demo"
    MIXED = "mixed"
    REAL = "real"


MESSAGES: dict[str, str] = {
    "unauthenticated": "Demo data - the YouTube API does not expose a full watch history.",
    "no_real_data": (
        "Demo data - the YouTube API does not give access to watch history for privacy reasons. "
        "To see your real data, export it via Google Takeout."
    ),
    "mixed": "Mixed data: part real, part demo (the YouTube API limits access to watch history).",
    "real": "Real data from your YouTube account.",
    "api_error": "Demo data due to an API error.",
}


@dataclass(frozen=True)
class BlendPolicy:
    target_total: int = 50
    sufficient_threshold: int = 50

    def __post_init__(self) -> None:
        if self.target_total < 0:
            raise ValueError("target_total must be >= 0")
        if self.sufficient_threshold < 1:
            raise ValueError("sufficient_threshold must be >= 1")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "BlendPolicy":
        return cls(
            target_total=int(settings.get("target_total", 50)),
            sufficient_threshold=int(settings.get("sufficient_threshold", 50)),
        )


@dataclass(frozen=True)
class BlendResult:
    records: tuple[WatchRecord, ...]
    outcome: Outcome
    real_count: int
    synthetic_count: int

    @property
    def is_demo(self) -> bool:
        return self.outcome is Outcome.DEMO

    @property
    def is_mixed(self) -> bool:
        return self.outcome is Outcome.MIXED

    @property
    def message(self) -> str:
        return MESSAGES["no_real_data" if self.is_demo else self.outcome.value]


def blend(
    real: Sequence[WatchRecord],
    synthesize: Callable[[], SyntheticBatch],
    policy: BlendPolicy | None = None,
) -> BlendResult:
    """Pick one of three outcomes from the number of real records.

    No real records: the whole synthetic batch. Fewer than the sufficiency
    threshold: every real record, then synthetic ones up to `target_total`.
    Otherwise real records only. `synthesize` is only called when needed.
    """
    policy = policy or BlendPolicy()
    k = len(real)

    if k == 0:
        batch = synthesize()
        return BlendResult(batch.records, Outcome.DEMO, 0, len(batch.records))

    if k < policy.sufficient_threshold:
        need = max(0, policy.target_total - k)
        filler = synthesize().records[:need] if need else ()
        return BlendResult(tuple(real) + tuple(filler), Outcome.MIXED, k, len(filler))

    return BlendResult(tuple(real), Outcome.REAL, k, 0)
