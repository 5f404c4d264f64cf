from __future__ import annotations

import math
from typing import Any

from app.schemas.analysis import BUCKET_MAX, BUCKET_ORDER, ATSBucketScore


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_int(value: Any, default: int, min_value: int, max_value: int) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(min_value, min(max_value, round_half_up(number)))


def bucket_max(label: str) -> int:
    return BUCKET_MAX[label]


def make_bucket(label: str, score: int, reasons: list[str] | None = None) -> ATSBucketScore:
    maximum = bucket_max(label)
    return ATSBucketScore(
        label=label,
        score=max(0, min(maximum, int(score))),
        max=maximum,
        reasons=list(reasons or []),
    )


def feedback_lines(buckets: list[ATSBucketScore]) -> list[str]:
    by_label = {bucket.label: bucket for bucket in buckets}
    return [by_label[label].feedback_line() for label in BUCKET_ORDER if label in by_label]
