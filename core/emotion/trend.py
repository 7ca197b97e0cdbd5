"""Emotion trend aggregation for the intensity graph.

Pure functions over ``EmotionLog`` sequences. Dates are bucketed in the
caller-supplied timezone so a log written late in the evening lands on the
user's local day, not the UTC one.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, tzinfo

from core.emotion.types import EmotionLog


@dataclass(frozen=True)
class TrendPoint:
    """Average intensity of all logs recorded on one local date."""

    day: date
    intensity: float


def emotion_trend(logs: Iterable[EmotionLog], tz: tzinfo = UTC) -> list[TrendPoint]:
    """Group logs by local date and average their intensities.

    Args:
        logs: Emotion logs in any order.
        tz: Timezone used to derive each log's calendar date.

    Returns:
        One ``TrendPoint`` per date, ascending by date. Empty for no logs.
    """
    totals: dict[date, list[int]] = {}
    for log in logs:
        day = log.created_at.astimezone(tz).date()
        totals.setdefault(day, []).append(log.emotion.intensity)

    return [
        TrendPoint(day=day, intensity=sum(values) / len(values))
        for day, values in sorted(totals.items())
    ]


def average_intensity(logs: Sequence[EmotionLog]) -> float:
    """Mean intensity across *logs*, ``0.0`` when there are none."""
    if not logs:
        return 0.0
    return sum(log.emotion.intensity for log in logs) / len(logs)
