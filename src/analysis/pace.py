"""Words-per-minute and pace-zone helpers."""

from __future__ import annotations

import math
from typing import Literal

Pace = Literal["slow", "ideal", "fast"]

SLOW_BELOW_WPM = 110
IDEAL_MAX_WPM = 160


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def count_words(text: str) -> int:
    return len((text or "").split())


def safe_duration(duration: float | None) -> float:
    """Clamp missing, NaN, infinite or negative durations to zero."""
    if duration is None:
        return 0.0
    try:
        value = float(duration)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def words_per_minute(word_count: int, duration: float | None) -> int:
    seconds = safe_duration(duration)
    if seconds <= 0:
        return 0
    return round_half_up(word_count / seconds * 60)


def classify_pace(wpm: float) -> Pace:
    if wpm < SLOW_BELOW_WPM:
        return "slow"
    if wpm <= IDEAL_MAX_WPM:
        return "ideal"
    return "fast"
