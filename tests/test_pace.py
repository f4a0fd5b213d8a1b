import math

import pytest

from src.analysis.pace import classify_pace, count_words, round_half_up, safe_duration, words_per_minute


def test_words_per_minute_basic():
    assert words_per_minute(9, 6) == 90
    assert words_per_minute(130, 60) == 130


def test_words_per_minute_rounds_half_up():
    assert words_per_minute(1, 24) == 3
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2


@pytest.mark.parametrize("duration", [0, -3, None, math.nan, math.inf])
def test_words_per_minute_invalid_duration(duration):
    assert words_per_minute(10, duration) == 0


def test_safe_duration():
    assert safe_duration("4.5") == 4.5
    assert safe_duration("abc") == 0.0


@pytest.mark.parametrize(
    "wpm,zone",
    [(0, "slow"), (109, "slow"), (110, "ideal"), (160, "ideal"), (161, "fast"), (300, "fast")],
)
def test_classify_pace_boundaries(wpm, zone):
    assert classify_pace(wpm) == zone


def test_count_words_whitespace():
    assert count_words("  hello   there\nfriend ") == 3
    assert count_words("") == 0
