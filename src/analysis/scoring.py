"""Composite delivery score and the feedback attached to it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Sequence

from .fillers import count_fillers, total_fillers
from .pace import Pace, classify_pace, count_words, round_half_up, safe_duration, words_per_minute
from .types import TranscriptResult, Utterance, VolumeSample, Word

PACE_WEIGHT = 25
FILLER_WEIGHT = 25
CLARITY_WEIGHT = 20
VOLUME_WEIGHT = 15
LENGTH_WEIGHT = 15

TIERS = ((90, "Excellent"), (75, "Strong"), (60, "Developing"))
LOWEST_TIER = "Needs Work"


@dataclass(frozen=True, slots=True)
class Feedback:
    label: str
    description: str


@dataclass(frozen=True, slots=True)
class SubScores:
    pace: float
    filler_density: float
    clarity: float
    volume_consistency: float
    response_length: float

    @property
    def total(self) -> float:
        return (
            self.pace
            + self.filler_density
            + self.clarity
            + self.volume_consistency
            + self.response_length
        )


@dataclass(frozen=True, slots=True)
class TranscriptMetrics:
    word_count: int
    duration: float
    wpm: int
    pace: Pace
    filler_count: Dict[str, int]
    total_fillers: int
    filler_percentage: float
    sub_scores: SubScores
    confidence_score: int
    confidence_label: str
    delivery_style: Feedback
    clarity: Feedback


DELIVERY_STYLES: Dict[str, Feedback] = {
    "slow": Feedback(
        "Too Measured",
        "Your pace was too measured and it might make you sound overly cautious. "
        "Try speaking a bit more naturally, as if you're explaining something to a colleague.",
    ),
    "ideal": Feedback(
        "Clear & Controlled",
        "Your pace is spot-on for most conversations. "
        "This is the range where clarity and confidence shine.",
    ),
    "fast": Feedback(
        "Rushed Delivery",
        "You're speaking quickly, which can show excitement but makes it harder for others "
        "to follow. Practice pausing briefly between ideas.",
    ),
}


def pace_subscore(wpm: float) -> float:
    if classify_pace(wpm) == "ideal":
        return float(PACE_WEIGHT)
    if 90 <= wpm <= 180:
        return PACE_WEIGHT * 2 / 3
    if 70 <= wpm <= 200:
        return PACE_WEIGHT / 3
    return 0.0


def filler_percentage(fillers: int, word_count: int) -> float:
    if word_count <= 0:
        return 0.0
    return fillers / word_count * 100


def filler_subscore(percentage: float) -> float:
    if percentage <= 2:
        return float(FILLER_WEIGHT)
    if percentage <= 5:
        return FILLER_WEIGHT * 2 / 3
    if percentage <= 10:
        return FILLER_WEIGHT / 3
    return 0.0


def clarity_subscore(utterances: Sequence[Utterance], words: Sequence[Word] = ()) -> float:
    """Mean provider confidence scaled to the clarity weight."""
    values = [u.confidence for u in utterances] or [w.confidence for w in words]
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return CLARITY_WEIGHT * max(0.0, min(1.0, mean))


def volume_variance(profile: Iterable[VolumeSample]) -> float:
    samples = [sample.loudness for sample in profile]
    if not samples:
        return 0.0
    mean = sum(samples) / len(samples)
    return sum((value - mean) ** 2 for value in samples) / len(samples)


def volume_subscore(profile: Sequence[VolumeSample]) -> float:
    if not profile:
        return 0.0
    variance = volume_variance(profile)
    if variance < 0.1:
        return float(VOLUME_WEIGHT)
    if variance < 0.2:
        return VOLUME_WEIGHT * 0.75
    if variance < 0.3:
        return VOLUME_WEIGHT * 0.5
    return 0.0


def length_subscore(duration: float) -> float:
    if duration >= 30:
        return float(LENGTH_WEIGHT)
    if duration >= 15:
        return LENGTH_WEIGHT * 2 / 3
    if duration >= 5:
        return LENGTH_WEIGHT / 3
    return 0.0


def clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def score_label(score: int) -> str:
    for cutoff, label in TIERS:
        if score >= cutoff:
            return label
    return LOWEST_TIER


def clarity_feedback(fillers: int) -> Feedback:
    if fillers <= 2:
        return Feedback(
            "Minimal Distractions",
            "Your speech was clean and to the point. Great control.",
        )
    if fillers <= 6:
        return Feedback(
            "Some Verbal Tics",
            "You used a few filler words. Try becoming more comfortable with pauses "
            "instead of filling space.",
        )
    return Feedback(
        "High Filler Usage",
        "Frequent filler words can distract from your message. "
        "Try slowing down and being intentional with silence.",
    )


def analyze_transcript(result: TranscriptResult) -> TranscriptMetrics:
    """Derive the full score snapshot for one transcript result."""
    duration = safe_duration(result.duration)
    word_count = count_words(result.transcript)
    wpm = words_per_minute(word_count, duration)
    pace = classify_pace(wpm)
    counts = count_fillers(result.transcript)
    fillers = total_fillers(counts)
    percentage = filler_percentage(fillers, word_count)

    sub_scores = SubScores(
        pace=pace_subscore(wpm),
        filler_density=filler_subscore(percentage),
        clarity=clarity_subscore(result.utterances, result.words),
        volume_consistency=volume_subscore(result.volume_profile),
        response_length=length_subscore(duration),
    )
    score = clamp_score(sub_scores.total)
    return TranscriptMetrics(
        word_count=word_count,
        duration=duration,
        wpm=wpm,
        pace=pace,
        filler_count=counts,
        total_fillers=fillers,
        filler_percentage=round(percentage, 2),
        sub_scores=sub_scores,
        confidence_score=score,
        confidence_label=score_label(score),
        delivery_style=DELIVERY_STYLES[pace],
        clarity=clarity_feedback(fillers),
    )
