"""Time-bucketed aggregations behind the filler heatmap and pace-over-time charts."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .fillers import normalize_token
from .pace import Pace, classify_pace, count_words, round_half_up, safe_duration
from .types import SilenceGap, Utterance, Word

BUCKET_SECONDS = 5
LONG_PAUSE_SECONDS = 2.0
FILLERS_PER_BUCKET_TARGET = 2


@dataclass(slots=True)
class FillerBucket:
    start: float
    end: float
    count: int = 0
    words: List[str] = field(default_factory=list)

    @property
    def level(self) -> str:
        if self.count == 0:
            return "none"
        if self.count <= FILLERS_PER_BUCKET_TARGET:
            return "low"
        return "high"


@dataclass(slots=True)
class FillerHeatmap:
    bucket_size: int
    buckets: List[FillerBucket]
    peak: Optional[FillerBucket]

    @property
    def insight(self) -> str:
        if self.peak is None:
            return "No filler word clusters detected!"
        return (
            f"Most fillers: {self.peak.count} in {self.bucket_size}s "
            f"at {_fmt(self.peak.start)}–{_fmt(self.peak.end)}s"
        )


def filler_heatmap(
    fillers: Iterable[Word], duration: float | None, bucket_size: int = BUCKET_SECONDS
) -> FillerHeatmap:
    seconds = safe_duration(duration)
    count = math.ceil(seconds / bucket_size) if seconds > 0 else 0
    buckets = [
        FillerBucket(start=idx * bucket_size, end=(idx + 1) * bucket_size)
        for idx in range(count)
    ]
    for word in fillers:
        if not math.isfinite(word.start):
            continue
        idx = math.floor(word.start / bucket_size)
        if 0 <= idx < len(buckets):
            bucket = buckets[idx]
            bucket.count += 1
            term = normalize_token(word.word)
            if term and term not in bucket.words:
                bucket.words.append(term)

    peak: Optional[FillerBucket] = None
    for bucket in buckets:
        if bucket.count > 0 and (peak is None or bucket.count > peak.count):
            peak = bucket
    return FillerHeatmap(bucket_size=bucket_size, buckets=buckets, peak=peak)


@dataclass(frozen=True, slots=True)
class PacePoint:
    time: float
    end: float
    wpm: int
    zone: Pace
    transcript: str


@dataclass(frozen=True, slots=True)
class PaceBucket:
    start: float
    end: float
    wpm: Optional[int]


@dataclass(frozen=True, slots=True)
class Stretch:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(slots=True)
class PaceProfile:
    points: List[PacePoint]
    buckets: List[PaceBucket]
    peak: Optional[PacePoint]
    min_wpm: Optional[int]
    max_wpm: Optional[int]
    zone_seconds: Dict[str, float]
    best_ideal_stretch: Optional[Stretch]
    long_pauses: int
    total_duration: float


def utterance_wpm(utterance: Utterance) -> Optional[int]:
    duration = utterance.end - utterance.start
    if not math.isfinite(duration) or duration <= 0:
        return None
    return round_half_up(count_words(utterance.text) / duration * 60)


def pace_points(utterances: Iterable[Utterance]) -> List[PacePoint]:
    points: List[PacePoint] = []
    for utterance in utterances:
        wpm = utterance_wpm(utterance)
        if wpm is None:
            continue
        points.append(
            PacePoint(
                time=utterance.start,
                end=utterance.end,
                wpm=wpm,
                zone=classify_pace(wpm),
                transcript=utterance.text,
            )
        )
    return points


def best_ideal_stretch(points: Sequence[PacePoint]) -> Optional[Stretch]:
    """Longest run of consecutive ideal-zone points, in a single pass."""
    best: Optional[Stretch] = None
    run_start: Optional[float] = None
    for point in points:
        if point.zone != "ideal":
            run_start = None
            continue
        if run_start is None:
            run_start = point.time
        current = Stretch(start=run_start, end=point.end)
        if best is None or current.duration > best.duration:
            best = current
    return best


def pace_buckets(
    points: Sequence[PacePoint], total: float, bucket_size: int = BUCKET_SECONDS
) -> List[PaceBucket]:
    count = math.ceil(total / bucket_size) if total > 0 else 0
    grouped: List[List[int]] = [[] for _ in range(count)]
    for point in points:
        idx = math.floor(point.time / bucket_size)
        if 0 <= idx < count:
            grouped[idx].append(point.wpm)
    return [
        PaceBucket(
            start=idx * bucket_size,
            end=(idx + 1) * bucket_size,
            wpm=round_half_up(sum(values) / len(values)) if values else None,
        )
        for idx, values in enumerate(grouped)
    ]


def pace_profile(
    utterances: Sequence[Utterance],
    silences: Sequence[SilenceGap] = (),
    bucket_size: int = BUCKET_SECONDS,
) -> PaceProfile:
    points = pace_points(utterances)
    ends = [u.end for u in utterances] + [s.end for s in silences]
    total = safe_duration(max(ends) if ends else 0.0)

    peak: Optional[PacePoint] = None
    for point in points:
        if peak is None or point.wpm > peak.wpm:
            peak = point

    zone_seconds = {"slow": 0.0, "ideal": 0.0, "fast": 0.0}
    for prev, curr in zip(points, points[1:]):
        zone_seconds[curr.zone] += max(0.0, curr.time - prev.time)

    wpms = [point.wpm for point in points]
    return PaceProfile(
        points=points,
        buckets=pace_buckets(points, total, bucket_size),
        peak=peak,
        min_wpm=min(wpms) if wpms else None,
        max_wpm=max(wpms) if wpms else None,
        zone_seconds=zone_seconds,
        best_ideal_stretch=best_ideal_stretch(points),
        long_pauses=sum(1 for gap in silences if gap.duration > LONG_PAUSE_SECONDS),
        total_duration=total,
    )


def pace_insights(profile: PaceProfile) -> List[str]:
    """Short coaching lines describing a pace profile."""
    insights: List[str] = []
    if profile.min_wpm is None or profile.max_wpm is None:
        return insights
    if profile.max_wpm > profile.min_wpm * 1.5:
        tail = "Try smoothing those transitions for better flow."
    else:
        tail = "Your pace was quite consistent!"
    insights.append(f"You fluctuated between {profile.min_wpm}–{profile.max_wpm} WPM. {tail}")

    stretch = profile.best_ideal_stretch
    if stretch is not None and stretch.duration > BUCKET_SECONDS:
        insights.append(
            f"You maintained ideal pace from {round_half_up(stretch.start)}s "
            f"to {round_half_up(stretch.end)}s"
        )
    if profile.peak is not None and profile.peak.zone == "fast":
        insights.append(
            f"Peaked at {profile.peak.wpm} WPM around {round_half_up(profile.peak.time)}s"
        )
    if profile.long_pauses:
        plural = "s" if profile.long_pauses > 1 else ""
        insights.append(
            f"You had {profile.long_pauses} strategic pause{plural}. Great for emphasis!"
        )
    return insights


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"
