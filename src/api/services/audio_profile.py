"""Volume and silence derivations computed next to the transcript."""

from __future__ import annotations

import io
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import soundfile as sf

from src.analysis.types import SilenceGap, VolumeSample, Word

LOGGER = logging.getLogger("crisp.audio")


def decode_audio(data: bytes) -> Optional[Tuple[np.ndarray, int]]:
    """Decode an upload to mono float32 PCM; ``None`` when libsndfile cannot read it."""
    try:
        audio, sample_rate = sf.read(io.BytesIO(data), dtype="float32")
    except (RuntimeError, TypeError, ValueError) as exc:
        LOGGER.debug("Audio not decodable for volume analysis: %s", exc)
        return None
    if audio.ndim > 1:
        audio = audio.mean(axis=1)
    return audio, int(sample_rate)


def audio_duration(pcm: np.ndarray, sample_rate: int) -> float:
    if sample_rate <= 0:
        return 0.0
    return len(pcm) / float(sample_rate)


def _rms(samples: np.ndarray) -> float:
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(samples, dtype=np.float64))))


def _fixed_windows(duration: float, window_sec: float) -> List[Tuple[float, float]]:
    if duration <= 0 or window_sec <= 0:
        return []
    spans: List[Tuple[float, float]] = []
    start = 0.0
    while start < duration:
        end = min(duration, start + window_sec)
        spans.append((start, end))
        start = end
    return spans


def volume_profile(
    pcm: np.ndarray,
    sample_rate: int,
    spans: Sequence[Tuple[float, float]] = (),
    window_sec: float = 1.0,
) -> List[VolumeSample]:
    """RMS loudness per span, normalized by the loudest span into [0, 1].

    Utterance spans are preferred so silence between phrases does not count
    against consistency; fixed windows cover takes without utterances.
    """
    duration = audio_duration(pcm, sample_rate)
    spans = [(s, e) for s, e in spans if e > s] or _fixed_windows(duration, window_sec)
    levels: List[Tuple[float, float, float]] = []
    for start, end in spans:
        lo = max(0, int(start * sample_rate))
        hi = min(len(pcm), int(end * sample_rate))
        levels.append((start, end, _rms(pcm[lo:hi])))
    peak = max((level for *_, level in levels), default=0.0)
    return [
        VolumeSample(
            start=round(start, 3),
            end=round(end, 3),
            loudness=round(level / peak, 4) if peak > 0 else 0.0,
        )
        for start, end, level in levels
    ]


def silence_gaps(words: Iterable[Word], min_gap: float = 0.5) -> List[SilenceGap]:
    """Pauses before the first word and between consecutive words."""
    gaps: List[SilenceGap] = []
    cursor = 0.0
    for word in sorted(words, key=lambda w: w.start):
        gap = word.start - cursor
        if gap >= min_gap:
            gaps.append(SilenceGap(start=round(cursor, 3), end=round(word.start, 3), duration=round(gap, 3)))
        cursor = max(cursor, word.end)
    return gaps
