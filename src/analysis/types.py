"""Dataclasses shared by the transcription adapter and the scoring layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True, slots=True)
class Word:
    """Timestamped token (offsets in seconds from the start of the take)."""

    word: str
    start: float
    end: float
    confidence: float = 0.0
    filler: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class Utterance:
    """Provider-segmented span of continuous speech."""

    text: str
    start: float
    end: float
    confidence: float = 0.0

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class VolumeSample:
    start: float
    end: float
    loudness: float


@dataclass(frozen=True, slots=True)
class SilenceGap:
    start: float
    end: float
    duration: float


@dataclass(frozen=True, slots=True)
class TranscriptResult:
    """Everything produced for one completed recording."""

    transcript: str
    duration: float
    words: Tuple[Word, ...] = field(default_factory=tuple)
    utterances: Tuple[Utterance, ...] = field(default_factory=tuple)
    volume_profile: Tuple[VolumeSample, ...] = field(default_factory=tuple)
    silence_durations: Tuple[SilenceGap, ...] = field(default_factory=tuple)
    filler_words: Tuple[Word, ...] = field(default_factory=tuple)
    language: str = "auto"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TranscriptResult":
        """Build a result from the camelCase JSON returned by ``/v1/transcribe``."""

        def _words(items) -> Tuple[Word, ...]:
            return tuple(
                Word(
                    word=str(item.get("word", "")),
                    start=float(item.get("start", 0.0)),
                    end=float(item.get("end", 0.0)),
                    confidence=float(item.get("confidence", 0.0) or 0.0),
                    filler=item.get("filler"),
                )
                for item in items or []
            )

        return cls(
            transcript=str(payload.get("transcript", "")),
            duration=float(payload.get("duration", 0.0) or 0.0),
            words=_words(payload.get("words")),
            utterances=tuple(
                Utterance(
                    text=str(item.get("transcript", item.get("text", ""))),
                    start=float(item.get("start", 0.0)),
                    end=float(item.get("end", 0.0)),
                    confidence=float(item.get("confidence", 0.0) or 0.0),
                )
                for item in payload.get("utterances") or []
            ),
            volume_profile=tuple(
                VolumeSample(
                    start=float(item.get("start", 0.0)),
                    end=float(item.get("end", 0.0)),
                    loudness=float(item.get("loudness", 0.0)),
                )
                for item in payload.get("volumeProfile") or []
            ),
            silence_durations=tuple(
                SilenceGap(
                    start=float(item.get("start", 0.0)),
                    end=float(item.get("end", 0.0)),
                    duration=float(item.get("duration", 0.0)),
                )
                for item in payload.get("silenceDurations") or []
            ),
            filler_words=_words(payload.get("fillerWords")),
            language=str(payload.get("language", "auto")),
        )
