"""Lazy local Whisper (faster-whisper) loader plus the mock transcriber."""

from __future__ import annotations

import io
import logging
import math
import threading
from typing import Iterable, List

import numpy as np

try:  # pragma: no cover - optional heavy dependency
    from faster_whisper import WhisperModel  # type: ignore
except Exception:  # pragma: no cover
    WhisperModel = None  # type: ignore

from src.analysis.types import TranscriptResult, Utterance, Word

from ..errors import ProviderConfigError
from ..settings import APISettings
from .audio_profile import audio_duration, decode_audio

LOGGER = logging.getLogger("crisp.whisper")

SILENCE_RMS = 1e-4


def iso_language(language: str | None) -> str | None:
    """``en-US`` -> ``en``; ``auto``/empty -> ``None`` (let the model detect)."""
    if not language or language == "auto":
        return None
    return language.split("-")[0].lower()


class WhisperEngine:
    """Thin wrapper that loads faster-whisper on first use."""

    def __init__(self, settings: APISettings) -> None:
        self.settings = settings
        self._lock = threading.Lock()
        self._model = None

    def _load_model(self) -> WhisperModel:
        if WhisperModel is None:
            raise ProviderConfigError(
                "TRANSCRIPTION_PROVIDER=whisper requires the faster-whisper package"
            )
        if self._model is None:
            with self._lock:
                if self._model is None:
                    try:
                        self._model = WhisperModel(
                            self.settings.whisper_model,
                            device=self.settings.whisper_device,
                            compute_type=self.settings.whisper_compute_type,
                        )
                    except Exception as exc:  # pragma: no cover - hardware/env dep
                        LOGGER.error(
                            "Failed to load Whisper model '%s': %s",
                            self.settings.whisper_model,
                            exc,
                        )
                        raise
        return self._model

    def transcribe_bytes(self, data: bytes, language: str | None = None) -> TranscriptResult:
        model = self._load_model()
        segments, info = model.transcribe(
            io.BytesIO(data),
            language=iso_language(language),
            beam_size=5,
            word_timestamps=True,
            vad_filter=True,
        )
        return _summarize_segments(segments, info)


def _summarize_segments(segments: Iterable, info) -> TranscriptResult:
    words: List[Word] = []
    utterances: List[Utterance] = []
    for segment in segments:
        text = segment.text.strip()
        if not text:
            continue
        avg_logprob = getattr(segment, "avg_logprob", None)
        confidence = math.exp(avg_logprob) if avg_logprob is not None else 0.0
        utterances.append(
            Utterance(
                text=text,
                start=float(segment.start or 0.0),
                end=float(segment.end or 0.0),
                confidence=max(0.0, min(1.0, confidence)),
            )
        )
        for word in getattr(segment, "words", None) or []:
            words.append(
                Word(
                    word=word.word.strip(),
                    start=float(word.start or 0.0),
                    end=float(word.end or 0.0),
                    confidence=float(getattr(word, "probability", 0.0) or 0.0),
                )
            )
    transcript = " ".join(u.text for u in utterances).strip()
    duration = float(getattr(info, "duration", 0.0) or 0.0)
    if not duration and utterances:
        duration = utterances[-1].end
    return TranscriptResult(
        transcript=transcript,
        duration=duration,
        words=tuple(words),
        utterances=tuple(utterances),
        language=getattr(info, "language", None) or "auto",
    )


class MockTranscriber:
    """Deterministic transcriber for development: spreads a fixed text over the take.

    Silent or undecodable audio yields an empty transcript, which exercises the
    empty-recording path end to end.
    """

    def __init__(self, settings: APISettings) -> None:
        self.text = settings.mock_transcript
        LOGGER.warning(
            "Mock transcription enabled (set TRANSCRIPTION_PROVIDER to deepgram, "
            "openai or whisper for real transcripts)."
        )

    def transcribe_bytes(self, data: bytes, language: str | None = None) -> TranscriptResult:
        decoded = decode_audio(data)
        if decoded is None:
            return TranscriptResult(transcript="", duration=0.0)
        pcm, sample_rate = decoded
        duration = audio_duration(pcm, sample_rate)
        if pcm.size == 0 or float(np.sqrt(np.mean(np.square(pcm)))) < SILENCE_RMS:
            return TranscriptResult(transcript="", duration=duration)
        tokens = self.text.split()
        step = duration / len(tokens) if tokens else 0.0
        words = tuple(
            Word(
                word=token,
                start=round(idx * step, 3),
                end=round((idx + 1) * step, 3),
                confidence=0.9,
            )
            for idx, token in enumerate(tokens)
        )
        utterance = Utterance(text=self.text, start=0.0, end=duration, confidence=0.9)
        return TranscriptResult(
            transcript=self.text,
            duration=duration,
            words=words,
            utterances=(utterance,),
            language=language or "auto",
        )
