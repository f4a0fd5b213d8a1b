"""Send recorded takes to the transcription provider and normalize the result."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import replace
from typing import Any, Optional, Tuple

from openai import AsyncOpenAI

from src.analysis.fillers import filler_words
from src.analysis.types import TranscriptResult, Utterance, Word

from ..errors import (
    AudioTooLargeError,
    CrispError,
    EmptyRecordingError,
    NoAudioError,
    ProviderConfigError,
    TranscriptionError,
)
from ..metrics import TRANSCRIBE_COUNTER, TRANSCRIBE_DURATION
from ..settings import APISettings
from .audio_profile import audio_duration, decode_audio, silence_gaps, volume_profile
from .deepgram_client import DeepgramClient
from .whisper_engine import MockTranscriber, WhisperEngine, iso_language

LOGGER = logging.getLogger("crisp.transcribe")

PROVIDERS = ("deepgram", "openai", "whisper", "mock")

_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mp4": "m4a",
    "audio/mpeg": "mp3",
    "audio/flac": "flac",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}


def upload_filename(mime_type: str | None) -> str:
    base = (mime_type or "").split(";")[0].strip().lower()
    return f"audio.{_EXTENSIONS.get(base, 'wav')}"


class TranscriptService:
    """Turn raw audio bytes into a normalized transcript result."""

    def __init__(self, settings: APISettings) -> None:
        self.settings = settings
        self.provider = settings.transcription_provider.lower()
        if self.provider not in PROVIDERS:
            raise ProviderConfigError(
                f"Unknown TRANSCRIPTION_PROVIDER '{settings.transcription_provider}'"
            )
        self._deepgram: Optional[DeepgramClient] = None
        self._openai_client: Optional[AsyncOpenAI] = None
        self._whisper: Optional[WhisperEngine] = None
        self._mock: Optional[MockTranscriber] = None
        if self.provider == "deepgram":
            self._deepgram = DeepgramClient(settings)
        elif self.provider == "openai":
            if not settings.openai_api_key:
                raise ProviderConfigError("TRANSCRIPTION_PROVIDER=openai but OPENAI_API_KEY is missing")
            self._openai_client = AsyncOpenAI(
                api_key=settings.openai_api_key, timeout=settings.provider_timeout_sec
            )
        elif self.provider == "whisper":
            self._whisper = WhisperEngine(settings)
        else:
            self._mock = MockTranscriber(settings)

    async def transcribe(self, data: bytes, mime_type: str | None = None) -> TranscriptResult:
        """Transcribe one take; raises EmptyRecordingError when no speech was heard."""

        if not data:
            raise NoAudioError()
        if len(data) > self.settings.max_upload_bytes:
            raise AudioTooLargeError(len(data), self.settings.max_upload_bytes)

        LOGGER.info("Transcribing %d bytes (%s) via %s", len(data), mime_type, self.provider)
        start_time = time.perf_counter()
        try:
            raw = await self._transcribe(data, mime_type or "application/octet-stream")
        except CrispError:
            TRANSCRIBE_COUNTER.labels(provider=self.provider, status="error").inc()
            raise
        except Exception as exc:
            TRANSCRIBE_COUNTER.labels(provider=self.provider, status="error").inc()
            LOGGER.exception("Transcription via %s failed", self.provider)
            raise TranscriptionError() from exc
        finally:
            TRANSCRIBE_DURATION.labels(provider=self.provider).observe(
                time.perf_counter() - start_time
            )

        if not raw.transcript or not raw.transcript.strip():
            TRANSCRIBE_COUNTER.labels(provider=self.provider, status="empty").inc()
            LOGGER.info("Provider returned an empty transcript")
            raise EmptyRecordingError()

        result = self._enrich(raw, data)
        TRANSCRIBE_COUNTER.labels(provider=self.provider, status="ok").inc()
        LOGGER.info(
            "Transcribed %.1fs of audio: %d words, %d fillers",
            result.duration,
            len(result.words),
            len(result.filler_words),
        )
        return result

    async def _transcribe(self, data: bytes, mime_type: str) -> TranscriptResult:
        language = self.settings.transcription_language
        if self._deepgram is not None:
            return await self._deepgram.transcribe(data, mime_type)
        if self._openai_client is not None:
            return await self._transcribe_openai(data, mime_type, language)
        if self._whisper is not None:
            return await asyncio.to_thread(self._whisper.transcribe_bytes, data, language)
        if self._mock is None:
            raise ProviderConfigError("No transcription provider is configured")
        return self._mock.transcribe_bytes(data, language)

    async def _transcribe_openai(self, data: bytes, mime_type: str, language: str) -> TranscriptResult:
        if self._openai_client is None:
            raise ProviderConfigError("OpenAI transcription requested without a client")
        kwargs: dict[str, Any] = {}
        if iso_language(language):
            kwargs["language"] = iso_language(language)
        transcript = await self._openai_client.audio.transcriptions.create(
            model=self.settings.openai_whisper_model,
            file=(upload_filename(mime_type), data, mime_type),
            response_format="verbose_json",
            timestamp_granularities=["word", "segment"],
            **kwargs,
        )
        words = tuple(
            Word(
                word=str(_field(item, "word", "")),
                start=float(_field(item, "start", 0.0)),
                end=float(_field(item, "end", 0.0)),
                confidence=1.0,
            )
            for item in _field(transcript, "words", None) or []
        )
        utterances = []
        for segment in _field(transcript, "segments", None) or []:
            logprob = _field(segment, "avg_logprob", None)
            utterances.append(
                Utterance(
                    text=str(_field(segment, "text", "")).strip(),
                    start=float(_field(segment, "start", 0.0)),
                    end=float(_field(segment, "end", 0.0)),
                    confidence=_logprob_confidence(logprob),
                )
            )
        return TranscriptResult(
            transcript=(_field(transcript, "text", "") or "").strip(),
            duration=float(_field(transcript, "duration", 0.0) or 0.0),
            words=words,
            utterances=tuple(utterances),
            language=_field(transcript, "language", None) or language or "auto",
        )

    def _enrich(self, raw: TranscriptResult, data: bytes) -> TranscriptResult:
        """Fill in duration, utterances, fillers, volume and silence derivations."""
        decoded: Optional[Tuple[Any, int]] = None
        if self.settings.detect_volume or not raw.duration:
            decoded = decode_audio(data)

        duration = raw.duration
        if not duration and decoded is not None:
            duration = audio_duration(*decoded)
        if not duration and raw.words:
            duration = raw.words[-1].end

        utterances = raw.utterances or _single_utterance(raw)
        volume = ()
        if self.settings.detect_volume and decoded is not None:
            pcm, sample_rate = decoded
            volume = tuple(
                volume_profile(
                    pcm,
                    sample_rate,
                    [(u.start, u.end) for u in utterances],
                    window_sec=self.settings.volume_window_sec,
                )
            )
        silence = ()
        if self.settings.detect_silence:
            silence = tuple(silence_gaps(raw.words, self.settings.silence_min_gap_sec))

        return replace(
            raw,
            transcript=raw.transcript.strip(),
            duration=round(duration, 3),
            utterances=utterances,
            volume_profile=volume,
            silence_durations=silence,
            filler_words=tuple(filler_words(raw.words)),
        )

    async def aclose(self) -> None:
        if self._deepgram is not None:
            await self._deepgram.aclose()
        if self._openai_client is not None:
            await self._openai_client.close()


def _single_utterance(raw: TranscriptResult) -> Tuple[Utterance, ...]:
    if not raw.words:
        return ()
    confidence = sum(w.confidence for w in raw.words) / len(raw.words)
    return (
        Utterance(
            text=raw.transcript.strip(),
            start=raw.words[0].start,
            end=raw.words[-1].end,
            confidence=confidence,
        ),
    )


def _logprob_confidence(logprob: float | None) -> float:
    if logprob is None:
        return 0.0
    return max(0.0, min(1.0, math.exp(float(logprob))))


def _field(obj: Any, name: str, default: Any) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)
