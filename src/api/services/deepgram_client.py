"""Deepgram pre-recorded transcription over plain HTTPS."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from src.analysis.types import TranscriptResult, Utterance, Word

from ..errors import ProviderConfigError, TranscriptionError
from ..settings import APISettings

LOGGER = logging.getLogger("crisp.deepgram")


def _bool(value: bool) -> str:
    return "true" if value else "false"


class DeepgramClient:
    def __init__(self, settings: APISettings, *, client: Optional[httpx.AsyncClient] = None) -> None:
        if not settings.deepgram_api_key:
            raise ProviderConfigError("TRANSCRIPTION_PROVIDER=deepgram but DEEPGRAM_API_KEY is missing")
        self.settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.provider_timeout_sec)

    def _params(self) -> Dict[str, str]:
        s = self.settings
        return {
            "model": s.deepgram_model,
            "language": s.transcription_language,
            "punctuate": _bool(s.transcription_punctuate),
            "smart_format": _bool(s.transcription_smart_format),
            "filler_words": _bool(s.transcription_fillers),
            "utterances": _bool(s.transcription_utterances),
        }

    async def transcribe(self, data: bytes, mime_type: str) -> TranscriptResult:
        try:
            resp = await self._client.post(
                self.settings.deepgram_url,
                params=self._params(),
                headers={
                    "Authorization": f"Token {self.settings.deepgram_api_key}",
                    "Content-Type": mime_type or "application/octet-stream",
                },
                content=data,
            )
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "Deepgram returned %s: %s", exc.response.status_code, exc.response.text[:500]
            )
            raise TranscriptionError(f"Transcription provider error: {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.error("Deepgram request failed: %s", exc)
            raise TranscriptionError() from exc
        return parse_response(payload)

    async def aclose(self) -> None:
        await self._client.aclose()


def parse_response(payload: Dict[str, Any]) -> TranscriptResult:
    """Normalize a Deepgram ``/v1/listen`` body."""
    results = payload.get("results") or {}
    channels = results.get("channels") or [{}]
    alternatives = channels[0].get("alternatives") or [{}]
    best = alternatives[0]
    words = tuple(
        Word(
            word=str(item.get("punctuated_word") or item.get("word", "")),
            start=float(item.get("start", 0.0)),
            end=float(item.get("end", 0.0)),
            confidence=float(item.get("confidence", 0.0) or 0.0),
            filler=item.get("filler"),
        )
        for item in best.get("words") or []
    )
    utterances = tuple(
        Utterance(
            text=str(item.get("transcript", "")).strip(),
            start=float(item.get("start", 0.0)),
            end=float(item.get("end", 0.0)),
            confidence=float(item.get("confidence", 0.0) or 0.0),
        )
        for item in results.get("utterances") or []
    )
    metadata = payload.get("metadata") or {}
    duration = float(metadata.get("duration", 0.0) or 0.0)
    return TranscriptResult(
        transcript=str(best.get("transcript") or "").strip(),
        duration=duration,
        words=words,
        utterances=utterances,
        language=str(channels[0].get("detected_language") or "auto"),
    )
