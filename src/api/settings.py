"""API settings resolved from the environment."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field


def _flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class APISettings(BaseModel):
    app_name: str = Field(default="Crisp API")
    version: str = Field(default="1.0.0")
    log_level: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))
    data_dir: str = Field(default=os.getenv("CRISP_DATA_DIR", "data"))
    host: str = Field(default=os.getenv("CRISP_HOST", "127.0.0.1"))
    port: int = Field(default=int(os.getenv("CRISP_PORT", "8000")))

    # transcription
    transcription_provider: str = Field(
        default=os.getenv("TRANSCRIPTION_PROVIDER", "deepgram")
    )
    transcription_language: str = Field(
        default=os.getenv("TRANSCRIPTION_LANGUAGE", "en-US")
    )
    transcription_punctuate: bool = Field(default=_flag("TRANSCRIPTION_PUNCTUATE"))
    transcription_smart_format: bool = Field(default=_flag("TRANSCRIPTION_SMART_FORMAT"))
    transcription_fillers: bool = Field(default=_flag("TRANSCRIPTION_FILLERS"))
    transcription_utterances: bool = Field(default=_flag("TRANSCRIPTION_UTTERANCES"))
    detect_volume: bool = Field(default=_flag("DETECT_VOLUME"))
    detect_silence: bool = Field(default=_flag("DETECT_SILENCE"))
    silence_min_gap_sec: float = Field(
        default=float(os.getenv("SILENCE_MIN_GAP_SEC", "0.5"))
    )
    volume_window_sec: float = Field(default=float(os.getenv("VOLUME_WINDOW_SEC", "1.0")))
    provider_timeout_sec: float = Field(
        default=float(os.getenv("PROVIDER_TIMEOUT_SEC", "30"))
    )
    max_upload_bytes: int = Field(
        default=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    )
    max_take_seconds: float = Field(
        default=float(os.getenv("MAX_TAKE_SECONDS", "600"))
    )
    deepgram_api_key: str | None = Field(default=os.getenv("DEEPGRAM_API_KEY"))
    deepgram_model: str = Field(default=os.getenv("DEEPGRAM_MODEL", "nova-2"))
    deepgram_url: str = Field(
        default=os.getenv("DEEPGRAM_URL", "https://api.deepgram.com/v1/listen")
    )
    openai_api_key: str | None = Field(default=os.getenv("OPENAI_API_KEY"))
    openai_whisper_model: str = Field(
        default=os.getenv("OPENAI_WHISPER_MODEL", "whisper-1")
    )
    whisper_model: str = Field(default=os.getenv("WHISPER_MODEL", "tiny"))
    whisper_device: str = Field(default=os.getenv("WHISPER_DEVICE", "cpu"))
    whisper_compute_type: str = Field(
        default=os.getenv("WHISPER_COMPUTE_TYPE", "int8")
    )
    mock_transcript: str = Field(
        default=os.getenv(
            "MOCK_TRANSCRIPT", "So I think this is a mock transcript for local testing."
        )
    )

    # waitlist
    waitlist_rate_limit: int = Field(default=int(os.getenv("WAITLIST_RATE_LIMIT", "5")))
    waitlist_rate_window_sec: int = Field(
        default=int(os.getenv("WAITLIST_RATE_WINDOW_SEC", "60"))
    )
    redis_url: str | None = Field(default=os.getenv("REDIS_URL"))
    redis_prefix: str = Field(default=os.getenv("REDIS_PREFIX", "crisp:ratelimit"))
    waitlist_store: str = Field(default=os.getenv("WAITLIST_STORE", "jsonl"))
    waitlist_path: str = Field(
        default=os.getenv("WAITLIST_PATH", "data/waitlist.jsonl")
    )
    supabase_url: str | None = Field(default=os.getenv("SUPABASE_URL"))
    supabase_key: str | None = Field(default=os.getenv("SUPABASE_KEY"))
    waitlist_table: str = Field(default=os.getenv("WAITLIST_TABLE", "waitlist"))


@lru_cache()
def get_settings() -> APISettings:
    return APISettings()
