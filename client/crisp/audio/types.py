"""Types shared across the capture helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RecordingStatus(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class RecordedTake:
    """A finished take: playable WAV bytes plus timing."""

    audio: bytes
    mime_type: str
    sample_rate: int
    duration: float
    elapsed: float
