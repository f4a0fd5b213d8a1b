"""One practice take: capture, transcription and scoring, with teardown that cancels."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

from src.analysis.scoring import TranscriptMetrics, analyze_transcript
from src.analysis.types import TranscriptResult

from ..audio.recorder import AudioRecorder
from ..audio.types import RecordedTake, RecordingStatus
from .network import ApiClient, ApiError, EmptyRecordingError

LOGGER = logging.getLogger("crisp.session")

EMPTY_MESSAGE = "No speech detected. Give the same prompt another try."


class AnalysisState(str, Enum):
    IDLE = "idle"
    TRANSCRIBING = "transcribing"
    DONE = "done"
    EMPTY = "empty"
    FAILED = "failed"


class RecordingSession:
    def __init__(self, recorder: AudioRecorder, client: ApiClient) -> None:
        self.recorder = recorder
        self.client = client
        self.state = AnalysisState.IDLE
        self.take: Optional[RecordedTake] = None
        self.result: Optional[TranscriptResult] = None
        self.metrics: Optional[TranscriptMetrics] = None
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def status(self) -> RecordingStatus:
        return self.recorder.status

    def start(self) -> bool:
        if not self.recorder.start():
            self.error = self.recorder.error
            return False
        return True

    def pause(self) -> bool:
        return self.recorder.pause()

    def resume(self) -> bool:
        return self.recorder.resume()

    def stop(self) -> Optional[asyncio.Task]:
        """Finalize the take and start transcribing it; must run inside an event loop."""
        take = self.recorder.stop()
        if take is None:
            return None
        self.take = take
        self.state = AnalysisState.TRANSCRIBING
        self._task = asyncio.get_running_loop().create_task(self._transcribe(take))
        return self._task

    async def wait(self) -> AnalysisState:
        if self._task is not None:
            await self._task
        return self.state

    async def _transcribe(self, take: RecordedTake) -> None:
        try:
            payload = await self.client.transcribe(take.audio, take.mime_type)
        except EmptyRecordingError:
            self.state = AnalysisState.EMPTY
            self.error = EMPTY_MESSAGE
            return
        except ApiError as exc:
            LOGGER.warning("Transcription failed: %s", exc)
            self.state = AnalysisState.FAILED
            self.error = str(exc) or "Failed to transcribe audio"
            return
        try:
            result = TranscriptResult.from_payload(payload)
            metrics = analyze_transcript(result)
        except (AttributeError, TypeError, ValueError) as exc:
            LOGGER.warning("Malformed transcription response: %s", exc)
            self.state = AnalysisState.FAILED
            self.error = "Received an unreadable transcript from the server"
            return
        self.result = result
        self.metrics = metrics
        self.state = AnalysisState.DONE

    def cancel(self) -> bool:
        """Abort an outstanding transcription request, if any."""
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        LOGGER.info("Cancelled in-flight transcription")
        return True

    def reset(self) -> None:
        self.cancel()
        self.recorder.reset()
        self.state = AnalysisState.IDLE
        self.take = None
        self.result = None
        self.metrics = None
        self.error = None

    async def close(self) -> None:
        self.reset()
        await self.client.aclose()
