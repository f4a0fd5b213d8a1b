"""Microphone capture with a start/pause/resume/stop lifecycle."""

from __future__ import annotations

import io
import logging
import threading
import time
from typing import Any, Callable, List, Optional

import numpy as np
import soundfile as sf

from .types import RecordedTake, RecordingStatus

LOGGER = logging.getLogger("crisp.recorder")


class AudioRecorder:
    """One take at a time: idle -> recording <-> paused -> stopped.

    Stopped and error are terminal until ``reset()``. Frames that arrive while
    paused are dropped, and the elapsed counter only runs while recording.
    """

    def __init__(
        self,
        *,
        sample_rate: int = 16_000,
        channels: int = 1,
        backend: Any = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self._sd = backend if backend is not None else self._try_import_sounddevice()
        self._clock = clock
        self._lock = threading.Lock()
        self._stream = None
        self._frames: List[np.ndarray] = []
        self._status = RecordingStatus.IDLE
        self._error: Optional[str] = None
        self._elapsed = 0.0
        self._segment_started: Optional[float] = None

    def _try_import_sounddevice(self):
        try:
            import sounddevice as sd  # type: ignore

            return sd
        except Exception as exc:
            LOGGER.debug("sounddevice unavailable: %s", exc)
            return None

    @property
    def status(self) -> RecordingStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def elapsed(self) -> float:
        if self._status is RecordingStatus.RECORDING and self._segment_started is not None:
            return self._elapsed + (self._clock() - self._segment_started)
        return self._elapsed

    def start(self) -> bool:
        if self._status is not RecordingStatus.IDLE:
            LOGGER.debug("start() ignored in state %s", self._status.value)
            return False
        if self._sd is None:
            self._fail("Audio recording is not supported here: install the sounddevice package.")
            return False
        try:
            self._stream = self._sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                callback=self._on_audio,
            )
            self._stream.start()
        except Exception as exc:
            self._close_stream()
            self._fail(f"Could not access the microphone: {exc}")
            return False
        with self._lock:
            self._frames = []
            self._status = RecordingStatus.RECORDING
        self._segment_started = self._clock()
        LOGGER.info("Recording started")
        return True

    def pause(self) -> bool:
        if self._status is not RecordingStatus.RECORDING:
            LOGGER.debug("pause() ignored in state %s", self._status.value)
            return False
        self._bank_elapsed()
        with self._lock:
            self._status = RecordingStatus.PAUSED
        return True

    def resume(self) -> bool:
        if self._status is not RecordingStatus.PAUSED:
            LOGGER.debug("resume() ignored in state %s", self._status.value)
            return False
        with self._lock:
            self._status = RecordingStatus.RECORDING
        self._segment_started = self._clock()
        return True

    def stop(self) -> Optional[RecordedTake]:
        if self._status not in (RecordingStatus.RECORDING, RecordingStatus.PAUSED):
            LOGGER.debug("stop() ignored in state %s", self._status.value)
            return None
        self._bank_elapsed()
        with self._lock:
            self._status = RecordingStatus.STOPPED
            frames, self._frames = self._frames, []
        self._close_stream()
        pcm = self._to_mono(frames)
        take = RecordedTake(
            audio=self._encode_wav(pcm),
            mime_type="audio/wav",
            sample_rate=self.sample_rate,
            duration=len(pcm) / float(self.sample_rate),
            elapsed=self._elapsed,
        )
        LOGGER.info("Recording stopped after %.1fs", take.elapsed)
        return take

    def reset(self) -> None:
        self._close_stream()
        with self._lock:
            self._frames = []
            self._status = RecordingStatus.IDLE
        self._error = None
        self._elapsed = 0.0
        self._segment_started = None

    def _on_audio(self, indata, frames, time_info, status) -> None:  # noqa: ARG002
        if status:
            LOGGER.debug("Input stream status: %s", status)
        with self._lock:
            if self._status is RecordingStatus.RECORDING:
                self._frames.append(np.array(indata, dtype=np.int16, copy=True))

    def _bank_elapsed(self) -> None:
        if self._segment_started is not None:
            self._elapsed += self._clock() - self._segment_started
            self._segment_started = None

    def _fail(self, message: str) -> None:
        LOGGER.warning(message)
        self._error = message
        self._status = RecordingStatus.ERROR

    def _close_stream(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception as exc:
            LOGGER.debug("Error closing input stream: %s", exc)

    def _to_mono(self, frames: List[np.ndarray]) -> np.ndarray:
        if not frames:
            return np.zeros(0, dtype=np.int16)
        data = np.concatenate(frames)
        if data.ndim == 1:
            return data
        return data[:, 0]

    def _encode_wav(self, pcm: np.ndarray) -> bytes:
        buffer = io.BytesIO()
        sf.write(buffer, pcm, self.sample_rate, format="WAV", subtype="PCM_16")
        return buffer.getvalue()
