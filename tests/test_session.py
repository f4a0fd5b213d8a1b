import asyncio
from types import SimpleNamespace

import httpx
import numpy as np

from client.crisp.audio.recorder import AudioRecorder
from client.crisp.report import render_report
from client.crisp.services.network import ApiClient
from client.crisp.services.session import EMPTY_MESSAGE, AnalysisState, RecordingSession
from client.crisp.store.settings_store import SettingsStore

TRANSCRIPT = {
    "transcript": "um so I think we should ship it",
    "duration": 6.0,
    "words": [],
    "fillerWords": [
        {"word": "um", "start": 0.1, "end": 0.3, "confidence": 0.9, "filler": True},
        {"word": "so", "start": 0.4, "end": 0.6, "confidence": 0.9, "filler": True},
    ],
    "utterances": [
        {"transcript": "um so I think we should ship it", "start": 0.0, "end": 6.0, "confidence": 0.9}
    ],
    "volumeProfile": [{"start": 0.0, "end": 6.0, "loudness": 1.0}],
    "silenceDurations": [],
    "language": "en",
}


def _backend():
    streams = []

    def input_stream(samplerate, channels, dtype, callback):
        stream = SimpleNamespace(callback=callback, start=lambda: None, stop=lambda: None, close=lambda: None)
        streams.append(stream)
        return stream

    return SimpleNamespace(InputStream=input_stream, streams=streams)


def _session(tmp_path, handler):
    store = SettingsStore(tmp_path / "settings.json")
    client = ApiClient(store, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    recorder = AudioRecorder(sample_rate=8000, backend=_backend())
    return RecordingSession(recorder, client)


def _record(session):
    assert session.start()
    block = np.full((1600, 1), 500, dtype=np.int16)
    session.recorder._sd.streams[0].callback(block, 1600, None, None)


def test_session_scores_take(tmp_path):
    session = _session(tmp_path, lambda request: httpx.Response(200, json=TRANSCRIPT))

    async def go():
        _record(session)
        assert session.stop() is not None
        assert session.state is AnalysisState.TRANSCRIBING
        return await session.wait()

    assert asyncio.run(go()) is AnalysisState.DONE
    assert session.metrics.wpm == 80
    assert session.metrics.total_fillers == 2
    report = render_report(session.result, session.metrics)
    assert "Confidence score:" in report
    assert "[um] [so] I think" in report
    assert "Most fillers: 2" in report


def test_session_empty_recording(tmp_path):
    session = _session(tmp_path, lambda request: httpx.Response(400, json={"error": "EMPTY_RECORDING"}))

    async def go():
        _record(session)
        session.stop()
        return await session.wait()

    assert asyncio.run(go()) is AnalysisState.EMPTY
    assert session.error == EMPTY_MESSAGE
    assert session.result is None


def test_session_failure(tmp_path):
    session = _session(tmp_path, lambda request: httpx.Response(500, json={"error": "Failed to transcribe audio"}))

    async def go():
        _record(session)
        session.stop()
        return await session.wait()

    assert asyncio.run(go()) is AnalysisState.FAILED
    assert session.error == "Failed to transcribe audio"


def test_session_fails_on_unreadable_transcript(tmp_path):
    body = dict(TRANSCRIPT, duration="abc", utterances=["not an object"])
    session = _session(tmp_path, lambda request: httpx.Response(200, json=body))

    async def go():
        _record(session)
        session.stop()
        return await session.wait()

    assert asyncio.run(go()) is AnalysisState.FAILED
    assert session.error == "Received an unreadable transcript from the server"
    assert session.result is None
    assert session.metrics is None


def test_reset_cancels_in_flight_request(tmp_path):
    seen = {"completed": False}

    async def slow_handler(request):
        await asyncio.sleep(10)
        seen["completed"] = True
        return httpx.Response(200, json=TRANSCRIPT)

    session = _session(tmp_path, slow_handler)

    async def go():
        _record(session)
        task = session.stop()
        await asyncio.sleep(0.01)
        session.reset()
        await asyncio.gather(task, return_exceptions=True)
        return task

    task = asyncio.run(go())
    assert task.cancelled()
    assert seen["completed"] is False
    assert session.state is AnalysisState.IDLE
    assert session.result is None
    assert session.metrics is None
    assert session.recorder.status.value == "idle"
