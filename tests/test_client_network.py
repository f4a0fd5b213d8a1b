import asyncio

import httpx
import pytest

from client.crisp.services.network import ApiClient, ApiError, EmptyRecordingError
from client.crisp.store.settings_store import SettingsStore


def make_client(tmp_path, handler):
    settings = SettingsStore(tmp_path / "settings.json")
    settings.update(server_url="https://api.example.com/")
    transport = httpx.MockTransport(handler)
    return ApiClient(settings, client=httpx.AsyncClient(transport=transport))


def test_transcribe_success(tmp_path):
    def handler(request):
        if request.method == "POST" and request.url.path == "/v1/transcribe":
            body = request.content
            assert b'name="audio"' in body
            assert b"take.wav" in body
            return httpx.Response(200, json={"transcript": "hello", "duration": 1.0})
        if request.url.path == "/healthz":
            return httpx.Response(200, json={"ok": True})
        raise AssertionError("Unexpected request")

    client = make_client(tmp_path, handler)

    async def go():
        payload = await client.transcribe(b"RIFF", "audio/wav")
        ok = await client.test_connection()
        await client.aclose()
        return payload, ok

    payload, ok = asyncio.run(go())
    assert payload["transcript"] == "hello"
    assert ok is True


def test_transcribe_empty_recording(tmp_path):
    client = make_client(tmp_path, lambda request: httpx.Response(400, json={"error": "EMPTY_RECORDING"}))
    with pytest.raises(EmptyRecordingError):
        asyncio.run(client.transcribe(b"RIFF"))


def test_transcribe_server_error(tmp_path):
    client = make_client(
        tmp_path, lambda request: httpx.Response(500, json={"error": "Failed to transcribe audio"})
    )
    with pytest.raises(ApiError) as excinfo:
        asyncio.run(client.transcribe(b"RIFF"))
    assert not isinstance(excinfo.value, EmptyRecordingError)
    assert "Failed to transcribe audio" in str(excinfo.value)


def test_waitlist_error_message(tmp_path):
    def handler(request):
        assert request.url.path == "/v1/waitlist"
        return httpx.Response(429, json={"success": False, "error": "Too many requests. Please try again later."})

    client = make_client(tmp_path, handler)
    with pytest.raises(ApiError) as excinfo:
        asyncio.run(client.join_waitlist("Ada", "ada@example.com", "Engineer", "Rambling"))
    assert "Too many requests" in str(excinfo.value)


def test_random_prompt_params(tmp_path):
    def handler(request):
        assert dict(request.url.params) == {"category": "story"}
        return httpx.Response(200, json={"id": "story-1", "text": "t", "category": "story", "emoji": "x"})

    client = make_client(tmp_path, handler)
    prompt = asyncio.run(client.random_prompt(category="story"))
    assert prompt["id"] == "story-1"


def test_analyze_posts_transcript(tmp_path):
    def handler(request):
        assert request.url.path == "/v1/analysis"
        assert b'"transcript"' in request.content
        return httpx.Response(200, json={"metrics": {"wpm": 120}, "insights": []})

    client = make_client(tmp_path, handler)
    body = asyncio.run(client.analyze({"transcript": "hello there", "duration": 1.0}))
    assert body["metrics"]["wpm"] == 120
