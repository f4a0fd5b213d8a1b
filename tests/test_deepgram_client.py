import asyncio

import httpx
import pytest

from src.api.errors import TranscriptionError
from src.api.services.deepgram_client import DeepgramClient, parse_response
from src.api.settings import APISettings

PAYLOAD = {
    "metadata": {"duration": 4.2},
    "results": {
        "channels": [
            {
                "alternatives": [
                    {
                        "transcript": "Um, I think so.",
                        "words": [
                            {"word": "um", "punctuated_word": "Um,", "start": 0.1, "end": 0.3, "confidence": 0.7},
                            {"word": "i", "punctuated_word": "I", "start": 0.5, "end": 0.6, "confidence": 0.99},
                            {"word": "think", "start": 0.6, "end": 0.9, "confidence": 0.98},
                            {"word": "so", "punctuated_word": "so.", "start": 0.9, "end": 1.2, "confidence": 0.95},
                        ],
                    }
                ]
            }
        ],
        "utterances": [
            {"transcript": "Um, I think so.", "start": 0.1, "end": 1.2, "confidence": 0.9}
        ],
    },
}


def _settings(**overrides):
    values = dict(deepgram_api_key="dg-key", transcription_provider="deepgram", redis_url=None)
    values.update(overrides)
    return APISettings(**values)


def test_parse_response():
    result = parse_response(PAYLOAD)
    assert result.transcript == "Um, I think so."
    assert result.duration == 4.2
    assert [w.word for w in result.words] == ["Um,", "I", "think", "so."]
    assert result.words[0].confidence == 0.7
    assert len(result.utterances) == 1
    assert result.utterances[0].text == "Um, I think so."


def test_parse_response_handles_empty_body():
    result = parse_response({})
    assert result.transcript == ""
    assert result.words == ()
    assert result.duration == 0.0


def test_transcribe_sends_options():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["type"] = request.headers["content-type"]
        seen["params"] = dict(request.url.params)
        seen["body"] = request.content
        return httpx.Response(200, json=PAYLOAD)

    client = DeepgramClient(
        _settings(), client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    result = asyncio.run(client.transcribe(b"RIFF", "audio/webm"))
    assert result.transcript == "Um, I think so."
    assert seen["auth"] == "Token dg-key"
    assert seen["type"] == "audio/webm"
    assert seen["body"] == b"RIFF"
    assert seen["params"]["filler_words"] == "true"
    assert seen["params"]["utterances"] == "true"
    assert seen["params"]["language"] == "en-US"


def test_transcribe_maps_http_errors():
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"err_msg": "bad key"}))
    client = DeepgramClient(_settings(), client=httpx.AsyncClient(transport=transport))
    with pytest.raises(TranscriptionError) as excinfo:
        asyncio.run(client.transcribe(b"RIFF", "audio/wav"))
    assert "401" in excinfo.value.detail
