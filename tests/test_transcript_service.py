import asyncio
from pathlib import Path

import pytest

from src.analysis.types import TranscriptResult, Word
from src.api.errors import AudioTooLargeError, EmptyRecordingError, NoAudioError, ProviderConfigError
from src.api.services.transcript_service import TranscriptService, upload_filename
from src.api.settings import APISettings


def _make_service(tmp_path: Path, **overrides) -> TranscriptService:
    values = dict(
        data_dir=str(tmp_path),
        transcription_provider="mock",
        mock_transcript="so I think we should ship it",
        redis_url=None,
    )
    values.update(overrides)
    return TranscriptService(APISettings(**values))


def test_mock_transcription_enriched(tmp_path, make_wav):
    service = _make_service(tmp_path)
    result = asyncio.run(service.transcribe(make_wav(3.5), "audio/wav"))
    assert result.transcript == "so I think we should ship it"
    assert result.duration == pytest.approx(3.5)
    assert len(result.words) == 7
    assert [w.word for w in result.filler_words] == ["so"]
    assert len(result.utterances) == 1
    assert len(result.volume_profile) == 1


def test_silent_take_is_empty_recording(tmp_path, make_wav):
    service = _make_service(tmp_path)
    with pytest.raises(EmptyRecordingError):
        asyncio.run(service.transcribe(make_wav(1.0, amplitude=0.0), "audio/wav"))


def test_missing_and_oversized_audio(tmp_path):
    service = _make_service(tmp_path, max_upload_bytes=10)
    with pytest.raises(NoAudioError):
        asyncio.run(service.transcribe(b"", "audio/wav"))
    with pytest.raises(AudioTooLargeError):
        asyncio.run(service.transcribe(b"x" * 11, "audio/wav"))


def test_unknown_provider_rejected(tmp_path):
    with pytest.raises(ProviderConfigError):
        _make_service(tmp_path, transcription_provider="carrier-pigeon")


def test_deepgram_requires_key(tmp_path):
    with pytest.raises(ProviderConfigError):
        _make_service(tmp_path, transcription_provider="deepgram", deepgram_api_key=None)


def test_service_without_backend_raises_config_error(tmp_path):
    service = _make_service(tmp_path)
    service._mock = None
    with pytest.raises(ProviderConfigError):
        asyncio.run(service._transcribe(b"audio", "audio/wav"))
    with pytest.raises(ProviderConfigError):
        asyncio.run(service._transcribe_openai(b"audio", "audio/wav", "en"))


def test_enrich_synthesizes_utterance_and_silences(tmp_path):
    service = _make_service(tmp_path, detect_volume=False)
    raw = TranscriptResult(
        transcript=" um hello there ",
        duration=0.0,
        words=(
            Word("um", 0.8, 1.0, 0.6),
            Word("hello", 1.1, 1.5, 0.8),
            Word("there", 2.5, 3.0, 1.0),
        ),
    )
    result = service._enrich(raw, b"not audio")
    assert result.transcript == "um hello there"
    assert result.duration == 3.0
    assert len(result.utterances) == 1
    utterance = result.utterances[0]
    assert (utterance.start, utterance.end) == (0.8, 3.0)
    assert utterance.confidence == pytest.approx(0.8)
    assert [gap.duration for gap in result.silence_durations] == [0.8, 1.0]
    assert result.volume_profile == ()
    assert [w.word for w in result.filler_words] == ["um"]


def test_upload_filename():
    assert upload_filename("audio/webm;codecs=opus") == "audio.webm"
    assert upload_filename("audio/mp4") == "audio.m4a"
    assert upload_filename(None) == "audio.wav"
