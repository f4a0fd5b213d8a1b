"""Transcription and analysis endpoints."""

from __future__ import annotations

import math

from fastapi import APIRouter, Depends, File, UploadFile

from src.analysis.fillers import highlight_fillers
from src.analysis.scoring import analyze_transcript
from src.analysis.visualization import filler_heatmap, pace_insights, pace_profile

from ..deps.services import get_transcript_service
from ..errors import NoAudioError, TakeTooLongError
from ..schemas import (
    AnalysisResponse,
    HeatmapSchema,
    MetricsSchema,
    PaceProfileSchema,
    TranscribeResponse,
)
from ..services.transcript_service import TranscriptService
from ..settings import APISettings, get_settings

router = APIRouter(prefix="/v1", tags=["transcribe"])


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe_audio(
    audio: UploadFile | None = File(None),
    service: TranscriptService = Depends(get_transcript_service),
):
    if audio is None:
        raise NoAudioError()
    data = await audio.read()
    result = await service.transcribe(data, audio.content_type)
    return TranscribeResponse.from_result(result)


def _timeline_end(payload: TranscribeResponse) -> float:
    ends = [payload.duration]
    ends += [u.end for u in payload.utterances]
    ends += [s.end for s in payload.silence_durations]
    return max((end for end in ends if not math.isnan(end)), default=0.0)


@router.post("/analysis", response_model=AnalysisResponse)
async def analyze(
    payload: TranscribeResponse,
    settings: APISettings = Depends(get_settings),
):
    # Bucket counts scale with the timeline, so it is capped before any aggregation.
    end = _timeline_end(payload)
    if end > settings.max_take_seconds:
        raise TakeTooLongError(end, settings.max_take_seconds)
    result = payload.to_result()
    metrics = analyze_transcript(result)
    heatmap = filler_heatmap(result.filler_words, metrics.duration)
    profile = pace_profile(result.utterances, result.silence_durations)
    insights = pace_insights(profile)
    insights.insert(0, heatmap.insight)
    return AnalysisResponse(
        metrics=MetricsSchema.model_validate(metrics),
        heatmap=HeatmapSchema.model_validate(heatmap),
        pace_profile=PaceProfileSchema.model_validate(profile),
        insights=insights,
        highlighted_transcript=highlight_fillers(result.transcript),
    )
