"""Pydantic schemas for API contracts (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.analysis.types import SilenceGap, TranscriptResult, Utterance, VolumeSample, Word


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class WordSchema(CamelModel):
    word: str
    start: float
    end: float
    confidence: float = 0.0
    filler: Optional[bool] = None


class UtteranceSchema(CamelModel):
    transcript: str
    start: float
    end: float
    confidence: float = 0.0


class VolumeSampleSchema(CamelModel):
    start: float
    end: float
    loudness: float


class SilenceSchema(CamelModel):
    start: float
    end: float
    duration: float


class TranscribeResponse(CamelModel):
    transcript: str
    filler_words: List[WordSchema] = Field(default_factory=list)
    utterances: List[UtteranceSchema] = Field(default_factory=list)
    volume_profile: List[VolumeSampleSchema] = Field(default_factory=list)
    silence_durations: List[SilenceSchema] = Field(default_factory=list)
    duration: float = 0.0
    words: List[WordSchema] = Field(default_factory=list)
    language: str = "auto"

    @classmethod
    def from_result(cls, result: TranscriptResult) -> "TranscribeResponse":
        return cls(
            transcript=result.transcript,
            filler_words=[WordSchema.model_validate(w) for w in result.filler_words],
            utterances=[
                UtteranceSchema(transcript=u.text, start=u.start, end=u.end, confidence=u.confidence)
                for u in result.utterances
            ],
            volume_profile=[VolumeSampleSchema.model_validate(v) for v in result.volume_profile],
            silence_durations=[SilenceSchema.model_validate(s) for s in result.silence_durations],
            duration=result.duration,
            words=[WordSchema.model_validate(w) for w in result.words],
            language=result.language,
        )

    def to_result(self) -> TranscriptResult:
        def _word(item: WordSchema) -> Word:
            return Word(item.word, item.start, item.end, item.confidence, item.filler)

        return TranscriptResult(
            transcript=self.transcript,
            duration=self.duration,
            words=tuple(_word(w) for w in self.words),
            utterances=tuple(
                Utterance(u.transcript, u.start, u.end, u.confidence) for u in self.utterances
            ),
            volume_profile=tuple(
                VolumeSample(v.start, v.end, v.loudness) for v in self.volume_profile
            ),
            silence_durations=tuple(
                SilenceGap(s.start, s.end, s.duration) for s in self.silence_durations
            ),
            filler_words=tuple(_word(w) for w in self.filler_words),
            language=self.language,
        )


class FeedbackSchema(CamelModel):
    label: str
    description: str


class SubScoresSchema(CamelModel):
    pace: float
    filler_density: float
    clarity: float
    volume_consistency: float
    response_length: float


class MetricsSchema(CamelModel):
    word_count: int
    duration: float
    wpm: int
    pace: str
    filler_count: Dict[str, int]
    total_fillers: int
    filler_percentage: float
    sub_scores: SubScoresSchema
    confidence_score: int
    confidence_label: str
    delivery_style: FeedbackSchema
    clarity: FeedbackSchema


class FillerBucketSchema(CamelModel):
    start: float
    end: float
    count: int
    words: List[str]
    level: str


class HeatmapSchema(CamelModel):
    bucket_size: int
    buckets: List[FillerBucketSchema]
    peak: Optional[FillerBucketSchema] = None
    insight: str


class PacePointSchema(CamelModel):
    time: float
    end: float
    wpm: int
    zone: str
    transcript: str


class PaceBucketSchema(CamelModel):
    start: float
    end: float
    wpm: Optional[int] = None


class StretchSchema(CamelModel):
    start: float
    end: float
    duration: float


class PaceProfileSchema(CamelModel):
    points: List[PacePointSchema]
    buckets: List[PaceBucketSchema]
    peak: Optional[PacePointSchema] = None
    min_wpm: Optional[int] = None
    max_wpm: Optional[int] = None
    zone_seconds: Dict[str, float]
    best_ideal_stretch: Optional[StretchSchema] = None
    long_pauses: int
    total_duration: float


class AnalysisResponse(CamelModel):
    metrics: MetricsSchema
    heatmap: HeatmapSchema
    pace_profile: PaceProfileSchema
    insights: List[str]
    highlighted_transcript: str


class WaitlistRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    challenge: Optional[str] = None
    bot_field: Optional[str] = None


class WaitlistResponse(BaseModel):
    success: bool
    error: Optional[str] = None


class PromptSchema(CamelModel):
    id: str
    text: str
    category: str
    emoji: str


class PromptListResponse(CamelModel):
    count: int
    prompts: List[PromptSchema]


class HealthResponse(CamelModel):
    ok: bool
    provider: str
    waitlist_store: str
    rate_limiter: str
    timestamp: datetime
