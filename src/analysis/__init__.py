"""Transcript scoring heuristics (pure functions, no I/O)."""

from .fillers import FILLER_WORDS, count_fillers, filler_words, highlight_fillers, is_filler_token
from .pace import classify_pace, words_per_minute
from .scoring import TranscriptMetrics, analyze_transcript, score_label
from .types import SilenceGap, TranscriptResult, Utterance, VolumeSample, Word
from .visualization import filler_heatmap, pace_insights, pace_profile

__all__ = [
    "FILLER_WORDS",
    "SilenceGap",
    "TranscriptMetrics",
    "TranscriptResult",
    "Utterance",
    "VolumeSample",
    "Word",
    "analyze_transcript",
    "classify_pace",
    "count_fillers",
    "filler_heatmap",
    "filler_words",
    "highlight_fillers",
    "is_filler_token",
    "pace_insights",
    "pace_profile",
    "score_label",
    "words_per_minute",
]
