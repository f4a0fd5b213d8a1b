"""Plain-text feedback report for a scored take."""

from __future__ import annotations

from typing import List

from src.analysis.fillers import highlight_fillers
from src.analysis.scoring import TranscriptMetrics
from src.analysis.types import TranscriptResult
from src.analysis.visualization import filler_heatmap, pace_insights, pace_profile


def _bar(count: int, width: int = 10) -> str:
    return "#" * min(count, width) + "." * max(0, width - count)


def render_report(result: TranscriptResult, metrics: TranscriptMetrics) -> str:
    lines: List[str] = []
    lines.append(f"Confidence score: {metrics.confidence_score}/100 ({metrics.confidence_label})")
    lines.append(
        f"Pace: {metrics.wpm} WPM ({metrics.pace}) over {metrics.duration:.1f}s, "
        f"{metrics.word_count} words"
    )
    lines.append(f"  {metrics.delivery_style.label}: {metrics.delivery_style.description}")
    lines.append(
        f"Filler words: {metrics.total_fillers} ({metrics.filler_percentage:.1f}% of words)"
    )
    lines.append(f"  {metrics.clarity.label}: {metrics.clarity.description}")
    for term, count in metrics.filler_count.items():
        if count:
            lines.append(f"    {term:<10} {count}")

    heatmap = filler_heatmap(result.filler_words, metrics.duration)
    if heatmap.buckets:
        lines.append("")
        lines.append("Filler heatmap (5s buckets):")
        for bucket in heatmap.buckets:
            lines.append(
                f"  {bucket.start:>4.0f}-{bucket.end:<4.0f}s {_bar(bucket.count)} {bucket.count}"
            )
        lines.append(f"  {heatmap.insight}")

    insights = pace_insights(pace_profile(result.utterances, result.silence_durations))
    if insights:
        lines.append("")
        lines.append("Pace notes:")
        lines.extend(f"  - {insight}" for insight in insights)

    lines.append("")
    lines.append("Transcript:")
    lines.append(f"  {highlight_fillers(result.transcript)}")
    return "\n".join(lines)
