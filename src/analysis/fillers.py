"""Filler-word detection over transcripts and timestamped tokens."""

from __future__ import annotations

import re
import string
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .types import Word

FILLER_WORDS: Dict[str, str] = {
    "um": "A hesitation sound",
    "uh": "A hesitation sound",
    "like": "Used as a filler or approximation",
    "you know": "Used to check understanding",
    "so": "Used as a transition",
    "basically": "Used to simplify or summarize",
    "actually": "Used to correct or emphasize",
    "i mean": "Used to rephrase mid-thought",
    "literally": "Used for emphasis rather than meaning",
}

SINGLE_WORD_FILLERS = frozenset(term for term in FILLER_WORDS if " " not in term)

_STRIP = string.punctuation + "’‘“”…"


def _pattern(term: str) -> re.Pattern[str]:
    body = r"\s+".join(re.escape(part) for part in term.split())
    return re.compile(rf"\b{body}\b", re.IGNORECASE)


_PATTERNS: Dict[str, re.Pattern[str]] = {term: _pattern(term) for term in FILLER_WORDS}


def normalize_token(token: str) -> str:
    return token.strip().strip(_STRIP).lower()


def is_filler_token(token: str, flagged: Optional[bool] = None) -> bool:
    """A token is a filler when the provider flagged it or it is a listed single-word term."""
    if flagged:
        return True
    return normalize_token(token) in SINGLE_WORD_FILLERS


def count_fillers(transcript: str) -> Dict[str, int]:
    """Count non-overlapping whole-word matches of every term, case-insensitively."""
    return {term: len(pattern.findall(transcript or "")) for term, pattern in _PATTERNS.items()}


def total_fillers(counts: Dict[str, int]) -> int:
    return sum(counts.values())


def filler_words(words: Iterable[Word]) -> List[Word]:
    """Return the timestamped tokens that count as fillers, marked as such."""
    out: List[Word] = []
    for word in words:
        if is_filler_token(word.word, word.filler):
            out.append(
                Word(
                    word=normalize_token(word.word) or word.word,
                    start=word.start,
                    end=word.end,
                    confidence=word.confidence,
                    filler=True,
                )
            )
    return out


def filler_spans(transcript: str) -> List[Tuple[int, int, str]]:
    """Character spans of fillers in ``transcript``, longest terms claimed first."""
    claimed: List[Tuple[int, int, str]] = []
    for term in sorted(FILLER_WORDS, key=len, reverse=True):
        for match in _PATTERNS[term].finditer(transcript or ""):
            start, end = match.span()
            if any(start < c_end and end > c_start for c_start, c_end, _ in claimed):
                continue
            claimed.append((start, end, term))
    return sorted(claimed)


def highlight_fillers(
    transcript: str, fmt: Callable[[str], str] = lambda text: f"[{text}]"
) -> str:
    """Wrap every filler occurrence with ``fmt`` (brackets by default)."""
    pieces: List[str] = []
    cursor = 0
    for start, end, _term in filler_spans(transcript):
        pieces.append(transcript[cursor:start])
        pieces.append(fmt(transcript[start:end]))
        cursor = end
    pieces.append(transcript[cursor:])
    return "".join(pieces)
