"""Practice prompts the user answers out loud."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

PromptCategory = Literal["self", "opinion", "creativity", "story", "product"]


@dataclass(frozen=True, slots=True)
class Prompt:
    id: str
    text: str
    category: PromptCategory
    emoji: str


PROMPTS: Tuple[Prompt, ...] = (
    Prompt("self-1", "Tell me about yourself.", "self", "🧠"),
    Prompt("self-2", "What's a personal value you try to live by?", "self", "🧠"),
    Prompt("self-3", "What's something not on your resume?", "self", "🧠"),
    Prompt("opinion-1", "What's a popular opinion you disagree with?", "opinion", "🔥"),
    Prompt("opinion-2", "Do you think remote work is here to stay?", "opinion", "🔥"),
    Prompt("opinion-3", "What's a trend you wish would die?", "opinion", "🔥"),
    Prompt("creativity-1", "If you had a billboard in Times Square, what would it say?", "creativity", "🎨"),
    Prompt("creativity-2", "Design your dream app in 30 seconds.", "creativity", "🎨"),
    Prompt("story-1", "Tell me about a time you took a risk.", "story", "📖"),
    Prompt("story-2", "What's a lesson you learned the hard way?", "story", "📖"),
    Prompt("product-1", "How would you explain your product to your grandma?", "product", "🛠️"),
    Prompt("product-2", "How would you improve LinkedIn?", "product", "🛠️"),
)


def list_prompts(category: Optional[str] = None) -> list[Prompt]:
    return [p for p in PROMPTS if category is None or p.category == category]


def random_prompt(
    exclude_id: Optional[str] = None,
    category: Optional[str] = None,
    *,
    rng: Optional[random.Random] = None,
) -> Prompt:
    candidates = [p for p in list_prompts(category) if p.id != exclude_id]
    if not candidates:
        raise LookupError(f"No prompts match category={category!r} exclude={exclude_id!r}")
    return (rng or random).choice(candidates)
