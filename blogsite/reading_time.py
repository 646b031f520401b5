"""Reading-time estimate for post pages."""

from __future__ import annotations

import math
from typing import Iterable

from .models import ContentSection
from .richtext import as_text

WORDS_PER_MINUTE = 200


def count_words(text: str) -> int:
    return len(text.split())


def estimate_reading_minutes(
    sections: Iterable[ContentSection], words_per_minute: int = WORDS_PER_MINUTE
) -> int:
    """Minutes needed to read every heading and body block, rounded up.

    Body text of all sections is concatenated before counting; heading words
    are counted separately and added. A post without words reads in 0 minutes.
    """

    if words_per_minute <= 0:
        raise ValueError("words_per_minute must be positive")

    sections = list(sections)
    body_blocks = [block for section in sections for block in section.body]
    body_words = count_words(as_text(body_blocks))
    heading_words = sum(count_words(section.heading or "") for section in sections)
    return math.ceil((body_words + heading_words) / words_per_minute)


__all__ = ["WORDS_PER_MINUTE", "count_words", "estimate_reading_minutes"]
