"""Request complexity classification.

A cheap lexical heuristic used only to pick a model tier; it never calls
a model.
"""

from __future__ import annotations

import re

from formwright.models import Complexity

_SENTENCE_SPLIT = re.compile(r"[.!?]+")

SIMPLE_MAX_LENGTH = 200
SIMPLE_MAX_SENTENCES = 5
COMPLEX_MIN_LENGTH = 1000
COMPLEX_MIN_UNIQUE_WORDS = 200
COMPLEX_MIN_SENTENCES = 20


def count_sentences(text: str) -> int:
    """Number of segments produced by splitting on runs of ``.``, ``!`` or ``?``."""
    return len(_SENTENCE_SPLIT.split(text))


def count_unique_words(text: str) -> int:
    return len(set(text.lower().split()))


def classify_complexity(text: str) -> Complexity:
    """Score raw request text into ``simple``, ``moderate`` or ``complex``."""
    length = len(text)
    sentences = count_sentences(text)

    if length < SIMPLE_MAX_LENGTH and sentences < SIMPLE_MAX_SENTENCES:
        return "simple"
    if (
        length > COMPLEX_MIN_LENGTH
        or count_unique_words(text) > COMPLEX_MIN_UNIQUE_WORDS
        or sentences > COMPLEX_MIN_SENTENCES
    ):
        return "complex"
    return "moderate"
