"""Heuristic confidence score for one model's analysis."""

from __future__ import annotations

from formwright.models import Analysis

_BASE = 0.5
_STEP = 0.1


def score_analysis(analysis: Analysis) -> float:
    """Score in [0, 1] rewarding a complete, non-trivial analysis.

    Base 0.5, plus 0.1 each for: a stated purpose, any questions, more than
    three questions, key topics, and self-reported confidence of at least 0.5.
    """
    score = _BASE
    if analysis.understanding.purpose and analysis.understanding.purpose != "Unknown purpose":
        score += _STEP
    if analysis.questions:
        score += _STEP
    if len(analysis.questions) > 3:
        score += _STEP
    if analysis.understanding.key_topics:
        score += _STEP
    if analysis.metadata.confidence >= 0.5:
        score += _STEP
    return round(min(score, 1.0), 4)
