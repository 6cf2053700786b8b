"""Explicit question-count extraction from request text."""

from __future__ import annotations

import re
import warnings
from typing import Optional

from formwright.exceptions import CountOverflowWarning

MAX_QUESTION_COUNT = 120

# Tried in order; the first match wins. A bare number after a verb is only a
# count when it is at most three digits and not part of a date, time, ratio
# or percentage, so "Create a 2024 onboarding form" has no count.
_COUNT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(\d+)\s*(?:-\s*)?(?:questions?|qs)\b", re.IGNORECASE),
    re.compile(
        r"\b(?:generate|create|make|give\s+me|write|build)\s+(?:me\s+)?(?:an?\s+)?(\d{1,3})\b(?![-%:/]|\.\d)",
        re.IGNORECASE,
    ),
    re.compile(r"\b(\d+)\s*(?:-\s*)?(?:fields?|items?|prompts?)\b", re.IGNORECASE),
)


def _clamp(value: int, maximum: int) -> Optional[int]:
    if value < 1:
        return None
    if value > maximum:
        warnings.warn(
            f"Requested {value} questions; clamped to {maximum}",
            CountOverflowWarning,
            stacklevel=3,
        )
        return maximum
    return value


def extract_question_count(
    text: str,
    override: Optional[int] = None,
    *,
    maximum: int = MAX_QUESTION_COUNT,
) -> Optional[int]:
    """Return the requested number of questions in ``[1, maximum]``, or None.

    An explicit ``override`` wins over anything parsed from ``text``. Values
    above ``maximum`` are clamped and reported with :class:`CountOverflowWarning`.
    """
    if override is not None:
        return _clamp(int(override), maximum)

    for pattern in _COUNT_PATTERNS:
        match = pattern.search(text)
        if match:
            return _clamp(int(match.group(1)), maximum)
    return None
