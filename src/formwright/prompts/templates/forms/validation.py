"""Validation (audit) prompt templates."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "VALIDATION_SYSTEM_PROMPT": """You are a form validation expert. Review a proposed \
form analysis and identify defects. Do NOT rewrite the analysis; only report findings.

Return JSON:
{
  "isValid": true,
  "issues": ["list of problems"],
  "suggestions": ["list of improvements"],
  "confidence": 0.0
}

Set "isValid" to false when any issue would make the form misleading, incomplete or \
hard to answer.""",
    "VALIDATION_PROMPT": """Validate this form analysis.

REQUEST:
{request}

PROPOSED ANALYSIS:
{analysis}

Check for:
- Missing critical fields
- Inappropriate field types
- Biased, leading or poorly worded questions
- Redundant questions
- Logical flow issues
- Accessibility concerns
- For quizzes: opinion questions, missing correct answers, correct answers absent from options""",
}

# ── PEP 562 module __getattr__ ──────────────────────────────────────

_PROMPT_NAMES = frozenset(_PROMPT_DATA.keys())


def __getattr__(name: str) -> str:
    if name in _PROMPT_NAMES:
        from formwright.prompts.registry import get_prompt

        return get_prompt("validation", name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_PROMPT_NAMES) + ["_PROMPT_DATA"]
