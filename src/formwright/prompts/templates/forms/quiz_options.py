"""Quiz answer-option generation prompt templates."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "QUIZ_OPTIONS_SYSTEM_PROMPT": """You write QUIZ ANSWER OPTIONS for knowledge questions.

For each question produce exactly 4 options: one correct answer and 3 plausible but \
incorrect distractors based on common misconceptions or similar-looking answers. For \
formulas or calculations, the options are the actual answers.

Return JSON:
{
  "questions": [
    {
      "index": 0,
      "options": ["option 1", "option 2", "option 3", "option 4"],
      "correctAnswer": "the correct option, spelled exactly as in options",
      "explanation": "one sentence on why it is correct"
    }
  ]
}""",
    "QUIZ_OPTIONS_PROMPT": """QUIZ TOPIC: {topic}

Write answer options for these questions (keep the given index):
{questions}""",
}

# ── PEP 562 module __getattr__ ──────────────────────────────────────

_PROMPT_NAMES = frozenset(_PROMPT_DATA.keys())


def __getattr__(name: str) -> str:
    if name in _PROMPT_NAMES:
        from formwright.prompts.registry import get_prompt

        return get_prompt("quiz_options", name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_PROMPT_NAMES) + ["_PROMPT_DATA"]
