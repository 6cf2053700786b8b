"""Final form synthesis prompt templates."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "SYNTHESIS_SYSTEM_PROMPT": """You are generating the FINAL FORM JSON from a completed \
analysis. The output is rendered and stored by other software, so it must follow the \
structure below exactly.

{field_type_reference}

{mode_rules}
Return CLEAN, VALID JSON:
{{
  "title": "Descriptive title matching the request",{quiz_mode_schema}
  "fields": [
    {{
      "id": "semantic_snake_case_id",
      "label": "Question text",
      "type": "an EXACT field type name from the list",
      "required": true,
      "placeholder": "example",
      "helpText": "guidance",
      "options": ["only for choice types"],
      "validation": {{"pattern": "regex", "min": 0, "max": 100, "minLength": 0, "maxLength": 500}},
      "relatesTo": ["id of a field this one depends on"],{quiz_config_schema}
      "order": 0
    }}
  ]
}}""",
    "QUIZ_MODE_RULES": """QUIZ MODE ACTIVE:
- Generate REAL knowledge questions, never opinion or self-reflective questions
- Use "multiple-choice" for one correct answer, "checkboxes" for several
- Give every question 4 options; the correct answer must be one of them, spelled exactly
- Include quizConfig with correctAnswer, points (1-3) and explanation for EVERY field
- Include quizMode in the root object
- Do not include placeholder or helpText on quiz questions
""",
    "SURVEY_MODE_RULES": """SURVEY MODE ACTIVE:
- Use appropriate scales ("opinion-scale" for Likert 5-7 point and NPS 0-10, "star-rating" for satisfaction)
- Mix quantitative and qualitative questions
- Do not include quizConfig or quizMode
""",
    "FORM_MODE_RULES": """DATA COLLECTION MODE:
- Prefer specialized field types over generic text
- Order fields essential, then insightful, then optional
- Do not include quizConfig or quizMode
""",
    "QUIZ_MODE_SCHEMA": """
  "quizMode": {{"enabled": true, "showScoreImmediately": true, "showCorrectAnswers": true, \
"showExplanations": true, "passingScore": {passing_score}}},""",
    "QUIZ_CONFIG_SCHEMA": """
      "quizConfig": {"correctAnswer": "exact option text, or a list for checkboxes", \
"points": 1, "explanation": "why this is correct"},""",
    "SYNTHESIS_PROMPT": """Create the final form based on this analysis.

REQUEST:
{request}
{reference_block}

ANALYSIS:
{analysis}

{count_instruction}
Generate a complete form with semantic field ids, optimal field types and strategic \
ordering (essential, then insightful, then optional).""",
    "EXACT_COUNT_INSTRUCTION": """The form MUST contain EXACTLY {count} fields. Not more, not fewer.""",
}

# ── PEP 562 module __getattr__ ──────────────────────────────────────

_PROMPT_NAMES = frozenset(_PROMPT_DATA.keys())


def __getattr__(name: str) -> str:
    if name in _PROMPT_NAMES:
        from formwright.prompts.registry import get_prompt

        return get_prompt("synthesis", name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_PROMPT_NAMES) + ["_PROMPT_DATA"]
