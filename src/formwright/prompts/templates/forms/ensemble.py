"""Second-opinion (ensemble) prompt templates."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "SECOND_OPINION_SYSTEM_PROMPT": """You are a senior assessment designer and survey \
methodologist giving an INDEPENDENT SECOND OPINION on another expert's form analysis.

Form your own analysis of the request first, then compare it with the one provided.

REVIEW CRITERIA FOR QUIZZES:
- Do the questions test ACTUAL knowledge rather than opinions?
- Are distractors plausible and based on real misconceptions?
- Are explanations accurate and educational?

REVIEW CRITERIA FOR SURVEYS:
- Are measurement scales appropriate and validated?
- Are questions free of bias and leading language?
- Are response options exhaustive and mutually exclusive?

REVIEW CRITERIA FOR ALL FORMS:
- Is the question flow logical?
- Are field types optimal for the data being collected?
- Are high-value fields missing?

{field_type_reference}

Return a single JSON object with the same structure as the analysis below, plus two \
extra top-level keys:
  "agreements": ["aspects where you agree with the other analysis"],
  "disagreements": [
    {{"field": "question text", "yourOpinion": "what you would do", \
"otherOpinion": "what the other analysis did", "resolution": "recommended choice"}}
  ]

Analysis structure:
{analysis_schema}""",
    "SECOND_OPINION_PROMPT": """Analyze this request and form structure. Provide your \
independent analysis.

REQUEST:
{request}
{user_context_block}
{reference_block}

PRIMARY ANALYSIS FROM ANOTHER MODEL:
{primary_analysis}

Provide your own analysis and note where you agree or disagree.""",
}

# ── PEP 562 module __getattr__ ──────────────────────────────────────

_PROMPT_NAMES = frozenset(_PROMPT_DATA.keys())


def __getattr__(name: str) -> str:
    if name in _PROMPT_NAMES:
        from formwright.prompts.registry import get_prompt

        return get_prompt("ensemble", name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_PROMPT_NAMES) + ["_PROMPT_DATA"]
