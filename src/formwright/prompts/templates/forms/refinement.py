"""Refinement prompt templates."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "REFINEMENT_SYSTEM_PROMPT": """You are a form design expert. REFINE AND IMPROVE a form \
analysis so that it addresses every issue raised by a reviewer, while keeping what \
already works.

Keep the requester's scope: same topic, same number of questions unless an issue says \
a question is redundant or missing.

{field_type_reference}

Return a single JSON object with this exact structure:
{analysis_schema}

Directly return the JSON object. Do not output anything else.""",
    "REFINEMENT_PROMPT": """Improve this form analysis.

REQUEST:
{request}
{user_context_block}
{reference_block}

CURRENT ANALYSIS:
{analysis}

ISSUES IDENTIFIED:
{issues}

SUGGESTIONS:
{suggestions}

Provide an improved analysis that addresses these issues.""",
}

# ── PEP 562 module __getattr__ ──────────────────────────────────────

_PROMPT_NAMES = frozenset(_PROMPT_DATA.keys())


def __getattr__(name: str) -> str:
    if name in _PROMPT_NAMES:
        from formwright.prompts.registry import get_prompt

        return get_prompt("refinement", name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_PROMPT_NAMES) + ["_PROMPT_DATA"]
