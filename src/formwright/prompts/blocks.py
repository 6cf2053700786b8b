"""Assembly helpers for the text blocks several stage prompts share."""

from __future__ import annotations

import json
import logging
from typing import Optional

from formwright.models import Analysis
from formwright.prompts.registry import get_prompt
from formwright.prompts.templates.forms.common import SOURCE_END, SOURCE_START

log = logging.getLogger(__name__)


def cap_reference(reference: Optional[str], max_chars: int) -> str:
    """Strip framing markers from reference text and cut it to ``max_chars``."""
    if not reference:
        return ""
    cleaned = reference.replace(SOURCE_START, "").replace(SOURCE_END, "").strip()
    if len(cleaned) > max_chars:
        log.info("Reference material truncated from %d to %d chars", len(cleaned), max_chars)
        cleaned = cleaned[:max_chars]
    return cleaned


def source_material_block(reference: Optional[str], max_chars: int) -> str:
    """Reference data framed as source content only, or "" when there is none."""
    cleaned = cap_reference(reference, max_chars)
    if not cleaned:
        return ""
    return "\n" + get_prompt("common", "SOURCE_MATERIAL_BLOCK").format(reference=cleaned) + "\n"


def user_context_block(user_context: Optional[str]) -> str:
    if not user_context or not user_context.strip():
        return ""
    return "\n" + get_prompt("common", "USER_CONTEXT_BLOCK").format(user_context=user_context.strip()) + "\n"


def analysis_schema() -> str:
    return get_prompt("common", "ANALYSIS_SCHEMA")


def analysis_json(analysis: Analysis) -> str:
    """Wire-format JSON of an analysis, for embedding in a prompt."""
    return json.dumps(analysis.to_wire(), indent=2, ensure_ascii=False)
