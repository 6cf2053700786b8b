"""Refiner: repairs an analysis using validator feedback."""

from __future__ import annotations

import logging
from typing import Optional

from formwright.analysis.normalize import normalize_analysis
from formwright.inference.client import CompletionClient
from formwright.models import Analysis, ValidationResult
from formwright.prompts import get_prompt
from formwright.prompts.blocks import (
    analysis_json,
    analysis_schema,
    source_material_block,
    user_context_block,
)
from formwright.registry.field_types import FieldTypeRegistry

log = logging.getLogger(__name__)


def _bullets(items: list[str], empty: str) -> str:
    return "\n".join(f"- {item}" for item in items) if items else empty


class AnalysisRefiner:
    """Asks the most capable model for an improved analysis.

    The output goes through the same normalization as the primary pass and
    is accepted as final; it is not validated again.
    """

    def __init__(
        self,
        client: CompletionClient,
        registry: FieldTypeRegistry,
        *,
        temperature: float = 0.3,
        reference_max_chars: int = 8000,
    ) -> None:
        self._client = client
        self._registry = registry
        self._temperature = temperature
        self._reference_max_chars = reference_max_chars
        self._system_prompt = get_prompt("refinement", "REFINEMENT_SYSTEM_PROMPT").format(
            field_type_reference=registry.build_reference(),
            analysis_schema=analysis_schema(),
        )

    async def refine(
        self,
        request: str,
        analysis: Analysis,
        validation: ValidationResult,
        *,
        model: str,
        user_context: Optional[str] = None,
        reference_data: Optional[str] = None,
    ) -> Analysis:
        """Return an improved analysis, or ``analysis`` itself when ``validation`` passed."""
        if validation.is_valid:
            return analysis

        log.info("Refining analysis with %s (%d issues)", model, len(validation.issues))
        raw = await self._client.complete_json(
            model=model,
            system=self._system_prompt,
            user=get_prompt("refinement", "REFINEMENT_PROMPT").format(
                request=request,
                user_context_block=user_context_block(user_context),
                reference_block=source_material_block(reference_data, self._reference_max_chars),
                analysis=analysis_json(analysis),
                issues=_bullets(validation.issues, "- (none listed)"),
                suggestions=_bullets(validation.suggestions, "- (none listed)"),
            ),
            temperature=self._temperature,
        )
        return normalize_analysis(raw, self._registry)
