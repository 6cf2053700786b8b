"""Validator: audits an analysis, never changes it."""

from __future__ import annotations

import logging

from formwright.analysis.normalize import normalize_validation
from formwright.inference.client import CompletionClient
from formwright.models import Analysis, ValidationResult
from formwright.prompts import get_prompt
from formwright.prompts.blocks import analysis_json

log = logging.getLogger(__name__)


class AnalysisValidator:
    """Critiques an analysis with a fast model and returns findings only."""

    def __init__(self, client: CompletionClient, *, temperature: float = 0.2) -> None:
        self._client = client
        self._temperature = temperature

    async def validate(self, request: str, analysis: Analysis, *, model: str) -> ValidationResult:
        log.info("Validating with %s", model)
        raw = await self._client.complete_json(
            model=model,
            system=get_prompt("validation", "VALIDATION_SYSTEM_PROMPT"),
            user=get_prompt("validation", "VALIDATION_PROMPT").format(
                request=request,
                analysis=analysis_json(analysis),
            ),
            temperature=self._temperature,
        )
        result = normalize_validation(raw)
        log.info("Validation verdict: valid=%s, %d issues", result.is_valid, len(result.issues))
        return result
