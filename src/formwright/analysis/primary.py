"""Primary analyzer: the first, load-bearing model pass over a request."""

from __future__ import annotations

import logging
from typing import Optional

from formwright.analysis.normalize import normalize_analysis
from formwright.inference.client import CompletionClient
from formwright.models import Analysis
from formwright.prompts import get_prompt
from formwright.prompts.blocks import analysis_schema, source_material_block, user_context_block
from formwright.registry.field_types import FieldTypeRegistry

log = logging.getLogger(__name__)


class PrimaryAnalyzer:
    """Produces the first :class:`Analysis` for a request.

    The system prompt embeds the registry reference and the domain
    heuristics; the user prompt carries the request, optional user context
    and reference material framed as source content only. Parse or schema
    failures propagate as ``MalformedOutputError``.
    """

    def __init__(
        self,
        client: CompletionClient,
        registry: FieldTypeRegistry,
        *,
        temperature: float = 0.4,
        reference_max_chars: int = 8000,
    ) -> None:
        self._client = client
        self._registry = registry
        self._temperature = temperature
        self._reference_max_chars = reference_max_chars
        self._system_prompt = get_prompt("analysis", "PRIMARY_SYSTEM_PROMPT").format(
            field_type_reference=registry.build_reference(),
            analysis_schema=analysis_schema(),
        )

    def build_user_prompt(
        self,
        request: str,
        *,
        user_context: Optional[str] = None,
        reference_data: Optional[str] = None,
        question_count: Optional[int] = None,
    ) -> str:
        count_instruction = ""
        if question_count is not None:
            count_instruction = "\n" + get_prompt("analysis", "COUNT_INSTRUCTION").format(count=question_count) + "\n"
        return get_prompt("analysis", "ANALYSIS_REQUEST_PROMPT").format(
            request=request,
            user_context_block=user_context_block(user_context),
            reference_block=source_material_block(reference_data, self._reference_max_chars),
            count_instruction=count_instruction,
        )

    async def analyze(
        self,
        request: str,
        *,
        model: str,
        user_context: Optional[str] = None,
        reference_data: Optional[str] = None,
        question_count: Optional[int] = None,
    ) -> Analysis:
        user_prompt = self.build_user_prompt(
            request,
            user_context=user_context,
            reference_data=reference_data,
            question_count=question_count,
        )
        raw = await self._client.complete_json(
            model=model,
            system=self._system_prompt,
            user=user_prompt,
            temperature=self._temperature,
        )
        analysis = normalize_analysis(raw, self._registry)
        log.info(
            "Primary analysis produced %d candidate questions",
            len(analysis.questions),
            extra={"model": model, "content_type": analysis.metadata.content_type},
        )
        return analysis
