"""Form generation endpoint."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from formwright.models import Complexity, ConsensusResult, GenerationResult, ValidationResult
from formwright.pipeline import FormGenerationPipeline, GenerationOptions

log = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])


class GenerateRequest(BaseModel):
    """Request to turn natural-language text into a form."""

    request: str = Field(min_length=1)
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    include_analysis: bool = False


class AnalysisSummary(BaseModel):
    """Condensed run record returned alongside the form."""

    run_id: str = ""
    selected_model: str
    complexity: Complexity
    model_confidence: dict[str, float] = Field(default_factory=dict)
    skipped_stages: list[str] = Field(default_factory=list)
    refined: bool = False
    consensus: Optional[dict[str, Any]] = None
    validation: Optional[dict[str, Any]] = None
    duration_ms: float = 0.0
    errors: list[str] = Field(default_factory=list)


class GenerateResponse(BaseModel):
    """Generated form in its camelCase wire shape."""

    form: dict[str, Any]
    summary: AnalysisSummary
    analysis: Optional[dict[str, Any]] = None


def _dump(model: ConsensusResult | ValidationResult | None) -> Optional[dict[str, Any]]:
    return model.to_wire() if model is not None else None


def _summarize(result: GenerationResult) -> AnalysisSummary:
    analysis = result.analysis
    run = result.run
    return AnalysisSummary(
        run_id=run.run_id if run else "",
        selected_model=analysis.selected_model,
        complexity=analysis.complexity,
        model_confidence=analysis.model_confidence,
        skipped_stages=analysis.skipped_stages,
        refined=analysis.refined_analysis is not None,
        consensus=_dump(analysis.consensus),
        validation=_dump(analysis.validation_result),
        duration_ms=run.total_duration_ms if run else 0.0,
        errors=list(run.errors) if run else [],
    )


@router.post("/generate", response_model=GenerateResponse)
async def generate_form(body: GenerateRequest, req: Request) -> GenerateResponse:
    """Generate a form; domain errors map to HTTP statuses in the error handlers."""
    pipeline: FormGenerationPipeline = req.app.state.pipeline
    async with req.app.state.run_limiter:
        result = await pipeline.generate_with_analysis(body.request, body.options)

    log.info(
        "Generated form",
        extra={"field_count": len(result.form.fields), "skipped_stages": result.analysis.skipped_stages},
    )
    return GenerateResponse(
        form=result.form.to_wire(),
        summary=_summarize(result),
        analysis=result.analysis.to_wire() if body.include_analysis else None,
    )
