"""Form generation pipeline."""

from __future__ import annotations

from formwright.pipeline.options import GenerationOptions, PipelinePlan
from formwright.pipeline.orchestrator import FormGenerationPipeline

__all__ = ["FormGenerationPipeline", "GenerationOptions", "PipelinePlan"]
