"""Caller options and the per-run stage plan built from them."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from formwright.models import Complexity, Quality


class GenerationOptions(BaseModel):
    """Options accepted by :meth:`FormGenerationPipeline.generate`.

    ``enable_*`` flags left as ``None`` follow ``quality``: ``"quick"`` runs
    the primary pass only, ``"high"`` turns every optional stage on.
    """

    model_config = ConfigDict(frozen=True)

    question_count: Optional[int] = Field(default=None, ge=1)
    reference_data: Optional[str] = None
    user_context: Optional[str] = None
    quality: Quality = "quick"
    enable_ensemble: Optional[bool] = None
    enable_validation: Optional[bool] = None
    enable_refinement: Optional[bool] = None
    complexity: Optional[Complexity] = None
    deadline_seconds: Optional[float] = Field(default=None, gt=0)


class PipelinePlan(BaseModel):
    """Which optional stages a run may attempt. Built once per run."""

    model_config = ConfigDict(frozen=True)

    ensemble: bool = False
    validation: bool = False
    refinement: bool = False

    @classmethod
    def from_options(cls, options: GenerationOptions) -> PipelinePlan:
        if options.quality == "quick":
            return cls()

        def _flag(value: Optional[bool]) -> bool:
            return True if value is None else value

        validation = _flag(options.enable_validation)
        return cls(
            ensemble=_flag(options.enable_ensemble),
            validation=validation,
            # Refinement consumes the validation verdict, so it never runs alone
            refinement=validation and _flag(options.enable_refinement),
        )

    def disabled_stages(self) -> list[str]:
        return [name for name in ("ensemble", "validation", "refinement") if not getattr(self, name)]
