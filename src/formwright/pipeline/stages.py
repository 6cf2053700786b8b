"""Pipeline stage machine, gating predicates and the run deadline.

Each predicate is a pure function of the plan and what earlier stages
produced, so gating can be tested without running a pipeline.
"""

from __future__ import annotations

import enum
import time
from typing import Optional

from formwright.models import ValidationResult
from formwright.pipeline.options import PipelinePlan


class Stage(str, enum.Enum):
    CLASSIFY = "classify"
    PRIMARY = "primary"
    REVIEW = "review"
    REFINE = "refine"
    SYNTHESIZE = "synthesize"
    DONE = "done"


_NEXT: dict[Stage, Stage] = {
    Stage.CLASSIFY: Stage.PRIMARY,
    Stage.PRIMARY: Stage.REVIEW,
    Stage.REVIEW: Stage.REFINE,
    Stage.REFINE: Stage.SYNTHESIZE,
    Stage.SYNTHESIZE: Stage.DONE,
}


def next_stage(stage: Stage) -> Stage:
    """Successor of ``stage``. ``DONE`` is terminal."""
    if stage is Stage.DONE:
        raise ValueError("DONE has no successor")
    return _NEXT[stage]


class Deadline:
    """Overall time budget for one run, measured on ``time.monotonic``."""

    def __init__(self, seconds: Optional[float]) -> None:
        self._expires_at = None if seconds is None else time.monotonic() + seconds

    @property
    def bounded(self) -> bool:
        return self._expires_at is not None

    def remaining(self) -> float:
        if self._expires_at is None:
            return float("inf")
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        return self.remaining() <= 0.0


def deadline_allows(deadline: Deadline, reserve_seconds: float) -> bool:
    """Optional stages run only while more than ``reserve_seconds`` remain."""
    return deadline.remaining() > reserve_seconds


def should_run_ensemble(plan: PipelinePlan) -> bool:
    return plan.ensemble


def should_run_validation(plan: PipelinePlan) -> bool:
    return plan.validation


def should_run_refinement(plan: PipelinePlan, validation: Optional[ValidationResult]) -> bool:
    """Refine only when planned, validation actually ran, and it found defects."""
    return plan.refinement and validation is not None and not validation.is_valid
