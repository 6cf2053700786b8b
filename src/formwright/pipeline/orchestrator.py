"""Form generation pipeline: wires the stages into one run.

A run walks ``CLASSIFY → PRIMARY → REVIEW → REFINE → SYNTHESIZE → DONE``.
Primary analysis and synthesis are load-bearing and their failures
propagate. Ensemble, validation and refinement are optional: any
exception they raise is logged, recorded in
``EnhancedAnalysis.skipped_stages`` and the run carries on with the best
analysis still available.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Optional, Sequence, TypeVar

from formwright.analysis.confidence import score_analysis
from formwright.analysis.consensus import EnsembleBuilder, EnsembleOutcome
from formwright.analysis.primary import PrimaryAnalyzer
from formwright.analysis.refiner import AnalysisRefiner
from formwright.analysis.validator import AnalysisValidator
from formwright.core.config import AppSettings
from formwright.hooks.run_tracker import end_run, record_error, record_skipped, start_run, track_stage
from formwright.inference.client import CompletionClient
from formwright.models import (
    Analysis,
    Complexity,
    ConsensusResult,
    EnhancedAnalysis,
    GeneratedForm,
    GenerationResult,
    ValidationResult,
)
from formwright.pipeline.options import GenerationOptions, PipelinePlan
from formwright.pipeline.stages import (
    Deadline,
    Stage,
    deadline_allows,
    next_stage,
    should_run_ensemble,
    should_run_refinement,
    should_run_validation,
)
from formwright.registry.field_types import FieldTypeRegistry, default_registry
from formwright.routing.complexity import classify_complexity
from formwright.routing.model_selector import ModelSelector
from formwright.routing.question_count import extract_question_count
from formwright.synthesis.form_synthesizer import FormSynthesizer
from formwright.synthesis.quiz_options import QuizOptionGenerator

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _RunState:
    """Mutable scratch state for a single run; never shared between runs."""

    request: str
    options: GenerationOptions
    plan: PipelinePlan
    deadline: Deadline
    stage: Stage = Stage.CLASSIFY
    complexity: Complexity = "moderate"
    question_count: Optional[int] = None
    primary_model: str = ""
    primary: Optional[Analysis] = None
    consensus: Optional[ConsensusResult] = None
    validation: Optional[ValidationResult] = None
    refined: Optional[Analysis] = None
    model_confidence: dict[str, float] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    form: Optional[GeneratedForm] = None

    def best_analysis(self) -> Analysis:
        assert self.primary is not None
        return self.refined or self.primary

    def skip(self, name: str, reason: str) -> None:
        log.info("Skipping %s stage: %s", name, reason)
        if name not in self.skipped:
            self.skipped.append(name)
        record_skipped(name)


class FormGenerationPipeline:
    """Natural-language request in, :class:`GeneratedForm` out.

    Holds only read-only collaborators (settings, registry, roster and the
    shared completion client), so one instance can serve any number of
    concurrent runs.
    """

    def __init__(
        self,
        client: CompletionClient,
        settings: AppSettings | None = None,
        registry: FieldTypeRegistry | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._registry = registry or default_registry()
        self._client = client

        temps = self._settings.temperatures
        pipeline_cfg = self._settings.pipeline
        max_ref = pipeline_cfg.reference_max_chars

        self._selector = ModelSelector(self._settings.models, force_tier=pipeline_cfg.force_tier)
        self._primary = PrimaryAnalyzer(client, self._registry, temperature=temps.primary, reference_max_chars=max_ref)
        self._ensemble = EnsembleBuilder(
            client,
            self._registry,
            temperature=temps.secondary,
            reference_max_chars=max_ref,
            agreement_threshold=pipeline_cfg.agreement_threshold,
        )
        self._validator = AnalysisValidator(client, temperature=temps.validation)
        self._refiner = AnalysisRefiner(client, self._registry, temperature=temps.refinement, reference_max_chars=max_ref)
        self._synthesizer = FormSynthesizer(
            client,
            self._registry,
            QuizOptionGenerator(client, temperature=temps.quiz_options),
            temperature=temps.synthesis,
            reference_max_chars=max_ref,
            passing_score=pipeline_cfg.passing_score,
        )

    @property
    def selector(self) -> ModelSelector:
        return self._selector

    @property
    def registry(self) -> FieldTypeRegistry:
        return self._registry

    # ── Public entry points ──────────────────────────────────────────

    async def generate(self, request: str, options: GenerationOptions | None = None) -> GeneratedForm:
        """Generate a form; see :meth:`generate_with_analysis` for the run record."""
        result = await self.generate_with_analysis(request, options)
        return result.form

    async def generate_with_analysis(
        self,
        request: str,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Run the full pipeline and return the form with its run record.

        Raises:
            ValueError: ``request`` is empty.
            FormwrightError: primary analysis or synthesis failed.
        """
        if not request or not request.strip():
            raise ValueError("Request text must not be empty")
        options = options or GenerationOptions()
        plan = PipelinePlan.from_options(options)
        state = _RunState(
            request=request.strip(),
            options=options,
            plan=plan,
            deadline=Deadline(options.deadline_seconds),
        )

        start_run()
        try:
            while state.stage is not Stage.DONE:
                await self._step(state)
                state.stage = next_stage(state.stage)
        except BaseException as exc:
            record_error(f"{state.stage.value}_failed: {exc}")
            end_run(status="failed")
            raise
        run = end_run()

        assert state.primary is not None and state.form is not None
        analysis = EnhancedAnalysis(
            primary_analysis=state.primary,
            validation_result=state.validation,
            refined_analysis=state.refined,
            consensus=state.consensus,
            model_confidence=state.model_confidence,
            selected_model=state.primary_model,
            complexity=state.complexity,
            skipped_stages=state.skipped,
        )
        return GenerationResult(form=state.form, analysis=analysis, run=run)

    async def generate_many(
        self,
        requests: Sequence[str],
        options: GenerationOptions | None = None,
        *,
        max_concurrent: int | None = None,
    ) -> list[GenerationResult]:
        """Run several requests with at most ``max_concurrent`` in flight.

        Results are in request order; the first failure propagates.
        """
        limit = max_concurrent or self._settings.api.max_concurrent_runs
        sem = asyncio.Semaphore(limit)

        async def _bounded(request: str) -> GenerationResult:
            async with sem:
                return await self.generate_with_analysis(request, options)

        return list(await asyncio.gather(*[_bounded(r) for r in requests]))

    # ── Stage machine ────────────────────────────────────────────────

    async def _step(self, state: _RunState) -> None:
        if state.stage is Stage.CLASSIFY:
            self._classify(state)
        elif state.stage is Stage.PRIMARY:
            await self._run_primary(state)
        elif state.stage is Stage.REVIEW:
            await self._run_review(state)
        elif state.stage is Stage.REFINE:
            await self._run_refine(state)
        elif state.stage is Stage.SYNTHESIZE:
            await self._run_synthesis(state)

    def _classify(self, state: _RunState) -> None:
        with track_stage(Stage.CLASSIFY.value):
            detected = classify_complexity(state.request)
            state.complexity = self._selector.effective_complexity(detected, state.options.complexity)
            state.question_count = extract_question_count(
                state.request,
                state.options.question_count,
                maximum=self._settings.pipeline.max_question_count,
            )
            state.primary_model = self._selector.select_primary(state.complexity)
        log.info(
            "Classified request",
            extra={"complexity": state.complexity, "question_count": state.question_count},
        )

    async def _run_primary(self, state: _RunState) -> None:
        with track_stage(Stage.PRIMARY.value) as metrics:
            metrics.model = state.primary_model
            state.primary = await self._primary.analyze(
                state.request,
                model=state.primary_model,
                user_context=state.options.user_context,
                reference_data=state.options.reference_data,
                question_count=state.question_count,
            )
        state.model_confidence[state.primary_model] = score_analysis(state.primary)

    async def _run_review(self, state: _RunState) -> None:
        reserve = self._settings.pipeline.optional_stage_reserve_seconds
        tasks: list[Awaitable[None]] = []

        if not should_run_ensemble(state.plan):
            state.skip("ensemble", "disabled")
        elif not deadline_allows(state.deadline, reserve):
            state.skip("ensemble", "deadline")
        else:
            tasks.append(self._run_ensemble(state))

        if not should_run_validation(state.plan):
            state.skip("validation", "disabled")
        elif not deadline_allows(state.deadline, reserve):
            state.skip("validation", "deadline")
        else:
            tasks.append(self._run_validation(state))

        if tasks:
            await asyncio.gather(*tasks)

    async def _run_ensemble(self, state: _RunState) -> None:
        assert state.primary is not None
        model = self._selector.for_role("secondary")
        outcome: Optional[EnsembleOutcome] = await self._optional(
            state,
            "ensemble",
            model,
            self._ensemble.review(
                state.request,
                state.primary,
                model=model,
                user_context=state.options.user_context,
                reference_data=state.options.reference_data,
            ),
        )
        if outcome is not None:
            state.consensus = outcome.consensus
            state.model_confidence[outcome.model] = score_analysis(outcome.secondary)

    async def _run_validation(self, state: _RunState) -> None:
        assert state.primary is not None
        model = self._selector.for_role("validator")
        state.validation = await self._optional(
            state,
            "validation",
            model,
            self._validator.validate(state.request, state.primary, model=model),
        )

    async def _run_refine(self, state: _RunState) -> None:
        assert state.primary is not None
        if not should_run_refinement(state.plan, state.validation):
            if not state.plan.refinement:
                state.skip("refinement", "disabled")
            elif state.validation is None:
                state.skip("refinement", "no validation verdict")
            return
        if not deadline_allows(state.deadline, self._settings.pipeline.optional_stage_reserve_seconds):
            state.skip("refinement", "deadline")
            return

        assert state.validation is not None
        model = self._selector.for_role("refiner")
        state.refined = await self._optional(
            state,
            "refinement",
            model,
            self._refiner.refine(
                state.request,
                state.primary,
                state.validation,
                model=model,
                user_context=state.options.user_context,
                reference_data=state.options.reference_data,
            ),
        )

    async def _run_synthesis(self, state: _RunState) -> None:
        model = self._selector.for_role("synthesis")
        with track_stage(Stage.SYNTHESIZE.value) as metrics:
            metrics.model = model
            state.form = await self._synthesizer.synthesize(
                state.request,
                state.best_analysis(),
                model=model,
                quiz_model=self._selector.for_role("quiz_options"),
                question_count=state.question_count,
                reference_data=state.options.reference_data,
            )

    async def _optional(
        self,
        state: _RunState,
        name: str,
        model: str,
        work: Awaitable[T],
    ) -> Optional[T]:
        """Await an optional stage; degrade to ``None`` on any error."""
        try:
            with track_stage(name) as metrics:
                metrics.model = model
                return await work
        except Exception as exc:
            log.warning("Optional %s stage failed, continuing without it: %s", name, exc)
            record_error(f"{name}_failed: {exc}")
            if name not in state.skipped:
                state.skipped.append(name)
            return None
