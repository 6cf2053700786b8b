"""Pydantic data models for formwright.

Every stage produces new frozen objects; later stages reference or
supersede earlier outputs but never mutate them. Attributes are snake_case
in Python and camelCase on the wire (``quizConfig``, ``correctAnswer``),
which is the contract the downstream grading routine reads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Complexity = Literal["simple", "moderate", "complex"]
Importance = Literal["critical", "important", "optional"]
Quality = Literal["quick", "high"]


class _WireModel(BaseModel):
    """Frozen model serialized with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ── Analysis models ──────────────────────────────────────────────────


class DataPoint(_WireModel):
    """A datum the request states or implies."""

    name: str
    description: str = ""
    already_present: bool = False
    data_type: str = "text"
    importance: Importance = "important"
    reasoning: str = ""


class ContentUnderstanding(_WireModel):
    """What the request is for and who it is aimed at."""

    purpose: str = "Unknown purpose"
    audience: str = "General audience"
    context: str = ""
    key_topics: list[str] = Field(default_factory=list)
    data_points: list[DataPoint] = Field(default_factory=list)
    tone: str = "neutral"
    is_quiz: bool = False
    is_survey: bool = False


class FieldValidation(_WireModel):
    """Input constraints a form renderer can enforce on a field."""

    pattern: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)


class CandidateQuestion(_WireModel):
    """A question proposed by an analysis pass, before synthesis."""

    question: str
    rationale: str = ""
    suggested_field_type: str = "short-answer"
    validation_suggestions: str = ""
    validation: Optional[FieldValidation] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    options: list[str] = Field(default_factory=list)
    required: bool = True
    reasoning: str = ""
    relates_to: list[str] = Field(default_factory=list)
    category: str = "general"
    correct_answer: Optional[Union[str, list[str]]] = None
    explanation: str = ""


class AnalysisMetadata(_WireModel):
    content_type: str = "general"
    domain: str = "general"
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    complexity: Complexity = "moderate"
    estimated_field_count: int = Field(default=0, ge=0)
    suggestions: list[str] = Field(default_factory=list)


class Analysis(_WireModel):
    """One model pass over a request."""

    understanding: ContentUnderstanding = Field(default_factory=ContentUnderstanding)
    questions: list[CandidateQuestion] = Field(default_factory=list)
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)


class ValidationResult(_WireModel):
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class ConflictDetail(_WireModel):
    field: str
    model1_opinion: str = Field(default="", alias="model1Opinion")
    model2_opinion: str = Field(default="", alias="model2Opinion")
    resolution: str = ""


class ConsensusResult(_WireModel):
    agreed_fields: list[CandidateQuestion] = Field(default_factory=list)
    conflicts: list[ConflictDetail] = Field(default_factory=list)
    recommended_approach: str = ""
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)


class EnhancedAnalysis(_WireModel):
    """Run record for one pipeline invocation."""

    primary_analysis: Analysis
    validation_result: Optional[ValidationResult] = None
    refined_analysis: Optional[Analysis] = None
    consensus: Optional[ConsensusResult] = None
    model_confidence: dict[str, float] = Field(default_factory=dict)
    selected_model: str
    complexity: Complexity = "moderate"
    skipped_stages: list[str] = Field(default_factory=list)

    @property
    def best_analysis(self) -> Analysis:
        """Refined analysis when present, else primary."""
        return self.refined_analysis or self.primary_analysis


# ── Generated form models ────────────────────────────────────────────


class QuizConfig(_WireModel):
    correct_answer: Union[str, list[str]]
    points: int = Field(default=1, ge=0)
    explanation: str = ""


class GeneratedField(_WireModel):
    id: str
    label: str
    type: str
    required: bool = True
    options: Optional[list[str]] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    validation: Optional[FieldValidation] = None
    relates_to: Optional[list[str]] = None
    quiz_config: Optional[QuizConfig] = None
    order: int = Field(ge=0)


class QuizMode(_WireModel):
    enabled: bool = True
    show_score_immediately: bool = True
    show_correct_answers: bool = True
    show_explanations: bool = True
    passing_score: int = Field(default=70, ge=0, le=100)


class GeneratedForm(_WireModel):
    title: str
    fields: list[GeneratedField] = Field(default_factory=list)
    quiz_mode: Optional[QuizMode] = None


# ── Run analytics ────────────────────────────────────────────────────


class StageMetrics(BaseModel):
    """Timing and outcome for a single pipeline stage."""

    stage: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_ms: float = 0.0
    status: Literal["ok", "failed", "skipped"] = "ok"
    model: str = ""


class RunAnalytics(BaseModel):
    """Per-run analytics, populated by ``hooks.run_tracker``."""

    run_id: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: Optional[datetime] = None
    status: str = "running"
    stages: list[StageMetrics] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    total_duration_ms: float = 0.0

    def finalize(self) -> None:
        self.ended_at = datetime.now(timezone.utc)
        self.total_duration_ms = (self.ended_at - self.started_at).total_seconds() * 1000
        if self.status == "running":
            self.status = "completed"


class GenerationResult(BaseModel):
    """Form plus the run record that produced it."""

    model_config = ConfigDict(frozen=True)

    form: GeneratedForm
    analysis: EnhancedAnalysis
    run: Optional[RunAnalytics] = None
