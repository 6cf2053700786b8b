"""formwright: turn a natural-language request into a typed form specification.

Usage::

    from formwright import AppSettings, FormGenerationPipeline, GenerationOptions
    from formwright.inference import create_completion_client

    settings = AppSettings()
    pipeline = FormGenerationPipeline(create_completion_client(settings), settings)
    form = await pipeline.generate("Customer feedback survey, 5 questions")
"""

from __future__ import annotations

from formwright.core.config import AppSettings
from formwright.exceptions import (
    CompletionServiceError,
    ConfigurationError,
    FormwrightError,
    MalformedOutputError,
    RegistryViolationError,
    TransientServiceError,
)
from formwright.models import (
    Analysis,
    CandidateQuestion,
    ConsensusResult,
    EnhancedAnalysis,
    GeneratedField,
    GeneratedForm,
    GenerationResult,
    QuizConfig,
    QuizMode,
    ValidationResult,
)
from formwright.pipeline import FormGenerationPipeline, GenerationOptions
from formwright.registry import FieldTypeRegistry, default_registry

__all__ = [
    "AppSettings",
    "FormGenerationPipeline",
    "GenerationOptions",
    "FieldTypeRegistry",
    "default_registry",
    # Models
    "Analysis",
    "CandidateQuestion",
    "ConsensusResult",
    "EnhancedAnalysis",
    "GeneratedField",
    "GeneratedForm",
    "GenerationResult",
    "QuizConfig",
    "QuizMode",
    "ValidationResult",
    # Errors
    "FormwrightError",
    "ConfigurationError",
    "CompletionServiceError",
    "TransientServiceError",
    "MalformedOutputError",
    "RegistryViolationError",
]
