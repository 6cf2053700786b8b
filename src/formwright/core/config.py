"""Nested pydantic-settings configuration for the application.

Each group reads its own ``FORMWRIGHT_<GROUP>_*`` env vars::

    export FORMWRIGHT_LLM_API_KEY=gsk_...
    export FORMWRIGHT_MODELS_MAXIMUM=groq/llama-3.3-70b-versatile
    export FORMWRIGHT_PIPELINE_FORCE_TIER=complex
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """Completion service configuration.

    Env vars use ``FORMWRIGHT_LLM_`` prefix.
    """

    model_config = {"env_prefix": "FORMWRIGHT_LLM_"}

    provider: Literal["groq", "openai", "anthropic", "ollama", "litellm"] = "groq"
    # "realtime" or a dotted path ``package.module:BackendClass``
    inference_backend: str = "realtime"
    base_url: Optional[str] = None
    api_key: str = "no-key"
    timeout: float = Field(default=60.0, gt=0.0)
    max_retries: int = Field(default=1, ge=0, le=3)
    retry_base_delay: float = Field(default=0.5, ge=0.0)
    max_concurrent_calls: int = Field(default=8, ge=1)


class ModelRosterConfig(BaseSettings):
    """Fixed model roster, one identifier per capability tier.

    Env vars use ``FORMWRIGHT_MODELS_`` prefix. Identifiers carry LiteLLM
    provider prefixes.
    """

    model_config = {"env_prefix": "FORMWRIGHT_MODELS_"}

    fast: str = "groq/llama-3.1-8b-instant"
    balanced: str = "groq/meta-llama/llama-4-maverick-17b-128e-instruct"
    maximum: str = "groq/llama-3.3-70b-versatile"
    # Second opinions come from a different model family
    secondary: str = "groq/qwen/qwen3-32b"

    # Tried once when a tier's model fails transiently; "" disables
    fast_fallback: str = "groq/qwen/qwen3-32b"
    balanced_fallback: str = "groq/qwen/qwen3-32b"
    maximum_fallback: str = "groq/qwen/qwen3-32b"
    secondary_fallback: str = "groq/llama-3.3-70b-versatile"

    def fallback_map(self) -> dict[str, str]:
        """Model id to the model tried after it fails; tiers without a distinct fallback are left out."""
        chain: dict[str, str] = {}
        for tier in ("fast", "balanced", "maximum", "secondary"):
            model = getattr(self, tier).strip()
            fallback = getattr(self, f"{tier}_fallback").strip()
            if model and fallback and fallback != model:
                chain.setdefault(model, fallback)
        return chain


class StageTemperatures(BaseSettings):
    """Sampling temperature per pipeline stage.

    Env vars use ``FORMWRIGHT_TEMPERATURE_`` prefix.
    """

    model_config = {"env_prefix": "FORMWRIGHT_TEMPERATURE_"}

    primary: float = Field(default=0.4, ge=0.0, le=2.0)
    secondary: float = Field(default=0.3, ge=0.0, le=2.0)
    validation: float = Field(default=0.2, ge=0.0, le=2.0)
    refinement: float = Field(default=0.3, ge=0.0, le=2.0)
    synthesis: float = Field(default=0.25, ge=0.0, le=2.0)
    quiz_options: float = Field(default=0.3, ge=0.0, le=2.0)


class PipelineConfig(BaseSettings):
    """Pipeline behaviour.

    Env vars use ``FORMWRIGHT_PIPELINE_`` prefix.
    """

    model_config = {"env_prefix": "FORMWRIGHT_PIPELINE_"}

    max_question_count: int = Field(default=120, ge=1)
    reference_max_chars: int = Field(default=8000, ge=0)
    force_tier: Optional[Literal["simple", "moderate", "complex"]] = None
    optional_stage_reserve_seconds: float = Field(default=15.0, ge=0.0)
    agreement_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    passing_score: int = Field(default=70, ge=0, le=100)


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``FORMWRIGHT_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "FORMWRIGHT_OBSERVABILITY_"}

    service_name: str = "formwright"
    log_level: str = "INFO"


class APIConfig(BaseSettings):
    """HTTP surface configuration.

    Env vars use ``FORMWRIGHT_API_`` prefix.
    """

    model_config = {"env_prefix": "FORMWRIGHT_API_"}

    title: str = "Formwright"
    description: str = "Natural-language to typed form specification"
    max_concurrent_runs: int = Field(default=4, ge=1)


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    models: ModelRosterConfig = Field(default_factory=ModelRosterConfig)
    temperatures: StageTemperatures = Field(default_factory=StageTemperatures)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    api: APIConfig = Field(default_factory=APIConfig)
