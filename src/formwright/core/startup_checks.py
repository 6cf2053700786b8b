"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from formwright.exceptions import ConfigurationError

if TYPE_CHECKING:
    from formwright.core.config import AppSettings

log = logging.getLogger(__name__)

# Providers that use local auth and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"ollama"})


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings at startup. Raises ConfigurationError on fatal misconfig."""
    _check_api_key(settings)
    _check_roster(settings)
    _check_budget(settings)


def _check_api_key(settings: AppSettings) -> None:
    """Reject placeholder API keys for providers that need real ones."""
    if settings.llm.provider not in _NO_KEY_PROVIDERS:
        if settings.llm.api_key in ("no-key", ""):
            raise ConfigurationError(
                f"FORMWRIGHT_LLM_API_KEY is required for provider '{settings.llm.provider}'. "
                f"Set it via environment variable or secrets manager."
            )


def _check_roster(settings: AppSettings) -> None:
    """Every roster tier must resolve to a non-empty model identifier."""
    roster = settings.models
    empty = [tier for tier in ("fast", "balanced", "maximum", "secondary") if not getattr(roster, tier).strip()]
    if empty:
        raise ConfigurationError(
            f"Model roster is missing identifiers for: {', '.join(empty)}. "
            "Set FORMWRIGHT_MODELS_<TIER> for each."
        )
    if roster.secondary == roster.balanced or roster.secondary == roster.maximum:
        log.warning(
            "FORMWRIGHT_MODELS_SECONDARY matches a primary-tier model; "
            "ensemble second opinions will not be independent."
        )


def _check_budget(settings: AppSettings) -> None:
    """Warn when the per-call timeout exceeds the optional-stage reserve."""
    if settings.llm.timeout > settings.pipeline.optional_stage_reserve_seconds * 4:
        log.warning(
            "FORMWRIGHT_LLM_TIMEOUT=%.0fs is large relative to the optional stage reserve "
            "(%.0fs); caller deadlines may be overrun by a single slow call.",
            settings.llm.timeout,
            settings.pipeline.optional_stage_reserve_seconds,
        )
