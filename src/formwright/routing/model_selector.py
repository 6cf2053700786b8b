"""Model roster routing: complexity tier and pipeline role to model id."""

from __future__ import annotations

import logging
from typing import Literal, Optional

from formwright.core.config import ModelRosterConfig
from formwright.exceptions import ConfigurationError
from formwright.models import Complexity

log = logging.getLogger(__name__)

Role = Literal["validator", "refiner", "secondary", "synthesis", "quiz_options"]

_TIER_BY_COMPLEXITY: dict[str, str] = {
    "simple": "fast",
    "moderate": "balanced",
    "complex": "maximum",
}

_TIER_BY_ROLE: dict[str, str] = {
    "validator": "fast",
    "refiner": "maximum",
    "secondary": "secondary",
    "synthesis": "balanced",
    "quiz_options": "fast",
}


class ModelSelector:
    """Maps complexity tiers and stage roles onto the configured roster.

    Args:
        roster: The fixed model roster.
        force_tier: When set, every primary selection uses this tier
            regardless of detected complexity.
    """

    def __init__(self, roster: ModelRosterConfig, *, force_tier: Optional[Complexity] = None) -> None:
        self._roster = roster
        self._force_tier = force_tier

    def _model_for_tier(self, tier: str) -> str:
        model = getattr(self._roster, tier, "") or ""
        if not model.strip():
            raise ConfigurationError(f"No model configured for roster tier '{tier}'")
        return model

    def effective_complexity(self, detected: Complexity, override: Optional[Complexity] = None) -> Complexity:
        """Apply the per-request override, then the configured force tier."""
        return override or self._force_tier or detected

    def select_primary(self, complexity: Complexity) -> str:
        """Model for the primary analysis at the given tier."""
        try:
            tier = _TIER_BY_COMPLEXITY[complexity]
        except KeyError:
            raise ValueError(f"Unknown complexity tier: {complexity!r}") from None
        model = self._model_for_tier(tier)
        log.info("Selected %s for primary analysis (complexity: %s)", model, complexity)
        return model

    def for_role(self, role: Role) -> str:
        """Model for a fixed-role stage (validator, refiner, ensemble, ...)."""
        try:
            tier = _TIER_BY_ROLE[role]
        except KeyError:
            raise ValueError(f"Unknown pipeline role: {role!r}") from None
        return self._model_for_tier(tier)

    def roster(self) -> dict[str, str]:
        return {tier: getattr(self._roster, tier) for tier in ("fast", "balanced", "maximum", "secondary")}
