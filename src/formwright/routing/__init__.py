"""Request routing: complexity tiers, model selection, question counts."""

from __future__ import annotations

from formwright.routing.complexity import classify_complexity
from formwright.routing.model_selector import ModelSelector
from formwright.routing.question_count import extract_question_count

__all__ = ["ModelSelector", "classify_complexity", "extract_question_count"]
