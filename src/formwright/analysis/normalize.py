"""Total normalization of untyped model JSON into typed analysis models.

Completion output is untrusted. Every value is checked field by field;
missing optional values get documented defaults, missing required values
raise :class:`MalformedOutputError`.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Mapping, Optional, Union

from formwright.exceptions import MalformedOutputError
from formwright.models import (
    Analysis,
    AnalysisMetadata,
    CandidateQuestion,
    ContentUnderstanding,
    DataPoint,
    FieldValidation,
    ValidationResult,
)
from formwright.registry.field_types import FieldTypeRegistry, default_registry

log = logging.getLogger(__name__)

DEFAULT_FIELD_TYPE = "short-answer"
_COMPLEXITIES = frozenset({"simple", "moderate", "complex"})
_IMPORTANCE = frozenset({"critical", "important", "optional"})


# ── Scalar coercion ──────────────────────────────────────────────────


def _get(raw: Mapping[str, Any], *keys: str) -> Any:
    """First present, non-None value among ``keys`` (camelCase and snake_case)."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, (int, float, bool)):
        return str(value)
    return default


def as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        items = [as_str(v) for v in value if not isinstance(v, (dict, list))]
        return [item for item in items if item]
    return []


def as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    return default


def is_finite_number(value: Any) -> bool:
    """True for ints and for floats that are neither NaN nor infinite."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def as_unit_float(value: Any, default: float = 0.5) -> float:
    """Coerce to a float clamped to [0, 1]; non-numeric or non-finite gives ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not is_finite_number(value):
        return default
    return float(min(1, max(0, value)))


def _as_non_negative_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, str) and value.strip().isdigit() and len(value.strip()) <= 18:
        return int(value.strip())
    if is_finite_number(value):
        return max(0, int(value))
    return default


def _as_answer(value: Any) -> Optional[Union[str, list[str]]]:
    if isinstance(value, (list, tuple)):
        answers = as_str_list(value)
        return answers or None
    answer = as_str(value)
    return answer or None


# ── Structured pieces ────────────────────────────────────────────────


def resolve_field_type(name: Any, registry: FieldTypeRegistry) -> str:
    """Registry key for a model-suggested type; unknown names fall back to short-answer."""
    resolved = registry.resolve(as_str(name))
    if resolved is None:
        if name:
            log.debug("Unknown suggested field type %r; using %s", name, DEFAULT_FIELD_TYPE)
        return DEFAULT_FIELD_TYPE
    return resolved


def _normalize_data_point(raw: Any) -> Optional[DataPoint]:
    if isinstance(raw, str) and raw.strip():
        return DataPoint(name=raw.strip())
    if not isinstance(raw, Mapping):
        return None
    name = as_str(_get(raw, "name", "label"))
    if not name:
        return None
    importance = as_str(raw.get("importance"), "important").lower()
    return DataPoint(
        name=name,
        description=as_str(raw.get("description")),
        already_present=as_bool(_get(raw, "alreadyPresent", "already_present"), False),
        data_type=as_str(_get(raw, "dataType", "data_type"), "text"),
        importance=importance if importance in _IMPORTANCE else "important",
        reasoning=as_str(raw.get("reasoning")),
    )


def normalize_understanding(raw: Any) -> ContentUnderstanding:
    if not isinstance(raw, Mapping):
        return ContentUnderstanding()
    data_points = [dp for dp in (_normalize_data_point(item) for item in raw.get("dataPoints") or raw.get("data_points") or []) if dp]
    return ContentUnderstanding(
        purpose=as_str(raw.get("purpose"), "Unknown purpose"),
        audience=as_str(raw.get("audience"), "General audience"),
        context=as_str(raw.get("context")),
        key_topics=as_str_list(_get(raw, "keyTopics", "key_topics")),
        data_points=data_points,
        tone=as_str(raw.get("tone"), "neutral"),
        is_quiz=as_bool(_get(raw, "isQuiz", "is_quiz"), False),
        is_survey=as_bool(_get(raw, "isSurvey", "is_survey"), False),
    )


def _as_bound(value: Any) -> Optional[float]:
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    return float(value) if is_finite_number(value) and abs(value) < 1e300 else None


def _as_length(value: Any) -> Optional[int]:
    if isinstance(value, str) and value.strip().isdigit() and len(value.strip()) <= 18:
        return int(value.strip())
    if is_finite_number(value) and value >= 0:
        return int(value)
    return None


def normalize_field_validation(raw: Any) -> Optional[FieldValidation]:
    """Input constraints from a ``validation`` object, or None when none are usable.

    Patterns that do not compile are dropped. Inverted ranges (``min > max``
    or ``minLength > maxLength``) drop both ends of that range.
    """
    if not isinstance(raw, Mapping):
        return None
    pattern = as_str(raw.get("pattern")) or None
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error:
            log.debug("Dropping validation pattern that does not compile: %r", pattern)
            pattern = None
    low, high = _as_bound(raw.get("min")), _as_bound(raw.get("max"))
    if low is not None and high is not None and low > high:
        low = high = None
    min_length = _as_length(_get(raw, "minLength", "min_length"))
    max_length = _as_length(_get(raw, "maxLength", "max_length"))
    if min_length is not None and max_length is not None and min_length > max_length:
        min_length = max_length = None
    if pattern is None and low is None and high is None and min_length is None and max_length is None:
        return None
    return FieldValidation(pattern=pattern, min=low, max=high, min_length=min_length, max_length=max_length)


def normalize_question(raw: Any, index: int, registry: FieldTypeRegistry) -> CandidateQuestion:
    if not isinstance(raw, Mapping):
        raise MalformedOutputError(f"Question {index} is not an object")
    text = as_str(_get(raw, "question", "label"))
    if not text:
        raise MalformedOutputError(f"Question {index} has no question text")

    suggested = _get(raw, "suggestedFieldType", "suggested_field_type", "fieldType", "type")
    return CandidateQuestion(
        question=text,
        rationale=as_str(raw.get("rationale")),
        suggested_field_type=resolve_field_type(suggested, registry),
        validation_suggestions=as_str(_get(raw, "validationSuggestions", "validation_suggestions")),
        validation=normalize_field_validation(raw.get("validation")),
        placeholder=as_str(raw.get("placeholder")) or None,
        help_text=as_str(_get(raw, "helpText", "help_text")) or None,
        options=as_str_list(raw.get("options")),
        required=as_bool(raw.get("required"), True),
        reasoning=as_str(raw.get("reasoning")),
        relates_to=as_str_list(_get(raw, "relatesTo", "relates_to")),
        category=as_str(raw.get("category"), "general"),
        correct_answer=_as_answer(_get(raw, "correctAnswer", "correct_answer")),
        explanation=as_str(raw.get("explanation")),
    )


def normalize_metadata(raw: Any, question_count: int) -> AnalysisMetadata:
    if not isinstance(raw, Mapping):
        raw = {}
    complexity = as_str(raw.get("complexity"), "moderate").lower()
    return AnalysisMetadata(
        content_type=as_str(_get(raw, "contentType", "content_type"), "general"),
        domain=as_str(raw.get("domain"), "general"),
        confidence=as_unit_float(raw.get("confidence")),
        complexity=complexity if complexity in _COMPLEXITIES else "moderate",
        estimated_field_count=_as_non_negative_int(
            _get(raw, "estimatedFieldCount", "estimated_field_count"), question_count
        ),
        suggestions=as_str_list(raw.get("suggestions")),
    )


# ── Public entry points ──────────────────────────────────────────────


def normalize_analysis(raw: Any, registry: FieldTypeRegistry | None = None) -> Analysis:
    """Map a parsed completion payload onto :class:`Analysis`.

    Raises:
        MalformedOutputError: payload is not an object, has no question list,
            or a question lacks text.
    """
    registry = registry or default_registry()
    if not isinstance(raw, Mapping):
        raise MalformedOutputError("Analysis payload is not a JSON object")

    items = raw.get("questions")
    if items is None:
        items = raw.get("fields")
    if not isinstance(items, list):
        raise MalformedOutputError("Analysis payload has no 'questions' list")

    questions = [normalize_question(item, i, registry) for i, item in enumerate(items)]
    return Analysis(
        understanding=normalize_understanding(raw.get("understanding")),
        questions=questions,
        metadata=normalize_metadata(raw.get("metadata"), len(questions)),
    )


def normalize_validation(raw: Any) -> ValidationResult:
    """Map a parsed validator payload onto :class:`ValidationResult`."""
    if not isinstance(raw, Mapping):
        raise MalformedOutputError("Validation payload is not a JSON object")
    verdict = _get(raw, "isValid", "is_valid")
    if verdict is None:
        raise MalformedOutputError("Validation payload has no 'isValid' verdict")
    if isinstance(verdict, str) and verdict.strip().lower() not in ("true", "false"):
        raise MalformedOutputError(f"Validation verdict {verdict!r} is not a boolean")
    if not isinstance(verdict, (bool, str)):
        raise MalformedOutputError(f"Validation verdict {verdict!r} is not a boolean")

    return ValidationResult(
        is_valid=as_bool(verdict, False),
        issues=as_str_list(raw.get("issues")),
        suggestions=as_str_list(raw.get("suggestions")),
        confidence=as_unit_float(raw.get("confidence")),
    )
