"""Ensemble second opinion and consensus building.

Two questions count as the *same field* when their normalized labels are
equal or one contains the other (:func:`labels_match`). This is an
approximate lexical match, not semantic equivalence: reordered wording
("address email" vs "email address") does not match. It lives behind one
function so a token-overlap or embedding matcher can replace it without
touching :func:`build_consensus`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from formwright.analysis.normalize import as_str, normalize_analysis
from formwright.inference.client import CompletionClient
from formwright.models import Analysis, CandidateQuestion, ConflictDetail, ConsensusResult
from formwright.prompts import get_prompt
from formwright.prompts.blocks import (
    analysis_json,
    analysis_schema,
    source_material_block,
    user_context_block,
)
from formwright.registry.field_types import FieldTypeRegistry

log = logging.getLogger(__name__)

AGREE_APPROACH = "Models largely agree - use primary analysis"
DISAGREE_APPROACH = "Models disagree - review both carefully"
DEFAULT_AGREEMENT_THRESHOLD = 0.7

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_MIN_CONTAINMENT_LENGTH = 3
_STOP_WORDS = frozenset(
    {
        "a", "an", "and", "any", "are", "do", "does", "for", "how", "in", "is", "it",
        "of", "on", "or", "other", "please", "the", "this", "to", "what", "which",
        "who", "why", "you", "your", "yes", "no",
    }
)


def normalize_label(text: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    return _WHITESPACE.sub(" ", _PUNCTUATION.sub("", text.lower())).strip()


def _is_generic(label: str) -> bool:
    if len(label) < _MIN_CONTAINMENT_LENGTH:
        return True
    return all(token in _STOP_WORDS for token in label.split())


def labels_match(first: str, second: str) -> bool:
    """Approximate "same field" test on two question labels.

    Equal normalized labels always match. Containment only counts when the
    shorter label is not generic (at least 3 characters and not made only
    of stop-words), so "Other?" or "Why?" does not match every question
    containing those words while "Email" still matches "What is your email?".
    """
    a, b = normalize_label(first), normalize_label(second)
    if not a or not b:
        return False
    if a == b:
        return True
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if _is_generic(shorter):
        return False
    return shorter in longer


def find_match(question: CandidateQuestion, pool: Iterable[CandidateQuestion]) -> Optional[CandidateQuestion]:
    for candidate in pool:
        if labels_match(question.question, candidate.question):
            return candidate
    return None


def agreement_rate(agreed: int, total: int) -> float:
    """``agreed / total`` in [0, 1]; exactly 0.0 when ``total`` is 0."""
    if total <= 0:
        return 0.0
    return min(1.0, max(0.0, agreed / total))


def parse_disagreements(raw: Any) -> list[ConflictDetail]:
    """Model-flagged disagreements from a second-opinion payload."""
    if not isinstance(raw, list):
        return []
    conflicts: list[ConflictDetail] = []
    for item in raw:
        if isinstance(item, str) and item.strip():
            conflicts.append(ConflictDetail(field="general", model2_opinion=item.strip()))
            continue
        if not isinstance(item, Mapping):
            continue
        conflicts.append(
            ConflictDetail(
                field=as_str(item.get("field"), "general"),
                model1_opinion=as_str(item.get("otherOpinion") or item.get("model1Opinion")),
                model2_opinion=as_str(item.get("yourOpinion") or item.get("model2Opinion")),
                resolution=as_str(item.get("resolution")),
            )
        )
    return conflicts


def build_consensus(
    primary: Analysis,
    secondary: Analysis,
    flagged: Sequence[ConflictDetail] = (),
    *,
    threshold: float = DEFAULT_AGREEMENT_THRESHOLD,
) -> ConsensusResult:
    """Reconcile two analyses of the same request."""
    agreed: list[CandidateQuestion] = []
    conflicts: list[ConflictDetail] = []

    for question in primary.questions:
        match = find_match(question, secondary.questions)
        if match is None:
            continue
        agreed.append(question)
        if match.suggested_field_type != question.suggested_field_type:
            conflicts.append(
                ConflictDetail(
                    field=question.question,
                    model1_opinion=question.suggested_field_type,
                    model2_opinion=match.suggested_field_type,
                    resolution=f"Keep {question.suggested_field_type} from primary analysis",
                )
            )

    conflicts.extend(flagged)
    rate = agreement_rate(len(agreed), len(primary.questions))
    return ConsensusResult(
        agreed_fields=agreed,
        conflicts=conflicts,
        recommended_approach=AGREE_APPROACH if rate > threshold else DISAGREE_APPROACH,
        confidence_score=rate,
    )


@dataclass(frozen=True)
class EnsembleOutcome:
    consensus: ConsensusResult
    secondary: Analysis
    model: str


class EnsembleBuilder:
    """Asks an architecturally different model for an independent second opinion."""

    def __init__(
        self,
        client: CompletionClient,
        registry: FieldTypeRegistry,
        *,
        temperature: float = 0.3,
        reference_max_chars: int = 8000,
        agreement_threshold: float = DEFAULT_AGREEMENT_THRESHOLD,
    ) -> None:
        self._client = client
        self._registry = registry
        self._temperature = temperature
        self._reference_max_chars = reference_max_chars
        self._threshold = agreement_threshold
        self._system_prompt = get_prompt("ensemble", "SECOND_OPINION_SYSTEM_PROMPT").format(
            field_type_reference=registry.build_reference(),
            analysis_schema=analysis_schema(),
        )

    async def review(
        self,
        request: str,
        primary: Analysis,
        *,
        model: str,
        user_context: Optional[str] = None,
        reference_data: Optional[str] = None,
    ) -> EnsembleOutcome:
        log.info("Getting second opinion from %s", model)
        user_prompt = get_prompt("ensemble", "SECOND_OPINION_PROMPT").format(
            request=request,
            user_context_block=user_context_block(user_context),
            reference_block=source_material_block(reference_data, self._reference_max_chars),
            primary_analysis=analysis_json(primary),
        )
        raw = await self._client.complete_json(
            model=model,
            system=self._system_prompt,
            user=user_prompt,
            temperature=self._temperature,
        )
        secondary = normalize_analysis(raw, self._registry)
        consensus = build_consensus(
            primary,
            secondary,
            parse_disagreements(raw.get("disagreements")),
            threshold=self._threshold,
        )
        log.info(
            "Consensus: %.0f%% agreement, %d conflicts",
            consensus.confidence_score * 100,
            len(consensus.conflicts),
        )
        return EnsembleOutcome(consensus=consensus, secondary=secondary, model=model)

