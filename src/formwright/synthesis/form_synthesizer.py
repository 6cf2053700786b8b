"""Form synthesizer: turns the best analysis into the final :class:`GeneratedForm`.

Output guarantees:

- every ``field.type`` is a registry key (unknown types raise
  :class:`RegistryViolationError`);
- with a requested count, ``len(fields) == count``;
- ``order`` runs 0..n-1 and ids are unique;
- in quiz mode every field is a choice type with a non-empty
  ``quizConfig.correctAnswer`` found among its options, and
  ``quizMode.enabled`` is true;
- ``relatesTo`` only names ids of other fields in the same form.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from formwright.analysis.consensus import find_match, labels_match
from formwright.analysis.normalize import (
    as_bool,
    as_str,
    as_str_list,
    is_finite_number,
    normalize_field_validation,
)
from formwright.exceptions import MalformedOutputError, RegistryViolationError
from formwright.inference.client import CompletionClient
from formwright.models import (
    Analysis,
    CandidateQuestion,
    FieldValidation,
    GeneratedField,
    GeneratedForm,
    QuizConfig,
    QuizMode,
)
from formwright.prompts import get_prompt
from formwright.prompts.blocks import analysis_json, source_material_block
from formwright.registry.field_types import FieldTypeRegistry
from formwright.synthesis.quiz_options import QuizOptionGenerator, reconcile_answer

log = logging.getLogger(__name__)

_QUIZ_KEYWORDS = re.compile(r"\b(quiz|quizzes|test|tests|exam|exams|trivia)\b", re.IGNORECASE)
_SURVEY_KEYWORDS = re.compile(r"\b(survey|surveys|questionnaire|questionnaires|feedback|poll)\b", re.IGNORECASE)
_SLUG = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")

DEFAULT_FIELD_TYPE = "short-answer"
UNTITLED = "Untitled Form"


def is_quiz_request(request: str, analysis: Optional[Analysis] = None) -> bool:
    """Knowledge-assessment detection on the request text, never on reference data."""
    if analysis is not None and analysis.understanding.is_quiz:
        return True
    return bool(_QUIZ_KEYWORDS.search(request))


def is_survey_request(request: str, analysis: Optional[Analysis] = None) -> bool:
    if analysis is not None and analysis.understanding.is_survey:
        return True
    return bool(_SURVEY_KEYWORDS.search(request))


@dataclass
class _Draft:
    """Mutable working copy of a field while the synthesizer assembles it."""

    label: str
    type_name: str
    required: bool = True
    options: list[str] = field(default_factory=list)
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    validation: Optional[FieldValidation] = None
    relates_to: list[str] = field(default_factory=list)
    raw_id: str = ""
    correct_answer: Optional[Union[str, list[str]]] = None
    points: int = 1
    explanation: str = ""

    @classmethod
    def from_candidate(cls, question: CandidateQuestion) -> _Draft:
        return cls(
            label=question.question,
            type_name=question.suggested_field_type,
            required=question.required,
            options=list(question.options),
            placeholder=question.placeholder,
            help_text=question.help_text,
            validation=question.validation,
            relates_to=list(question.relates_to),
            correct_answer=question.correct_answer,
            explanation=question.explanation,
        )

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> Optional[_Draft]:
        label = as_str(raw.get("label")) or as_str(raw.get("question"))
        if not label:
            return None
        quiz = raw.get("quizConfig") or raw.get("quiz_config")
        quiz = quiz if isinstance(quiz, Mapping) else {}
        answer = quiz.get("correctAnswer", raw.get("correctAnswer"))
        return cls(
            label=label,
            type_name=as_str(raw.get("type")) or as_str(raw.get("fieldType")),
            required=as_bool(raw.get("required"), True),
            options=as_str_list(raw.get("options")),
            placeholder=as_str(raw.get("placeholder")) or None,
            help_text=as_str(raw.get("helpText")) or None,
            validation=normalize_field_validation(raw.get("validation")),
            relates_to=as_str_list(raw.get("relatesTo")),
            raw_id=as_str(raw.get("id")),
            correct_answer=_coerce_answer(answer),
            points=_coerce_points(quiz.get("points")),
            explanation=as_str(quiz.get("explanation", raw.get("explanation"))),
        )


def _coerce_answer(value: Any) -> Optional[Union[str, list[str]]]:
    if isinstance(value, list):
        answers = as_str_list(value)
        if len(answers) == 1:
            return answers[0]
        return answers or None
    return as_str(value) or None


def _coerce_points(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 1
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 1
    if is_finite_number(value):
        return max(0, int(value))
    return 1


def _quiz_mode(raw: Any, default_passing_score: int) -> QuizMode:
    raw = raw if isinstance(raw, Mapping) else {}
    passing = raw.get("passingScore")
    if is_finite_number(passing):
        passing_score = int(min(100, max(0, passing)))
    else:
        passing_score = default_passing_score
    return QuizMode(
        enabled=True,
        show_score_immediately=as_bool(raw.get("showScoreImmediately"), True),
        show_correct_answers=as_bool(raw.get("showCorrectAnswers"), True),
        show_explanations=as_bool(raw.get("showExplanations"), True),
        passing_score=passing_score,
    )


def borrow_hints(drafts: list[_Draft], analysis: Analysis) -> None:
    """Fill missing validation and relation hints from the matching analysis question."""
    for draft in drafts:
        if draft.validation is not None and draft.relates_to:
            continue
        match = find_match(CandidateQuestion(question=draft.label), analysis.questions)
        if match is None:
            continue
        draft.validation = draft.validation or match.validation
        draft.relates_to = draft.relates_to or list(match.relates_to)


def resolve_relations(drafts: list[_Draft], ids: list[str]) -> list[Optional[list[str]]]:
    """Map each draft's relation hints to the ids of other fields in the form.

    A hint names a field by id or by label; hints naming no other field are dropped.
    """
    resolved: list[Optional[list[str]]] = []
    for i, draft in enumerate(drafts):
        targets: list[str] = []
        for hint in draft.relates_to:
            for j, other in enumerate(drafts):
                if j == i:
                    continue
                if hint == ids[j] or labels_match(hint, other.label):
                    if ids[j] not in targets:
                        targets.append(ids[j])
                    break
        resolved.append(targets or None)
    return resolved


def assign_ids(drafts: list[_Draft]) -> list[str]:
    """Model ids when they are valid slugs, else ``field_<order>``; duplicates suffixed."""
    seen: set[str] = set()
    ids: list[str] = []
    for order, draft in enumerate(drafts):
        base = draft.raw_id if _SLUG.match(draft.raw_id) else f"field_{order}"
        candidate = base
        suffix = 2
        while candidate in seen:
            candidate = f"{base}_{suffix}"
            suffix += 1
        seen.add(candidate)
        ids.append(candidate)
    return ids


class FormSynthesizer:
    """Terminal pipeline stage.

    Args:
        client: Completion client.
        registry: Field type registry every output type must belong to.
        quiz_options: Generator used for quiz questions lacking options or answers.
        temperature: Sampling temperature for the synthesis call.
        reference_max_chars: Cap on reference material in the prompt.
        passing_score: Default ``quizMode.passingScore``.
    """

    def __init__(
        self,
        client: CompletionClient,
        registry: FieldTypeRegistry,
        quiz_options: QuizOptionGenerator,
        *,
        temperature: float = 0.25,
        reference_max_chars: int = 8000,
        passing_score: int = 70,
    ) -> None:
        self._client = client
        self._registry = registry
        self._quiz_options = quiz_options
        self._temperature = temperature
        self._reference_max_chars = reference_max_chars
        self._passing_score = passing_score

    # ── Prompt assembly ──────────────────────────────────────────────

    def build_system_prompt(self, *, quiz: bool, survey: bool) -> str:
        if quiz:
            rules = get_prompt("synthesis", "QUIZ_MODE_RULES")
            quiz_mode_schema = get_prompt("synthesis", "QUIZ_MODE_SCHEMA").format(passing_score=self._passing_score)
            quiz_config_schema = get_prompt("synthesis", "QUIZ_CONFIG_SCHEMA")
        else:
            rules = get_prompt("synthesis", "SURVEY_MODE_RULES" if survey else "FORM_MODE_RULES")
            quiz_mode_schema = ""
            quiz_config_schema = ""
        return get_prompt("synthesis", "SYNTHESIS_SYSTEM_PROMPT").format(
            field_type_reference=self._registry.build_reference(include_display=not quiz),
            mode_rules=rules,
            quiz_mode_schema=quiz_mode_schema,
            quiz_config_schema=quiz_config_schema,
        )

    def build_user_prompt(
        self,
        request: str,
        analysis: Analysis,
        *,
        question_count: Optional[int],
        reference_data: Optional[str],
    ) -> str:
        count_instruction = ""
        if question_count is not None:
            count_instruction = get_prompt("synthesis", "EXACT_COUNT_INSTRUCTION").format(count=question_count) + "\n"
        return get_prompt("synthesis", "SYNTHESIS_PROMPT").format(
            request=request,
            reference_block=source_material_block(reference_data, self._reference_max_chars),
            analysis=analysis_json(analysis),
            count_instruction=count_instruction,
        )

    # ── Public entry point ───────────────────────────────────────────

    async def synthesize(
        self,
        request: str,
        analysis: Analysis,
        *,
        model: str,
        quiz_model: str,
        question_count: Optional[int] = None,
        reference_data: Optional[str] = None,
    ) -> GeneratedForm:
        quiz = is_quiz_request(request, analysis)
        survey = not quiz and is_survey_request(request, analysis)

        raw = await self._client.complete_json(
            model=model,
            system=self.build_system_prompt(quiz=quiz, survey=survey),
            user=self.build_user_prompt(
                request,
                analysis,
                question_count=question_count,
                reference_data=reference_data,
            ),
            temperature=self._temperature,
        )

        raw_quiz_mode = raw.get("quizMode")
        if isinstance(raw_quiz_mode, Mapping) and as_bool(raw_quiz_mode.get("enabled"), False):
            quiz = True

        drafts = self._collect_drafts(raw, analysis, question_count, quiz=quiz)
        borrow_hints(drafts, analysis)
        types = [self._resolve_type(draft, order) for order, draft in enumerate(drafts)]

        if quiz:
            await self._prepare_quiz(drafts, types, analysis, request, quiz_model)

        fields = self._build_fields(drafts, types, quiz=quiz)
        title = as_str(raw.get("title")) or self._fallback_title(analysis)
        form = GeneratedForm(
            title=title,
            fields=fields,
            quiz_mode=_quiz_mode(raw_quiz_mode, self._passing_score) if quiz else None,
        )
        log.info("Synthesized form with %d fields (quiz=%s)", len(fields), quiz)
        return form

    # ── Field sourcing ───────────────────────────────────────────────

    def _collect_drafts(
        self,
        raw: Mapping[str, Any],
        analysis: Analysis,
        count: Optional[int],
        *,
        quiz: bool,
    ) -> list[_Draft]:
        items = raw.get("fields")
        drafts: list[_Draft] = []
        if isinstance(items, list):
            for item in items:
                draft = _Draft.from_payload(item) if isinstance(item, Mapping) else None
                if draft is None:
                    log.debug("Dropping synthesized field without a label")
                    continue
                drafts.append(draft)

        candidates = [_Draft.from_candidate(q) for q in analysis.questions]
        if quiz:
            drafts = [d for d in drafts if self._is_input_type(d.type_name)]
            candidates = [c for c in candidates if self._is_input_type(c.type_name)]

        if count is None:
            if not drafts:
                drafts = candidates
        elif len(drafts) > count:
            drafts = drafts[:count]
        elif len(drafts) < count:
            for candidate in candidates:
                if len(drafts) >= count:
                    break
                if any(labels_match(candidate.label, d.label) for d in drafts):
                    continue
                drafts.append(candidate)
            if len(drafts) < count:
                raise MalformedOutputError(
                    f"Synthesis produced {len(drafts)} fields but exactly {count} were requested",
                    raw_response=json.dumps(raw)[:2000],
                )

        if not drafts:
            raise MalformedOutputError("Synthesis produced no fields", raw_response=json.dumps(raw)[:2000])
        return drafts

    def _is_input_type(self, type_name: str) -> bool:
        resolved = self._registry.resolve(type_name)
        return resolved is None or self._registry.get(resolved).is_input

    def _resolve_type(self, draft: _Draft, order: int) -> str:
        if not draft.type_name:
            return DEFAULT_FIELD_TYPE
        resolved = self._registry.resolve(draft.type_name)
        if resolved is None:
            raise RegistryViolationError(draft.type_name, draft.raw_id or f"field_{order}")
        return resolved

    # ── Quiz handling ────────────────────────────────────────────────

    async def _prepare_quiz(
        self,
        drafts: list[_Draft],
        types: list[str],
        analysis: Analysis,
        request: str,
        quiz_model: str,
    ) -> None:
        """Coerce types to choice types and complete options and answers in place."""
        for draft in drafts:
            if draft.correct_answer is None:
                match = find_match(CandidateQuestion(question=draft.label), analysis.questions)
                if match is not None and match.correct_answer is not None:
                    draft.correct_answer = _coerce_answer(match.correct_answer)
                    draft.explanation = draft.explanation or match.explanation
                    if not draft.options:
                        draft.options = list(match.options)

        pending = [i for i, d in enumerate(drafts) if len(d.options) < 2 or d.correct_answer is None]
        if pending:
            topic = ", ".join(analysis.understanding.key_topics) or analysis.understanding.context or request
            generated = await self._quiz_options.generate(
                [drafts[i].label for i in pending],
                topic=topic,
                model=quiz_model,
            )
            for i, options in zip(pending, generated):
                drafts[i].options = list(options.options)
                drafts[i].correct_answer = options.correct_answer
                drafts[i].explanation = drafts[i].explanation or options.explanation

        for i, draft in enumerate(drafts):
            assert draft.correct_answer is not None
            multi = isinstance(draft.correct_answer, list)
            if not self._registry.is_choice(types[i]):
                types[i] = "checkboxes" if multi else "multiple-choice"
            elif multi and not self._registry.get(types[i]).allows_multiple:
                types[i] = "checkboxes"
            draft.options, draft.correct_answer = reconcile_answer(draft.options, draft.correct_answer)
            draft.placeholder = None
            draft.help_text = None

    # ── Assembly ─────────────────────────────────────────────────────

    def _build_fields(self, drafts: list[_Draft], types: list[str], *, quiz: bool) -> list[GeneratedField]:
        ids = assign_ids(drafts)
        relations = resolve_relations(drafts, ids)
        fields: list[GeneratedField] = []
        for order, (draft, type_name, field_id) in enumerate(zip(drafts, types, ids)):
            descriptor = self._registry.get(type_name)
            keep_options = descriptor.requires_options or descriptor.is_choice
            quiz_config = None
            if quiz:
                assert draft.correct_answer is not None
                quiz_config = QuizConfig(
                    correct_answer=draft.correct_answer,
                    points=draft.points,
                    explanation=draft.explanation,
                )
            fields.append(
                GeneratedField(
                    id=field_id,
                    label=draft.label,
                    type=type_name,
                    required=draft.required,
                    options=draft.options if keep_options and draft.options else None,
                    placeholder=draft.placeholder if descriptor.is_input else None,
                    help_text=draft.help_text,
                    validation=draft.validation if descriptor.is_input and not descriptor.is_choice else None,
                    relates_to=relations[order],
                    quiz_config=quiz_config,
                    order=order,
                )
            )
        return fields

    @staticmethod
    def _fallback_title(analysis: Analysis) -> str:
        purpose = analysis.understanding.purpose
        if purpose and purpose != "Unknown purpose" and len(purpose) <= 80:
            return purpose
        return UNTITLED
