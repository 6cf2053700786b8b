"""Tests for final form synthesis."""

from __future__ import annotations

from typing import Any

import pytest

from formwright.analysis.normalize import normalize_analysis
from formwright.exceptions import MalformedOutputError, RegistryViolationError
from formwright.inference.client import CompletionClient
from formwright.models import Analysis, ContentUnderstanding, FieldValidation, GeneratedForm
from formwright.synthesis.form_synthesizer import FormSynthesizer, is_quiz_request, is_survey_request
from formwright.synthesis.quiz_options import QuizOptionGenerator
from tests.fakes.fake_inference import ScriptedFormBackend
from tests.fakes.form_payloads import (
    quiz_options_responder,
    survey_analysis,
    survey_synthesis,
    trivia_analysis,
    trivia_synthesis,
    with_raw_numbers,
)


def _synthesizer(settings, registry, script: dict[str, Any]) -> tuple[FormSynthesizer, ScriptedFormBackend]:
    backend = ScriptedFormBackend(script)
    client = CompletionClient(backend, settings.llm)
    return FormSynthesizer(client, registry, QuizOptionGenerator(client), passing_score=70), backend


async def _run(synth: FormSynthesizer, request: str, analysis: Analysis, count: int | None = None) -> GeneratedForm:
    return await synth.synthesize(request, analysis, model="m-balanced", quiz_model="m-fast", question_count=count)


def _assert_well_formed(form: GeneratedForm, registry) -> None:
    assert [f.order for f in form.fields] == list(range(len(form.fields)))
    assert len({f.id for f in form.fields}) == len(form.fields)
    assert all(f.type in registry for f in form.fields)


class TestRequestKind:
    def test_quiz_keywords(self):
        assert is_quiz_request("Trivia night questions")
        assert is_quiz_request("A short exam on fractions")
        assert not is_quiz_request("Customer feedback survey")
        assert not is_quiz_request("Attestation form")

    def test_analysis_flag_counts(self):
        analysis = Analysis(understanding=ContentUnderstanding(is_quiz=True))
        assert is_quiz_request("Questions about the solar system", analysis)

    def test_survey_keywords(self):
        assert is_survey_request("Employee questionnaire")
        assert not is_survey_request("Job application")


class TestSurveySynthesis:
    @pytest.mark.asyncio
    async def test_exact_count_survey(self, settings, registry):
        synth, _ = _synthesizer(settings, registry, {"synthesis": survey_synthesis()})
        analysis = normalize_analysis(survey_analysis(), registry)

        form = await _run(synth, "Customer feedback survey with 5 questions", analysis, count=5)

        _assert_well_formed(form, registry)
        assert form.title == "Customer Satisfaction Survey"
        assert len(form.fields) == 5
        assert form.quiz_mode is None
        assert all(f.quiz_config is None for f in form.fields)
        assert form.fields[2].options == ["Web app", "Mobile app", "API"]
        wire = form.to_wire()
        assert "quizMode" not in wire
        assert all("quizConfig" not in f for f in wire["fields"])

    @pytest.mark.asyncio
    async def test_short_output_topped_up_from_analysis(self, settings, registry):
        payload = survey_synthesis()
        payload["fields"] = payload["fields"][:3]
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})
        analysis = normalize_analysis(survey_analysis(), registry)

        form = await _run(synth, "Feedback survey", analysis, count=5)

        _assert_well_formed(form, registry)
        assert [f.id for f in form.fields] == ["q1", "q2", "q3", "field_3", "field_4"]
        assert form.fields[4].type == "email"

    @pytest.mark.asyncio
    async def test_long_output_truncated(self, settings, registry):
        synth, _ = _synthesizer(settings, registry, {"synthesis": survey_synthesis()})
        form = await _run(synth, "Feedback survey", normalize_analysis(survey_analysis(), registry), count=3)
        assert len(form.fields) == 3

    @pytest.mark.asyncio
    async def test_unfillable_count_raises(self, settings, registry):
        payload = {"title": "T", "fields": [{"label": "Name", "type": "short-answer"}]}
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})
        analysis = normalize_analysis({"questions": [{"question": "Your name"}]}, registry)

        with pytest.raises(MalformedOutputError, match="exactly 3"):
            await _run(synth, "Signup form", analysis, count=3)

    @pytest.mark.asyncio
    async def test_empty_output_falls_back_to_candidates(self, settings, registry):
        synth, _ = _synthesizer(settings, registry, {"synthesis": {"title": "Signup"}})
        analysis = normalize_analysis({"questions": [{"question": "Your email", "suggestedFieldType": "email"}]}, registry)

        form = await _run(synth, "Signup form", analysis)
        assert [(f.label, f.type) for f in form.fields] == [("Your email", "email")]


class TestFieldTypes:
    @pytest.mark.asyncio
    async def test_unknown_type_is_registry_violation(self, settings, registry):
        payload = {"title": "T", "fields": [{"id": "sig", "label": "Sign here", "type": "signature-pad"}]}
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})

        with pytest.raises(RegistryViolationError) as exc_info:
            await _run(synth, "Consent form", Analysis())
        assert exc_info.value.field_type == "signature-pad"
        assert exc_info.value.field_id == "sig"

    @pytest.mark.asyncio
    async def test_missing_type_and_aliases(self, settings, registry):
        payload = {
            "title": "T",
            "fields": [
                {"label": "Name"},
                {"label": "Plan", "type": "radio", "options": ["Free", "Pro"]},
                {"label": "Nickname", "type": "short-answer", "options": ["ignored"], "placeholder": "Ace"},
            ],
        }
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})

        form = await _run(synth, "Signup form", Analysis())

        assert [f.type for f in form.fields] == ["short-answer", "multiple-choice", "short-answer"]
        assert form.fields[1].options == ["Free", "Pro"]
        assert form.fields[2].options is None
        assert form.fields[2].placeholder == "Ace"

    @pytest.mark.asyncio
    async def test_ids_unique(self, settings, registry):
        payload = {
            "title": "T",
            "fields": [
                {"id": "name", "label": "First name"},
                {"id": "name", "label": "Last name"},
                {"id": "1 bad id", "label": "Age", "type": "number"},
            ],
        }
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})
        form = await _run(synth, "Signup form", Analysis())
        assert [f.id for f in form.fields] == ["name", "name_2", "field_2"]

    @pytest.mark.asyncio
    async def test_title_fallbacks(self, settings, registry):
        synth, _ = _synthesizer(settings, registry, {"synthesis": {"fields": [{"label": "Name"}]}})
        analysis = Analysis(understanding=ContentUnderstanding(purpose="Event signup"))
        assert (await _run(synth, "Signup", analysis)).title == "Event signup"
        assert (await _run(synth, "Signup", Analysis())).title == "Untitled Form"


class TestFieldHints:
    @pytest.mark.asyncio
    async def test_validation_and_relations_from_payload(self, settings, registry):
        payload = {
            "title": "Membership",
            "fields": [
                {"id": "age", "label": "Your age", "type": "number", "validation": {"min": 18, "max": 120}},
                {"id": "guardian", "label": "Guardian name", "relatesTo": ["age", "Preferred pronouns"]},
                {"id": "plan", "label": "Plan", "type": "multiple-choice", "options": ["Basic", "Plus"],
                 "validation": {"minLength": 1}},
            ],
        }
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})

        form = await _run(synth, "Membership signup", Analysis())

        age, guardian, plan = form.fields
        assert age.validation == FieldValidation(min=18, max=120)
        assert age.relates_to is None
        assert guardian.relates_to == ["age"]
        assert plan.validation is None
        wire = form.to_wire()
        assert wire["fields"][0]["validation"] == {"min": 18.0, "max": 120.0}
        assert wire["fields"][1]["relatesTo"] == ["age"]
        assert "validation" not in wire["fields"][2]

    @pytest.mark.asyncio
    async def test_hints_borrowed_from_analysis(self, settings, registry):
        analysis = normalize_analysis(
            {
                "questions": [
                    {"question": "What is your email address?", "suggestedFieldType": "email",
                     "validation": {"maxLength": 254}},
                    {"question": "Company name", "relatesTo": ["What is your email address?"]},
                ]
            },
            registry,
        )
        payload = {
            "title": "Contact",
            "fields": [
                {"id": "email", "label": "What is your email address?", "type": "email"},
                {"id": "company", "label": "Company name"},
            ],
        }
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})

        form = await _run(synth, "Contact form", analysis)

        assert form.fields[0].validation == FieldValidation(max_length=254)
        assert form.fields[1].relates_to == ["email"]

    def test_schema_asks_for_hints(self, settings, registry):
        synth, _ = _synthesizer(settings, registry, {})
        prompt = synth.build_system_prompt(quiz=False, survey=False)
        assert '"validation": {"pattern"' in prompt
        assert '"relatesTo"' in prompt


class TestQuizSynthesis:
    @pytest.mark.asyncio
    async def test_quiz_with_answers(self, settings, registry):
        synth, backend = _synthesizer(settings, registry, {"synthesis": trivia_synthesis()})
        analysis = normalize_analysis(trivia_analysis(), registry)

        form = await _run(synth, "General knowledge trivia quiz, 10 questions", analysis, count=10)

        _assert_well_formed(form, registry)
        assert len(form.fields) == 10
        assert form.quiz_mode is not None and form.quiz_mode.enabled
        assert form.quiz_mode.passing_score == 60
        for f in form.fields:
            assert registry.is_choice(f.type)
            assert f.quiz_config is not None
            assert f.quiz_config.correct_answer in f.options
        assert backend.stages_called() == ["synthesis"]

    @pytest.mark.asyncio
    async def test_missing_options_generated_in_one_batch(self, settings, registry):
        synth, backend = _synthesizer(
            settings,
            registry,
            {"synthesis": trivia_synthesis(with_answers=False), "quiz_options": quiz_options_responder},
        )
        analysis = normalize_analysis(trivia_analysis(with_answers=False), registry)

        form = await _run(synth, "Trivia quiz", analysis, count=10)

        assert backend.stages_called() == ["synthesis", "quiz_options"]
        assert backend.calls_for("quiz_options")[0]["model"] == "m-fast"
        assert form.fields[0].quiz_config.correct_answer == "Paris"
        for f in form.fields:
            assert f.quiz_config.correct_answer in f.options

    @pytest.mark.asyncio
    async def test_answers_borrowed_from_analysis(self, settings, registry):
        synth, backend = _synthesizer(settings, registry, {"synthesis": trivia_synthesis(with_answers=False)})
        analysis = normalize_analysis(trivia_analysis(with_answers=True), registry)

        form = await _run(synth, "Trivia quiz", analysis, count=10)

        assert backend.stages_called() == ["synthesis"]
        assert form.fields[1].quiz_config.correct_answer == "Mars"

    @pytest.mark.asyncio
    async def test_types_coerced_and_answers_reconciled(self, settings, registry):
        payload = {
            "title": "Capitals",
            "quizMode": {"enabled": True},
            "fields": [
                {"label": "Capital of Italy?", "type": "short-answer", "placeholder": "City",
                 "options": ["Rome", "Milan"], "quizConfig": {"correctAnswer": "rome", "points": "2"}},
                {"label": "Capital of Spain?", "type": "dropdown", "options": ["Seville", "Bilbao"],
                 "quizConfig": {"correctAnswer": "Madrid"}},
                {"label": "Which are in Europe?", "type": "multiple-choice", "options": ["Oslo", "Lima", "Rome"],
                 "quizConfig": {"correctAnswer": ["Oslo", "Rome"]}},
                {"label": "Part 2", "type": "heading"},
            ],
        }
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})

        form = await _run(synth, "Geography test", Analysis())

        assert [f.type for f in form.fields] == ["multiple-choice", "dropdown", "checkboxes"]
        first, second, third = form.fields
        assert first.quiz_config.correct_answer == "Rome"
        assert first.quiz_config.points == 2
        assert first.placeholder is None
        assert second.options == ["Seville", "Bilbao", "Madrid"]
        assert third.quiz_config.correct_answer == ["Oslo", "Rome"]

    @pytest.mark.asyncio
    async def test_quiz_mode_from_payload(self, settings, registry):
        payload = trivia_synthesis()
        payload["fields"] = payload["fields"][:2]
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})

        form = await _run(synth, "Questions about geography", Analysis())

        assert form.quiz_mode is not None
        assert form.to_wire()["quizMode"]["passingScore"] == 60

    @pytest.mark.asyncio
    async def test_non_finite_points_and_passing_score(self, settings, registry):
        payload = trivia_synthesis()
        payload["fields"] = payload["fields"][:4]
        payload["quizMode"]["passingScore"] = "__PASS__"
        for f, points in zip(payload["fields"], ["__NAN__", "__BIG__", "Infinity", 10**12]):
            f["quizConfig"]["points"] = points
        content = with_raw_numbers(payload, PASS="1e999", NAN="NaN", BIG="-1e400")
        synth, _ = _synthesizer(settings, registry, {"synthesis": content})

        form = await _run(synth, "Trivia quiz", Analysis())

        assert [f.quiz_config.points for f in form.fields] == [1, 1, 1, 10**12]
        assert form.quiz_mode.passing_score == 70

    @pytest.mark.asyncio
    async def test_oversized_passing_score_clamped(self, settings, registry):
        payload = trivia_synthesis()
        payload["fields"] = payload["fields"][:2]
        payload["quizMode"]["passingScore"] = 10**30
        synth, _ = _synthesizer(settings, registry, {"synthesis": payload})

        form = await _run(synth, "Trivia quiz", Analysis())

        assert form.quiz_mode.passing_score == 100

    def test_system_prompt_modes(self, settings, registry):
        synth, _ = _synthesizer(settings, registry, {})
        quiz_prompt = synth.build_system_prompt(quiz=True, survey=False)
        survey_prompt = synth.build_system_prompt(quiz=False, survey=True)

        assert '"quizMode": {"enabled": true' in quiz_prompt
        assert '"passingScore": 70' in quiz_prompt
        assert '"quizMode": {' not in survey_prompt
        assert '"heading"' in survey_prompt
        assert '"heading"' not in quiz_prompt
