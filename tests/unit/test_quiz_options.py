"""Tests for quiz answer-option generation."""

from __future__ import annotations

import pytest

from formwright.exceptions import MalformedOutputError
from formwright.inference.client import CompletionClient
from formwright.synthesis.quiz_options import QuizOptionGenerator, reconcile_answer
from tests.fakes.fake_inference import ScriptedFormBackend


class TestReconcileAnswer:
    def test_case_insensitive_match_takes_option_spelling(self):
        assert reconcile_answer(["Paris", "Rome"], "paris") == (["Paris", "Rome"], "Paris")

    def test_missing_answer_appended(self):
        options, answer = reconcile_answer(["London", "Rome"], "Paris")
        assert options == ["London", "Rome", "Paris"]
        assert answer == "Paris"

    def test_list_answers(self):
        options, answer = reconcile_answer(["2", "3", "4"], ["2", "3", "5"])
        assert options == ["2", "3", "4", "5"]
        assert answer == ["2", "3", "5"]


class TestQuizOptionGenerator:
    def _generator(self, settings, payload) -> tuple[QuizOptionGenerator, ScriptedFormBackend]:
        backend = ScriptedFormBackend({"quiz_options": payload})
        return QuizOptionGenerator(CompletionClient(backend, settings.llm)), backend

    @pytest.mark.asyncio
    async def test_one_call_for_all_questions(self, settings):
        generator, backend = self._generator(
            settings,
            {
                "questions": [
                    {"index": 1, "options": ["Mars", "Venus"], "correctAnswer": "mars"},
                    {"index": 0, "options": ["Paris", "Rome"], "correctAnswer": "Paris", "explanation": "Capital."},
                ]
            },
        )
        result = await generator.generate(["Capital of France?", "Red planet?"], topic="trivia", model="m-fast")

        assert len(backend.calls) == 1
        assert result[0].correct_answer == "Paris"
        assert result[0].explanation == "Capital."
        assert result[1].correct_answer == "Mars"

    @pytest.mark.asyncio
    async def test_position_used_without_index(self, settings):
        generator, _ = self._generator(
            settings, {"questions": [{"options": ["Yes", "No"], "correctAnswer": "Yes"}]}
        )
        result = await generator.generate(["Is water wet?"], topic="trivia", model="m")
        assert result[0].options == ["Yes", "No"]

    @pytest.mark.asyncio
    async def test_missing_question_rejected(self, settings):
        generator, _ = self._generator(
            settings, {"questions": [{"index": 0, "options": ["A", "B"], "correctAnswer": "A"}]}
        )
        with pytest.raises(MalformedOutputError, match=r"\[1\]"):
            await generator.generate(["Q1", "Q2"], topic="t", model="m")

    @pytest.mark.asyncio
    async def test_single_option_is_unusable(self, settings):
        generator, _ = self._generator(settings, {"questions": [{"index": 0, "options": ["A"], "correctAnswer": "A"}]})
        with pytest.raises(MalformedOutputError):
            await generator.generate(["Q1"], topic="t", model="m")

    @pytest.mark.asyncio
    async def test_no_labels_no_call(self, settings):
        generator, backend = self._generator(settings, {"questions": []})
        assert await generator.generate([], topic="t", model="m") == []
        assert backend.calls == []
