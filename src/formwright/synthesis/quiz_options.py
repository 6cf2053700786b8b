"""Answer-option generation for quiz questions that arrive without them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from formwright.analysis.normalize import as_str, as_str_list
from formwright.exceptions import MalformedOutputError
from formwright.inference.client import CompletionClient
from formwright.prompts import get_prompt

log = logging.getLogger(__name__)

Answer = Union[str, list[str]]


@dataclass(frozen=True)
class QuizOptions:
    options: list[str]
    correct_answer: Answer
    explanation: str = ""


def _find_option(answer: str, options: Sequence[str]) -> str | None:
    folded = answer.casefold().strip()
    for option in options:
        if option.casefold().strip() == folded:
            return option
    return None


def reconcile_answer(options: Sequence[str], answer: Answer) -> tuple[list[str], Answer]:
    """Make sure every correct answer appears among ``options``.

    Answers matching an option case-insensitively take the option's
    spelling; answers with no match are appended as options.
    """
    merged = list(options)
    answers = answer if isinstance(answer, list) else [answer]
    resolved: list[str] = []
    for item in answers:
        found = _find_option(item, merged)
        if found is None:
            merged.append(item)
            found = item
        if found not in resolved:
            resolved.append(found)
    if isinstance(answer, list):
        return merged, resolved
    return merged, resolved[0]


def _parse_entry(entry: Mapping[str, Any]) -> QuizOptions | None:
    options = as_str_list(entry.get("options"))
    raw_answer = entry.get("correctAnswer", entry.get("correct_answer"))
    answer: Answer | None
    if isinstance(raw_answer, list):
        answer = as_str_list(raw_answer) or None
    else:
        answer = as_str(raw_answer) or None
    if len(options) < 2 or answer is None:
        return None
    options, answer = reconcile_answer(options, answer)
    return QuizOptions(options=options, correct_answer=answer, explanation=as_str(entry.get("explanation")))


class QuizOptionGenerator:
    """Fills in options and correct answers for a batch of quiz questions in one call."""

    def __init__(self, client: CompletionClient, *, temperature: float = 0.3) -> None:
        self._client = client
        self._temperature = temperature

    async def generate(self, labels: Sequence[str], *, topic: str, model: str) -> list[QuizOptions]:
        """One :class:`QuizOptions` per label, in order.

        Raises:
            MalformedOutputError: the response omits a question or gives it
                fewer than two options or no correct answer.
        """
        if not labels:
            return []
        log.info("Generating answer options for %d quiz questions", len(labels))
        questions = json.dumps([{"index": i, "question": label} for i, label in enumerate(labels)], indent=2)
        raw = await self._client.complete_json(
            model=model,
            system=get_prompt("quiz_options", "QUIZ_OPTIONS_SYSTEM_PROMPT"),
            user=get_prompt("quiz_options", "QUIZ_OPTIONS_PROMPT").format(topic=topic, questions=questions),
            temperature=self._temperature,
        )

        entries = raw.get("questions")
        if not isinstance(entries, list):
            raise MalformedOutputError("Quiz option payload has no 'questions' list")

        by_index: dict[int, QuizOptions] = {}
        for position, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                continue
            index = entry.get("index", position)
            if not isinstance(index, int) or isinstance(index, bool):
                index = position
            parsed = _parse_entry(entry)
            if parsed is not None and 0 <= index < len(labels):
                by_index.setdefault(index, parsed)

        missing = [i for i in range(len(labels)) if i not in by_index]
        if missing:
            raise MalformedOutputError(f"Quiz option payload is missing usable options for questions {missing}")
        return [by_index[i] for i in range(len(labels))]
