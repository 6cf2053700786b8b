"""Scripted inference backends for pipeline tests."""

from __future__ import annotations

import json
from collections import deque
from typing import Any, Callable, Union

from formwright.inference.protocols import InferenceResult

# Checked in order against the system prompt; first hit names the stage.
STAGE_MARKERS: tuple[tuple[str, str], ...] = (
    ("INDEPENDENT SECOND OPINION", "ensemble"),
    ("form validation expert", "validator"),
    ("REFINE AND IMPROVE", "refiner"),
    ("FINAL FORM JSON", "synthesis"),
    ("QUIZ ANSWER OPTIONS", "quiz_options"),
    ("PRIMARY ANALYSIS", "primary"),
)

Scripted = Union[dict, str, BaseException, Callable[[list[dict[str, Any]]], Any]]


def stage_of(messages: list[dict[str, Any]]) -> str:
    system = next((m["content"] for m in messages if m["role"] == "system"), "")
    for marker, stage in STAGE_MARKERS:
        if marker in system:
            return stage
    return "unknown"


class FakeInferenceBackend:
    """Canned-response inference backend, no LLM calls needed."""

    def __init__(self, *, default_content: str = "{}", default_finish_reason: str = "finished") -> None:
        self._default_content = default_content
        self._default_finish_reason = default_finish_reason
        self.calls: list[dict[str, Any]] = []

    async def infer(self, messages: list[dict[str, Any]], model: str, **params: Any) -> InferenceResult:
        self.calls.append({"messages": messages, "model": model, "params": params})
        return InferenceResult(content=self._default_content, finish_reason=self._default_finish_reason)


class FailingBackend:
    """Raises the queued exceptions in turn, then answers with ``content``."""

    def __init__(self, *errors: BaseException, content: str = '{"ok": true}') -> None:
        self._errors = deque(errors)
        self._content = content
        self.attempts = 0
        self.models: list[str] = []

    async def infer(self, messages: list[dict[str, Any]], model: str, **params: Any) -> InferenceResult:
        self.attempts += 1
        self.models.append(model)
        if self._errors:
            raise self._errors.popleft()
        return InferenceResult(content=self._content)


class ScriptedFormBackend:
    """Answers each pipeline stage from a per-stage script.

    A script entry is a dict (sent as JSON), a raw string, an exception to
    raise, or a callable taking the messages. A list holds one entry per
    call, the last one repeating.
    """

    def __init__(self, script: dict[str, Union[Scripted, list[Scripted]]]) -> None:
        self._script = {stage: list(v) if isinstance(v, list) else [v] for stage, v in script.items()}
        self.calls: list[dict[str, Any]] = []

    def stages_called(self) -> list[str]:
        return [call["stage"] for call in self.calls]

    def calls_for(self, stage: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["stage"] == stage]

    async def infer(self, messages: list[dict[str, Any]], model: str, **params: Any) -> InferenceResult:
        stage = stage_of(messages)
        self.calls.append({"stage": stage, "model": model, "messages": messages, "params": params})

        entries = self._script.get(stage)
        if not entries:
            raise AssertionError(f"No scripted response for stage {stage!r}")
        entry = entries.pop(0) if len(entries) > 1 else entries[0]

        if callable(entry) and not isinstance(entry, BaseException):
            entry = entry(messages)
        if isinstance(entry, BaseException):
            raise entry
        content = entry if isinstance(entry, str) else json.dumps(entry)
        return InferenceResult(content=content)


class SettingsAwareBackend(FakeInferenceBackend):
    """Loadable through ``FORMWRIGHT_LLM_INFERENCE_BACKEND``; receives the app settings."""

    def __init__(self, settings: Any) -> None:
        super().__init__()
        self.settings = settings
