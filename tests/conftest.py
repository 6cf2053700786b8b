"""Shared fixtures for formwright tests."""

from __future__ import annotations

import logging
from typing import Any, Callable

import pytest

from formwright.core.config import AppSettings, LLMConfig
from formwright.hooks.run_tracker import end_run
from formwright.inference.factory import create_completion_client
from formwright.pipeline import FormGenerationPipeline
from formwright.registry import FieldTypeRegistry, default_registry
from tests.fakes.fake_inference import ScriptedFormBackend


@pytest.fixture
def settings() -> AppSettings:
    """Test settings: fake key, no retry delay, no real LLM."""
    return AppSettings(
        llm=LLMConfig(api_key="test-key", timeout=5.0, max_retries=1, retry_base_delay=0.0),
    )


@pytest.fixture
def registry() -> FieldTypeRegistry:
    return default_registry()


@pytest.fixture
def make_pipeline(settings: AppSettings) -> Callable[[dict[str, Any]], tuple[FormGenerationPipeline, ScriptedFormBackend]]:
    """Build a pipeline whose completions come from a per-stage script."""

    def _make(script: dict[str, Any]) -> tuple[FormGenerationPipeline, ScriptedFormBackend]:
        backend = ScriptedFormBackend(script)
        client = create_completion_client(settings, backend)
        return FormGenerationPipeline(client, settings), backend

    return _make


@pytest.fixture(autouse=True)
def _no_leaked_run():
    yield
    end_run()


@pytest.fixture(autouse=True)
def _restore_logging():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
