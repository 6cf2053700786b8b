"""Tests for the completion client: retries, timeouts, error taxonomy."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from litellm.exceptions import AuthenticationError, BadRequestError, NotFoundError, RateLimitError

from formwright.core.config import LLMConfig, ModelRosterConfig
from formwright.exceptions import (
    CompletionServiceError,
    ConfigurationError,
    MalformedOutputError,
    TransientServiceError,
)
from formwright.inference.client import CompletionClient, classify_failure
from formwright.inference.protocols import InferenceResult
from tests.fakes.fake_inference import FailingBackend, FakeInferenceBackend


def _config(**overrides: Any) -> LLMConfig:
    values = {"api_key": "test-key", "timeout": 5.0, "max_retries": 1, "retry_base_delay": 0.0}
    values.update(overrides)
    return LLMConfig(**values)


async def _ask(client: CompletionClient) -> dict:
    return await client.complete_json(model="m", system="sys", user="usr", temperature=0.1)


class TestClassifyFailure:
    def test_auth_is_configuration(self):
        exc = AuthenticationError(message="bad key", llm_provider="groq", model="m")
        assert isinstance(classify_failure(exc), ConfigurationError)

    def test_unknown_model_is_configuration(self):
        exc = NotFoundError(message="no such model", model="m", llm_provider="groq")
        assert isinstance(classify_failure(exc), ConfigurationError)

    def test_bad_request_is_permanent(self):
        exc = BadRequestError(message="context too long", model="m", llm_provider="groq")
        error = classify_failure(exc)
        assert isinstance(error, CompletionServiceError)
        assert not isinstance(error, TransientServiceError)

    def test_timeout_and_connection_are_transient(self):
        assert isinstance(classify_failure(asyncio.TimeoutError()), TransientServiceError)
        assert isinstance(classify_failure(ConnectionResetError("reset")), TransientServiceError)

    def test_formwright_errors_pass_through(self):
        exc = MalformedOutputError("bad")
        assert classify_failure(exc) is exc


class TestCompletionClient:
    @pytest.mark.asyncio
    async def test_sends_json_mode_and_messages(self):
        backend = FakeInferenceBackend(default_content='{"ok": true}')
        client = CompletionClient(backend, _config())

        assert await _ask(client) == {"ok": True}
        call = backend.calls[0]
        assert call["model"] == "m"
        assert call["params"]["response_format"] == {"type": "json_object"}
        assert call["params"]["temperature"] == 0.1
        assert [m["role"] for m in call["messages"]] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_transient_failure_retried_once(self):
        backend = FailingBackend(ConnectionResetError("reset"))
        client = CompletionClient(backend, _config())

        assert await _ask(client) == {"ok": True}
        assert backend.attempts == 2

    @pytest.mark.asyncio
    async def test_retry_budget_exhausted(self):
        backend = FailingBackend(ConnectionResetError("a"), ConnectionResetError("b"))
        client = CompletionClient(backend, _config())

        with pytest.raises(TransientServiceError, match="after 2 attempt"):
            await _ask(client)
        assert backend.attempts == 2

    @pytest.mark.asyncio
    async def test_no_retries_configured(self):
        backend = FailingBackend(ConnectionResetError("a"))
        client = CompletionClient(backend, _config(max_retries=0))

        with pytest.raises(TransientServiceError):
            await _ask(client)
        assert backend.attempts == 1

    @pytest.mark.asyncio
    async def test_configuration_error_not_retried(self):
        backend = FailingBackend(AuthenticationError(message="bad key", llm_provider="groq", model="m"))
        client = CompletionClient(backend, _config())

        with pytest.raises(ConfigurationError):
            await _ask(client)
        assert backend.attempts == 1

    @pytest.mark.asyncio
    async def test_backend_formwright_error_propagates_unchanged(self):
        original = MalformedOutputError("backend rejected output")
        backend = FailingBackend(original)
        client = CompletionClient(backend, _config())

        with pytest.raises(MalformedOutputError) as exc_info:
            await _ask(client)
        assert exc_info.value is original
        assert backend.attempts == 1

    @pytest.mark.asyncio
    async def test_malformed_json_not_retried(self):
        backend = FakeInferenceBackend(default_content="Sorry, I can't do that")
        client = CompletionClient(backend, _config())

        with pytest.raises(MalformedOutputError):
            await _ask(client)
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        class SlowBackend:
            async def infer(self, messages, model, **params):
                await asyncio.sleep(1)
                return InferenceResult(content="{}")

        client = CompletionClient(SlowBackend(), _config(timeout=0.05, max_retries=0))
        with pytest.raises(TransientServiceError, match="timed out"):
            await _ask(client)

    @pytest.mark.asyncio
    async def test_concurrency_cap(self):
        in_flight = 0
        peak = 0

        class CountingBackend:
            async def infer(self, messages, model, **params):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return InferenceResult(content="{}")

        client = CompletionClient(CountingBackend(), _config(max_concurrent_calls=2))
        await asyncio.gather(*[_ask(client) for _ in range(6)])
        assert peak == 2


def _rate_limited(model: str = "m") -> RateLimitError:
    return RateLimitError(message="rate limit reached", llm_provider="groq", model=model)


class TestFallbackModels:
    @pytest.mark.asyncio
    async def test_rate_limited_model_falls_back(self):
        backend = FailingBackend(_rate_limited())
        client = CompletionClient(backend, _config(), fallbacks={"m": "m-fallback"})

        assert await _ask(client) == {"ok": True}
        assert backend.models == ["m", "m-fallback"]

    @pytest.mark.asyncio
    async def test_exhausted_error_names_every_model_tried(self):
        backend = FailingBackend(_rate_limited(), _rate_limited("m-fallback"))
        client = CompletionClient(backend, _config(), fallbacks={"m": "m-fallback"})

        with pytest.raises(TransientServiceError, match="on m, m-fallback"):
            await _ask(client)
        assert backend.models == ["m", "m-fallback"]

    @pytest.mark.asyncio
    async def test_model_without_fallback_retries_itself(self):
        backend = FailingBackend(_rate_limited())
        client = CompletionClient(backend, _config(), fallbacks={"other": "m-fallback"})

        assert await _ask(client) == {"ok": True}
        assert backend.models == ["m", "m"]

    @pytest.mark.asyncio
    async def test_malformed_output_never_falls_back(self):
        backend = FakeInferenceBackend(default_content="not json")
        client = CompletionClient(backend, _config(), fallbacks={"m": "m-fallback"})

        with pytest.raises(MalformedOutputError):
            await _ask(client)
        assert [call["model"] for call in backend.calls] == ["m"]

    @pytest.mark.asyncio
    async def test_configuration_error_never_falls_back(self):
        backend = FailingBackend(NotFoundError(message="no such model", model="m", llm_provider="groq"))
        client = CompletionClient(backend, _config(), fallbacks={"m": "m-fallback"})

        with pytest.raises(ConfigurationError):
            await _ask(client)
        assert backend.models == ["m"]


class TestFallbackMap:
    def test_defaults_cover_every_tier(self):
        roster = ModelRosterConfig()
        chain = roster.fallback_map()
        assert set(chain) == {roster.fast, roster.balanced, roster.maximum, roster.secondary}
        assert chain[roster.secondary] == "groq/llama-3.3-70b-versatile"
        assert all(chain[model] != model for model in chain)

    def test_disabled_and_self_fallbacks_left_out(self):
        roster = ModelRosterConfig(
            fast="a", balanced="b", maximum="c", secondary="d",
            fast_fallback="", balanced_fallback="b", maximum_fallback="d", secondary_fallback="  ",
        )
        assert roster.fallback_map() == {"c": "d"}

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FORMWRIGHT_MODELS_FAST_FALLBACK", "ollama/llama3")
        assert ModelRosterConfig().fallback_map()[ModelRosterConfig().fast] == "ollama/llama3"
