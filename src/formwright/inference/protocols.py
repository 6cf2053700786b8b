"""Completion backend protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class InferenceResult:
    """Raw text returned by one completion call."""

    content: str
    finish_reason: str = "finished"
    usage: dict[str, int] = field(default_factory=dict)


@runtime_checkable
class IInferenceBackend(Protocol):
    """Anything that can turn chat messages into completion text.

    The pipeline never calls a backend directly; it goes through
    :class:`formwright.inference.client.CompletionClient`, which owns
    timeouts, retries, concurrency limits and JSON validation. Backends
    only move text and raise whatever their transport raises.
    """

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        """Run a single completion.

        Args:
            messages: Chat messages in OpenAI format.
            model: Model identifier (supports LiteLLM prefixes).
            **params: temperature, response_format and similar.
        """
        ...
