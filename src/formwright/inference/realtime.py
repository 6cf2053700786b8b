"""Real-time inference backend, wraps ``litellm.acompletion()``."""

from __future__ import annotations

import logging
from typing import Any, Optional

from litellm import acompletion

from formwright.inference.protocols import InferenceResult

log = logging.getLogger(__name__)


class RealTimeBackend:
    """Request/response inference via ``litellm.acompletion()``.

    Model ids carry LiteLLM provider prefixes (``groq/``, ``openai/``,
    ``anthropic/``, ``ollama/``), so one backend covers every provider the
    roster can name.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
    ) -> None:
        self._api_key = api_key
        self._api_base = api_base

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        """Single inference call via litellm.acompletion()."""
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            **params,
        }
        if self._api_key:
            kwargs.setdefault("api_key", self._api_key)
        if self._api_base:
            kwargs.setdefault("api_base", self._api_base)

        response = await acompletion(**kwargs)
        content = response.choices[0].message.content or ""
        reason = response.choices[0].finish_reason
        mapped_reason = "max_output_reached" if reason == "length" else "finished"
        if mapped_reason == "max_output_reached":
            log.warning("Completion from %s hit the output token limit", model)

        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": getattr(response.usage, "prompt_tokens", 0),
                "completion_tokens": getattr(response.usage, "completion_tokens", 0),
                "total_tokens": getattr(response.usage, "total_tokens", 0),
            }

        return InferenceResult(
            content=content,
            finish_reason=mapped_reason,
            usage=usage,
        )

