"""Completion client: the single boundary every pipeline stage calls through.

Owns the per-call timeout, the small retry budget, the fallback model
switch, the process-wide concurrency limit and JSON-object validation.
Backends only move text.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Mapping, Optional

from litellm.exceptions import (
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
)

from formwright.core.config import LLMConfig
from formwright.exceptions import (
    CompletionServiceError,
    ConfigurationError,
    FormwrightError,
    TransientServiceError,
)
from formwright.inference.json_parser import extract_json_object
from formwright.inference.protocols import IInferenceBackend

log = logging.getLogger(__name__)

_JSON_OBJECT = {"type": "json_object"}


def classify_failure(exc: BaseException) -> FormwrightError:
    """Map a backend exception onto the formwright error taxonomy.

    Credentials and unknown models are configuration problems; other
    request rejections are permanent service errors; everything else
    (timeouts, connection resets, rate limits, 5xx) is transient.
    """
    if isinstance(exc, FormwrightError):
        return exc
    if isinstance(exc, (AuthenticationError, PermissionDeniedError, NotFoundError)):
        return ConfigurationError(f"Completion service rejected credentials or model: {exc}")
    if isinstance(exc, BadRequestError):
        return CompletionServiceError(f"Completion service rejected the request: {exc}")
    if isinstance(exc, asyncio.TimeoutError):
        return TransientServiceError("Completion call timed out")
    return TransientServiceError(f"Completion call failed: {exc}")


class CompletionClient:
    """JSON-object completions with timeout, retry and a concurrency cap.

    One instance is meant to be shared by every pipeline run in the
    process so the semaphore bounds total in-flight calls.

    Args:
        backend: Inference backend that moves the text.
        config: Timeout, retry and concurrency settings.
        fallbacks: Model id to the model every retry after a transient
            failure goes to. Models without an entry retry themselves.
    """

    def __init__(
        self,
        backend: IInferenceBackend,
        config: LLMConfig,
        fallbacks: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._backend = backend
        self._config = config
        self._fallbacks = dict(fallbacks or {})
        self._semaphore = asyncio.Semaphore(config.max_concurrent_calls)

    @property
    def backend(self) -> IInferenceBackend:
        return self._backend

    async def _call_once(self, messages: list[dict[str, Any]], model: str, temperature: float) -> str:
        async with self._semaphore:
            result = await asyncio.wait_for(
                self._backend.infer(
                    messages,
                    model,
                    temperature=temperature,
                    response_format=_JSON_OBJECT,
                ),
                timeout=self._config.timeout,
            )
        return result.content

    async def complete_text(
        self,
        *,
        model: str,
        system: str,
        user: str,
        temperature: float,
    ) -> str:
        """Raw completion text.

        Transient failures are retried ``max_retries`` times, on the
        fallback for ``model`` when one is configured.
        """
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        log.debug(
            "Completion request",
            extra={"model": model, "system_chars": len(system), "user_chars": len(user)},
        )

        attempts = self._config.max_retries + 1
        fallback = self._fallbacks.get(model, model)
        tried: list[str] = []
        last_error: FormwrightError | None = None
        for attempt in range(attempts):
            current = model if attempt == 0 else fallback
            if current not in tried:
                tried.append(current)
            try:
                return await self._call_once(messages, current, temperature)
            except Exception as exc:  # noqa: BLE001 - classified below
                error = classify_failure(exc)
                if not isinstance(error, TransientServiceError):
                    if error is exc:
                        raise
                    raise error from exc
                last_error = error

                if attempt < attempts - 1:
                    base = self._config.retry_base_delay * (2**attempt)
                    wait = base + random.uniform(0, base * 0.5)
                    log.warning(
                        "Completion retry %d/%d for %s: %s (wait=%.2fs)",
                        attempt + 1,
                        attempts - 1,
                        current,
                        exc,
                        wait,
                    )
                    if attempt == 0 and fallback != model:
                        log.warning("Switching from %s to fallback model %s", model, fallback)
                    await asyncio.sleep(wait)

        assert last_error is not None
        raise TransientServiceError(
            f"Completion failed after {attempts} attempt(s) on {', '.join(tried)}: {last_error}"
        ) from last_error

    async def complete_json(
        self,
        *,
        model: str,
        system: str,
        user: str,
        temperature: float,
    ) -> dict[str, Any]:
        """Completion parsed as a JSON object.

        A response that arrives but does not parse raises
        :class:`~formwright.exceptions.MalformedOutputError` with no retry.
        """
        content = await self.complete_text(model=model, system=system, user=user, temperature=temperature)
        return extract_json_object(content)
