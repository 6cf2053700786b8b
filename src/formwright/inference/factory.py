"""Inference backend factory, resolves the backend from config."""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

from formwright.exceptions import ConfigurationError
from formwright.inference.client import CompletionClient
from formwright.inference.protocols import IInferenceBackend
from formwright.inference.realtime import RealTimeBackend

if TYPE_CHECKING:
    from formwright.core.config import AppSettings

log = logging.getLogger(__name__)


def _import_dotted_path(spec: str) -> Any:
    """Resolve ``package.module:Attr`` (or ``package.module.Attr``)."""
    if ":" in spec:
        module_path, _, attr = spec.partition(":")
    else:
        module_path, _, attr = spec.rpartition(".")
    if not module_path or not attr:
        raise ConfigurationError(f"Invalid inference backend path: {spec!r}")
    try:
        module = importlib.import_module(module_path)
        return getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"Cannot load inference backend {spec!r}: {exc}") from exc


def create_inference_backend(settings: AppSettings) -> IInferenceBackend:
    """Create an inference backend based on settings.

    ``"realtime"`` returns the built-in :class:`RealTimeBackend`. A dotted
    path like ``mypackage.backends:CachedBackend`` is imported and called
    with ``settings``.
    """
    spec = settings.llm.inference_backend

    if spec == "realtime":
        log.info("Using built-in RealTimeBackend")
        api_key = settings.llm.api_key if settings.llm.api_key not in ("", "no-key") else None
        return RealTimeBackend(api_key=api_key, api_base=settings.llm.base_url)

    log.info("Loading external inference backend: %s", spec)
    cls = _import_dotted_path(spec)
    if not callable(cls):
        raise ConfigurationError(f"Inference backend {spec!r} resolved to {cls!r}, which is not callable")
    return cls(settings)


def create_completion_client(settings: AppSettings, backend: IInferenceBackend | None = None) -> CompletionClient:
    """Wrap ``backend`` (or the configured one) in a :class:`CompletionClient`."""
    return CompletionClient(
        backend or create_inference_backend(settings),
        settings.llm,
        fallbacks=settings.models.fallback_map(),
    )
