"""Completion service boundary.

Usage::

    from formwright.inference import CompletionClient, RealTimeBackend
"""

from __future__ import annotations

from formwright.inference.client import CompletionClient
from formwright.inference.factory import create_completion_client, create_inference_backend
from formwright.inference.protocols import IInferenceBackend, InferenceResult
from formwright.inference.realtime import RealTimeBackend

__all__ = [
    "CompletionClient",
    "IInferenceBackend",
    "InferenceResult",
    "RealTimeBackend",
    "create_completion_client",
    "create_inference_backend",
]
