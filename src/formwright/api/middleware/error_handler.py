"""Global exception handlers mapping domain exceptions to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from formwright.exceptions import (
    CompletionServiceError,
    ConfigurationError,
    FormwrightError,
    MalformedOutputError,
    RegistryViolationError,
    TransientServiceError,
)

log = logging.getLogger(__name__)


def _error(status_code: int, exc: Exception, kind: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": kind})


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        log.error("Configuration error while serving %s: %s", request.url.path, exc)
        return _error(500, exc, "configuration_error")

    @app.exception_handler(TransientServiceError)
    async def handle_transient_error(request: Request, exc: TransientServiceError) -> JSONResponse:
        return _error(503, exc, "service_unavailable")

    @app.exception_handler(CompletionServiceError)
    async def handle_completion_error(request: Request, exc: CompletionServiceError) -> JSONResponse:
        return _error(502, exc, "completion_service_error")

    @app.exception_handler(MalformedOutputError)
    async def handle_malformed_output(request: Request, exc: MalformedOutputError) -> JSONResponse:
        return _error(502, exc, "malformed_output")

    @app.exception_handler(RegistryViolationError)
    async def handle_registry_violation(request: Request, exc: RegistryViolationError) -> JSONResponse:
        return _error(502, exc, "registry_violation")

    @app.exception_handler(FormwrightError)
    async def handle_generic_error(request: Request, exc: FormwrightError) -> JSONResponse:
        return _error(500, exc, "formwright_error")

    @app.exception_handler(ValueError)
    async def handle_invalid_request(request: Request, exc: ValueError) -> JSONResponse:
        return _error(422, exc, "invalid_request")
