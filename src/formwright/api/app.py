"""FastAPI application with lifespan management."""

from __future__ import annotations

import asyncio
import importlib.metadata
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from formwright.api.middleware.error_handler import register_error_handlers
from formwright.api.routes import generate, health
from formwright.core.config import APIConfig, AppSettings
from formwright.core.startup_checks import validate_settings
from formwright.hooks import setup_logging
from formwright.inference import create_completion_client
from formwright.pipeline import FormGenerationPipeline
from formwright.prompts import configure as configure_prompts


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("formwright")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


def create_app(
    settings: AppSettings | None = None,
    pipeline: FormGenerationPipeline | None = None,
) -> FastAPI:
    """Build the application.

    ``settings`` and ``pipeline`` default to env-driven settings and a
    pipeline over the configured inference backend; tests pass their own.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        app_settings = settings or AppSettings()
        validate_settings(app_settings)
        setup_logging(app_settings.observability)
        configure_prompts()

        app.state.settings = app_settings
        app.state.pipeline = pipeline or FormGenerationPipeline(
            create_completion_client(app_settings), app_settings
        )
        app.state.run_limiter = asyncio.Semaphore(app_settings.api.max_concurrent_runs)
        yield

    api_config = settings.api if settings is not None else APIConfig()
    application = FastAPI(
        title=api_config.title,
        description=api_config.description,
        version=_get_version(),
        lifespan=lifespan,
    )
    register_error_handlers(application)
    application.include_router(health.router)
    application.include_router(generate.router, prefix="/api")
    return application


app = create_app()
