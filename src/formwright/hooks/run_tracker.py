"""Per-run analytics tracker using ContextVars.

Opt-in: :func:`track_stage` is a no-op when no run is active.

Usage::

    analytics = start_run()
    with track_stage("primary") as stage:
        stage.model = "groq/llama-3.3-70b-versatile"
    analytics = end_run()
    print(analytics.total_duration_ms)
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Generator

import structlog

from formwright.models import RunAnalytics, StageMetrics

_current_run: ContextVar[RunAnalytics | None] = ContextVar("formwright_current_run", default=None)


def get_current_run() -> RunAnalytics | None:
    """Get the active RunAnalytics, or None if no run is active."""
    return _current_run.get()


def start_run(run_id: str | None = None) -> RunAnalytics:
    """Create and activate a new RunAnalytics for the current context."""
    analytics = RunAnalytics(
        run_id=run_id or uuid.uuid4().hex[:12],
        started_at=datetime.now(timezone.utc),
        status="running",
    )
    _current_run.set(analytics)
    structlog.contextvars.bind_contextvars(run_id=analytics.run_id)
    return analytics


def end_run(status: str | None = None) -> RunAnalytics | None:
    """Finalize the current run and return its analytics. Returns None if no run is active."""
    analytics = _current_run.get()
    if analytics is None:
        return None

    if status is not None:
        analytics.status = status
    analytics.finalize()
    _current_run.set(None)
    structlog.contextvars.unbind_contextvars("run_id")
    return analytics


def record_error(message: str) -> None:
    """Append an error string to the active run, if any."""
    analytics = _current_run.get()
    if analytics is not None:
        analytics.errors.append(message)


def record_skipped(name: str) -> None:
    """Record a stage that never started (disabled, or cut by the deadline)."""
    analytics = _current_run.get()
    if analytics is not None:
        analytics.stages.append(StageMetrics(stage=name, status="skipped"))


@contextmanager
def track_stage(name: str) -> Generator[StageMetrics, None, None]:
    """Record a StageMetrics entry on the current run.

    An exception escaping the block marks the stage ``failed`` and is
    re-raised unchanged.
    """
    analytics = _current_run.get()
    stage = StageMetrics(stage=name, started_at=datetime.now(timezone.utc))
    structlog.contextvars.bind_contextvars(stage=name)

    try:
        yield stage
    except BaseException:
        stage.status = "failed"
        raise
    finally:
        stage.ended_at = datetime.now(timezone.utc)
        if stage.started_at:
            stage.duration_ms = (stage.ended_at - stage.started_at).total_seconds() * 1000
        if analytics is not None:
            analytics.stages.append(stage)
        structlog.contextvars.unbind_contextvars("stage")
