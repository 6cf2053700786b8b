"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe, always 200 while the process is up."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(req: Request) -> dict[str, object]:
    """Readiness probe: reports the model roster the pipeline will use."""
    pipeline = req.app.state.pipeline
    return {"status": "ready", "models": pipeline.selector.roster(), "fieldTypes": len(pipeline.registry)}
