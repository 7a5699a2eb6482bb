"""Health check endpoints.

Provides liveness (/health) and readiness (/health/ready). Readiness
checks that the data directory is writable and reports whether an LLM
provider key is configured; missing keys do not fail readiness because
transcripts can still be stored and tweets curated.
"""

from __future__ import annotations

import os
from pathlib import Path

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.tweetdesk.api.deps import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Basic liveness check. No dependencies are checked."""
    settings = get_app_settings(request)
    return {
        "status": "ok",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness check: data directory and LLM configuration.

    Returns 200 when the data directory is usable, 503 otherwise.
    """
    settings = get_app_settings(request)
    checks: dict = {"storage": "ok", "llm": "ok"}

    data_dir = Path(settings.DATA_DIR)
    if data_dir.exists() and not os.access(data_dir, os.W_OK):
        checks["storage"] = "error"
        checks["storage_error"] = f"{data_dir} is not writable"

    if not (settings.ANTHROPIC_API_KEY or settings.OPENAI_API_KEY):
        checks["llm"] = "no_keys"

    healthy = checks["storage"] == "ok"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if healthy else "degraded",
            "checks": checks,
        },
    )
