"""
Health check endpoint.

GET /health reports whether the reCAPTCHA gate is ready.
Rules:
- gate missing from app.state → "unhealthy" (503)
- gate running with the public test secret → "degraded" (200); every token
  passes, which is only acceptable outside production.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    gate = getattr(request.app.state, "recaptcha_gate", None)
    if gate is None:
        checks["recaptcha"] = "not_configured"
        overall = "unhealthy"
    elif gate.options.is_test_mode:
        checks["recaptcha"] = "test_mode"
        overall = "degraded"
    else:
        checks["recaptcha"] = "ok"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
