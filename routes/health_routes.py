"""
Health check endpoint.

GET /health: checks the credential store.
Rules:
- Store ping fails or returns False → "unhealthy" (503); no code or token can
  be served.
- In-memory store → "degraded" (200); works, but state is not shared across
  processes and is lost on restart.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dependencies import get_store
from infrastructure.store.memory import MemoryStore
from infrastructure.store.protocol import EphemeralStore
from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    responses={200: {"model": HealthResponse}, 503: {"model": HealthResponse}},
)
async def health_check(
    request: Request, store: EphemeralStore = Depends(get_store)
) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        reachable = await store.ping()
    except Exception:
        reachable = False

    if not reachable:
        checks["store"] = "error"
        overall = "unhealthy"
    elif isinstance(store, MemoryStore):
        checks["store"] = "memory"
        overall = "degraded"
    else:
        checks["store"] = "ok"

    sweeper = getattr(request.app.state, "sweeper", None)
    if store.native_expiry:
        checks["sweeper"] = "not_required"
    elif sweeper is not None and sweeper.running:
        checks["sweeper"] = "running"
    else:
        checks["sweeper"] = "stopped"
        if overall == "healthy":
            overall = "degraded"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
