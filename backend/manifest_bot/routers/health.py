"""Health and readiness endpoints."""
from __future__ import annotations

from datetime import datetime, timezone
from fastapi import APIRouter

from ..config import get_settings

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict:
    """Liveness probe used by the hosting platform."""
    return {
        "status": "ok",
        "service": get_settings().APP_NAME,
        "time": datetime.now(timezone.utc).isoformat(),
    }
