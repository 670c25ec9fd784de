from __future__ import annotations

import datetime as dt

from fastapi import APIRouter

from app.models.payment_schemas import HealthOut

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
async def health() -> HealthOut:
    """Liveness probe; independent of the payment store and messaging API."""
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat().replace("+00:00", "Z")
    return HealthOut(status="OK", timestamp=timestamp)
