"""
Health endpoints.

Neither check calls the scheduling API or Anthropic; a backend outage
shows up as failed dispatch results, not as an unhealthy process.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from gymbuddy.config import settings

router = APIRouter(prefix="/health", tags=["Health"])

VERSION = "1.0.0"

_started_at: Optional[datetime] = None


def set_start_time() -> None:
    """Record process start; called from the app lifespan."""
    global _started_at
    _started_at = datetime.now(timezone.utc)


def get_uptime_seconds() -> Optional[float]:
    if _started_at is None:
        return None
    return (datetime.now(timezone.utc) - _started_at).total_seconds()


class HealthResponse(BaseModel):
    """Service status and which optional features are configured."""
    status: str
    timestamp: datetime
    version: str
    environment: str
    chat_enabled: bool
    linked_users: int


class LiveResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime_seconds: Optional[float] = None


@router.get("", response_model=HealthResponse, summary="Service status")
async def health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=VERSION,
        environment=settings.app_env,
        chat_enabled=settings.chat_enabled,
        linked_users=len(settings.user_directory_map),
    )


@router.get("/live", response_model=LiveResponse, summary="Liveness check")
async def live() -> LiveResponse:
    return LiveResponse(
        status="alive",
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=get_uptime_seconds(),
    )
