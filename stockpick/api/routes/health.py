"""Health check endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from stockpick.api.dependencies import get_context
from stockpick.context import AppContext
from stockpick.core.config import settings
from stockpick.core.logging import get_logger
from stockpick.schemas.common import HealthResponse


router = APIRouter(prefix="/health")

logger = get_logger("health")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the document store and AI provider configuration.",
)
async def health_check(ctx: AppContext = Depends(get_context)) -> HealthResponse:
    """
    Perform health check on API and dependencies.

    The store is required; a missing AI key only degrades the service.
    """
    try:
        store_ok = await ctx.store.ping()
    except Exception as e:
        logger.warning(f"Store healthcheck failed: {e}")
        store_ok = False

    checks = {
        "store": store_ok,
        "ai_provider": ctx.provider.is_configured,
    }

    if all(checks.values()):
        status = "healthy"
    elif checks["store"]:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        timestamp=datetime.now(UTC),
        checks=checks,
    )
