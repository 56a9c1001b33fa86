"""Usage quota routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from stockpick.api.dependencies import get_context, require_admin, require_user
from stockpick.context import AppContext
from stockpick.core.security import TokenData
from stockpick.schemas.common import MessageResponse
from stockpick.schemas.quota import QuotaLimitUpdate, QuotaRecord


router = APIRouter(prefix="/quota", tags=["Quota"])


@router.get("/me", response_model=QuotaRecord)
async def my_quota(
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> QuotaRecord:
    return await ctx.quota.load(user.user_id, user.email)


@router.get("", response_model=list[QuotaRecord])
async def list_quotas(
    admin: TokenData = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> list[QuotaRecord]:
    return await ctx.quota.list_records(admin)


@router.post("/reset-all", response_model=MessageResponse)
async def reset_all(
    admin: TokenData = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> MessageResponse:
    count = await ctx.quota.reset_all(admin)
    return MessageResponse(message=f"Reset {count} quota records")


@router.post("/{user_id}/reset", response_model=QuotaRecord)
async def reset_quota(
    user_id: str,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> QuotaRecord:
    return await ctx.quota.reset_monthly(user_id, user)


@router.put("/{user_id}/limit", response_model=QuotaRecord)
async def set_limit(
    user_id: str,
    payload: QuotaLimitUpdate,
    admin: TokenData = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> QuotaRecord:
    return await ctx.quota.set_limit(user_id, payload.limit, payload.enabled, admin)
