"""Portfolio ledger routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from stockpick.api.dependencies import get_context, require_user
from stockpick.context import AppContext
from stockpick.core.security import TokenData
from stockpick.schemas.portfolio import (
    PortfolioItem,
    PortfolioItemCreate,
    PortfolioItemUpdate,
    PortfolioResponse,
)
from stockpick.services.portfolio import compute_totals


router = APIRouter(prefix="/portfolio", tags=["Portfolio"])


@router.get("", response_model=PortfolioResponse)
async def get_portfolio(
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> PortfolioResponse:
    items = await ctx.portfolio.list_items(user.user_id)
    return PortfolioResponse(items=items, totals=compute_totals(items))


@router.post("/items", response_model=PortfolioItem, status_code=status.HTTP_201_CREATED)
async def add_item(
    payload: PortfolioItemCreate,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> PortfolioItem:
    return await ctx.portfolio.add_item(
        user.user_id,
        payload.ticker,
        payload.avg_cost,
        payload.quantity,
        payload.current_price,
    )


@router.get("/items/{item_id}", response_model=PortfolioItem)
async def get_item(
    item_id: str,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> PortfolioItem:
    return await ctx.portfolio.get_item(user.user_id, item_id)


@router.patch("/items/{item_id}", response_model=PortfolioItem)
async def update_item(
    item_id: str,
    payload: PortfolioItemUpdate,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> PortfolioItem:
    return await ctx.portfolio.update_item(
        user.user_id,
        item_id,
        avg_cost=payload.avg_cost,
        quantity=payload.quantity,
        current_price=payload.current_price,
    )


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: str,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> Response:
    await ctx.portfolio.delete_item(user.user_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
