"""Read-only catalog routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from stockpick.api.dependencies import get_context
from stockpick.context import AppContext
from stockpick.core.exceptions import NotFoundError
from stockpick.domain.instrument import Etf, Stock


router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("/stocks", response_model=list[Stock])
async def list_stocks(ctx: AppContext = Depends(get_context)) -> list[Stock]:
    return ctx.catalog.stocks


@router.get("/etfs", response_model=list[Etf])
async def list_etfs(ctx: AppContext = Depends(get_context)) -> list[Etf]:
    return ctx.catalog.etfs


@router.get("/sectors", response_model=list[str])
async def list_sectors(ctx: AppContext = Depends(get_context)) -> list[str]:
    return ctx.catalog.sectors()


@router.get("/themes", response_model=list[str])
async def list_themes(ctx: AppContext = Depends(get_context)) -> list[str]:
    return ctx.catalog.themes()


@router.get("/instruments/{ticker}", response_model=Stock | Etf)
async def get_instrument(ticker: str, ctx: AppContext = Depends(get_context)):
    instrument = ctx.catalog.lookup(ticker)
    if instrument is None:
        raise NotFoundError(message=f"Ticker {ticker.upper()} not found")
    return instrument
