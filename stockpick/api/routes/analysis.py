"""AI analysis routes for instruments, portfolios and idle cash."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from stockpick.api.dependencies import get_context, require_user
from stockpick.context import AppContext
from stockpick.core.exceptions import NotFoundError
from stockpick.core.security import TokenData
from stockpick.domain.instrument import InstrumentKind
from stockpick.schemas.analysis import (
    AnalysisRequest,
    CashRecommendationRequest,
    PortfolioAnalysisRequest,
)
from stockpick.schemas.reports import CashRecommendation, InstrumentReport, PortfolioReport


router = APIRouter(prefix="/analysis", tags=["Analysis"])


# =============================================================================
# REPORT LISTINGS
# =============================================================================


@router.get("/reports", response_model=list[InstrumentReport])
async def list_reports(
    kind: Optional[InstrumentKind] = Query(default=None),
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> list[InstrumentReport]:
    return await ctx.reports.list_reports(user.user_id, kind)


@router.get("/reports/recent", response_model=list[InstrumentReport])
async def recent_reports(
    count: int = Query(default=5, ge=1, le=50),
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> list[InstrumentReport]:
    return await ctx.reports.recent_reports(user.user_id, count)


# =============================================================================
# PORTFOLIO
# =============================================================================


@router.post("/portfolio", response_model=PortfolioReport)
async def analyze_portfolio(
    payload: PortfolioAnalysisRequest,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> PortfolioReport:
    return await ctx.analysis.analyze_portfolio(
        user,
        style=payload.style,
        cash_amount=payload.cash_amount,
        item_ids=payload.item_ids,
    )


@router.get("/portfolio/latest", response_model=PortfolioReport)
async def latest_portfolio_report(
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> PortfolioReport:
    report = await ctx.reports.get_portfolio_report(user.user_id)
    if report is None:
        raise NotFoundError(message="No portfolio report yet")
    return report


@router.get("/portfolio/history", response_model=list[PortfolioReport])
async def portfolio_report_history(
    limit: int = Query(default=20, ge=1, le=100),
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> list[PortfolioReport]:
    return await ctx.reports.portfolio_report_history(user.user_id, limit)


@router.post("/portfolio/cash", response_model=CashRecommendation)
async def recommend_cash(
    payload: CashRecommendationRequest,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> CashRecommendation:
    return await ctx.analysis.recommend_cash(user, payload.cash_amount, payload.style)


# =============================================================================
# INSTRUMENTS
# =============================================================================


@router.post("/{kind}/{ticker}", response_model=InstrumentReport)
async def analyze_instrument(
    kind: InstrumentKind,
    ticker: str,
    payload: Optional[AnalysisRequest] = None,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> InstrumentReport:
    style = payload.style if payload else None
    return await ctx.analysis.analyze_instrument(user, kind, ticker, style)


@router.get("/{kind}/{ticker}", response_model=InstrumentReport)
async def get_report(
    kind: InstrumentKind,
    ticker: str,
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> InstrumentReport:
    report = await ctx.reports.get_report(user.user_id, kind, ticker)
    if report is None:
        raise NotFoundError(message=f"No {kind} report for {ticker.upper()}")
    return report


@router.get("/{kind}/{ticker}/history", response_model=list[InstrumentReport])
async def report_history(
    kind: InstrumentKind,
    ticker: str,
    limit: int = Query(default=20, ge=1, le=100),
    user: TokenData = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> list[InstrumentReport]:
    return await ctx.reports.report_history(user.user_id, kind, ticker, limit)
