"""AI analysis orchestration.

Every analysis follows the same flow: quota gate, prompt, provider call,
parse, save, and only then count the call against the quota. A request
that fails anywhere before the save costs the user nothing.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from stockpick.catalog.store import CatalogStore
from stockpick.core.exceptions import ConflictError, QuotaExceededError, ValidationError
from stockpick.core.logging import get_logger
from stockpick.core.security import TokenData
from stockpick.parsing.reports import parse_instrument_response, parse_portfolio_response
from stockpick.prompts import build_cash_prompt, build_portfolio_prompt, build_prompt, parse_style
from stockpick.schemas.portfolio import PortfolioItem
from stockpick.schemas.quota import QuotaRecord
from stockpick.schemas.reports import CashRecommendation, InstrumentReport, PortfolioReport

from .openai.generate import CompletionProvider
from .portfolio import PortfolioLedger
from .quota import QuotaLedger
from .reports import ReportStore


logger = get_logger("services.analysis")

SUBJECT_TYPES = ("stock", "etf")


def canonical_style(style: Optional[str]) -> Optional[str]:
    """Canonical style value when recognized, otherwise the input unchanged."""
    resolved = parse_style(style)
    return resolved.value if resolved is not None else style


class AnalysisService:
    """Runs instrument, portfolio and cash analyses for a user."""

    def __init__(
        self,
        catalog: CatalogStore,
        quota: QuotaLedger,
        reports: ReportStore,
        portfolio: PortfolioLedger,
        provider: CompletionProvider,
    ):
        self.catalog = catalog
        self.quota = quota
        self.reports = reports
        self.portfolio = portfolio
        self.provider = provider
        self._running: set[tuple[str, str]] = set()

    @asynccontextmanager
    async def _exclusive(self, user_id: str, subject: str) -> AsyncIterator[None]:
        """Allow one in-flight analysis per user and subject."""
        key = (user_id, subject)
        if key in self._running:
            raise ConflictError(
                message=f"Analysis of {subject} is already running",
                error_code="ANALYSIS_IN_PROGRESS",
            )
        self._running.add(key)
        try:
            yield
        finally:
            self._running.discard(key)

    async def _gate(self, user: TokenData) -> QuotaRecord:
        record = await self.quota.load(user.user_id, user.email)
        if not record.can_use:
            logger.info(
                f"Quota gate rejected {user.user_id}",
                extra={"usage": record.usage_this_month, "limit": record.limit},
            )
            raise QuotaExceededError(record.usage_this_month, record.limit)
        return record

    async def _holdings(self, user_id: str, item_ids: Optional[list[str]] = None) -> list[PortfolioItem]:
        items = await self.portfolio.list_items(user_id)
        if item_ids:
            wanted = set(item_ids)
            items = [item for item in items if item.id in wanted]
        if not items:
            raise ValidationError(message="No portfolio items to analyze", error_code="EMPTY_PORTFOLIO")
        return items

    async def analyze_instrument(
        self,
        user: TokenData,
        subject_type: str,
        ticker: str,
        style: Optional[str] = None,
    ) -> InstrumentReport:
        kind = (subject_type or "").lower()
        if kind not in SUBJECT_TYPES:
            raise ValidationError(message=f"Unknown instrument kind: {subject_type}")
        instrument = self.catalog.get(kind, ticker)
        if instrument is None:
            raise ValidationError(
                message=f"Unknown {kind} ticker: {ticker}", error_code="UNKNOWN_TICKER"
            )

        async with self._exclusive(user.user_id, f"{kind}:{instrument.ticker}"):
            await self._gate(user)
            prompt = build_prompt(instrument, self.catalog.comparison_for(instrument), style)
            raw_text = await self.provider.complete(prompt)
            report = parse_instrument_response(
                raw_text, instrument.ticker, kind, canonical_style(style)
            )
            saved = await self.reports.save_report(user.user_id, report)
            await self.quota.increment(user.user_id)

        logger.info(
            f"Analyzed {kind} {instrument.ticker} for {user.user_id}",
            extra={"style": style, "parsed": report.error is None},
        )
        return saved

    async def analyze_portfolio(
        self,
        user: TokenData,
        style: Optional[str] = None,
        cash_amount: Optional[float] = None,
        item_ids: Optional[list[str]] = None,
    ) -> PortfolioReport:
        if cash_amount is not None and cash_amount < 0:
            raise ValidationError(message="cash_amount must not be negative")
        cash_amount = cash_amount or None
        items = await self._holdings(user.user_id, item_ids)

        async with self._exclusive(user.user_id, "portfolio"):
            await self._gate(user)
            prompt = build_portfolio_prompt(items, style, cash_amount)
            raw_text = await self.provider.complete(prompt)
            report = parse_portfolio_response(raw_text, canonical_style(style), cash_amount)
            saved = await self.reports.save_portfolio_report(user.user_id, report)
            await self.quota.increment(user.user_id)

        logger.info(
            f"Analyzed portfolio of {user.user_id}",
            extra={"items": len(items), "with_cash": cash_amount is not None},
        )
        return saved

    async def recommend_cash(
        self,
        user: TokenData,
        cash_amount: float,
        style: Optional[str] = None,
    ) -> CashRecommendation:
        """Suggest how to deploy idle cash. The result is not stored."""
        if cash_amount is None or cash_amount <= 0:
            raise ValidationError(message="cash_amount must be greater than 0")
        items = await self._holdings(user.user_id)

        async with self._exclusive(user.user_id, "cash"):
            await self._gate(user)
            prompt = build_cash_prompt(items, cash_amount, style)
            raw_text = await self.provider.complete(prompt)
            parsed = parse_portfolio_response(raw_text, canonical_style(style), cash_amount)
            await self.quota.increment(user.user_id)

        return CashRecommendation(
            cash_amount=cash_amount,
            style=canonical_style(style),
            suggestion=parsed.cash_suggestion or raw_text.strip(),
            raw_text=raw_text,
        )
