"""Per-user holdings ledger.

Holdings are enriched from the catalog when added (name, ETF flag,
dividend data, sector) and valued from their stored ``current_price``.
"""

from __future__ import annotations

from typing import Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from stockpick.catalog.store import CatalogStore
from stockpick.core.exceptions import ConflictError, NotFoundError, ValidationError
from stockpick.core.logging import get_logger
from stockpick.domain.instrument import Etf, Stock, normalize_ticker
from stockpick.schemas.portfolio import PortfolioItem, PortfolioTotals
from stockpick.schemas.reports import utcnow
from stockpick.store.base import DocumentStore, join_path


logger = get_logger("services.portfolio")

COMPUTED_FIELDS = {"cost_basis", "current_value", "return_amount", "return_rate"}
# Stocks paying a token dividend are not flagged as dividend holdings
STOCK_DIVIDEND_THRESHOLD = 0.5


def portfolio_collection(user_id: str) -> str:
    return join_path("users", user_id, "portfolio")


def item_path(user_id: str, item_id: str) -> str:
    return join_path(portfolio_collection(user_id), item_id)


def has_dividend(instrument: Stock | Etf) -> bool:
    dividend = instrument.dividend_yield or 0.0
    if isinstance(instrument, Etf):
        return dividend > 0
    return dividend > STOCK_DIVIDEND_THRESHOLD


def _document(item: PortfolioItem) -> dict:
    return item.model_dump(mode="json", exclude=COMPUTED_FIELDS)


def _require_positive(name: str, value: Optional[float]) -> None:
    if value is not None and value <= 0:
        raise ValidationError(message=f"{name} must be greater than 0", details={"field": name})


def compute_totals(items: Sequence[PortfolioItem]) -> PortfolioTotals:
    """Aggregate value and return; the rate is weighted by cost basis."""
    total_value = sum(item.current_value for item in items)
    total_cost = sum(item.cost_basis for item in items)
    total_return = total_value - total_cost
    rate = total_return / total_cost * 100 if total_cost > 0 else 0.0
    return PortfolioTotals(
        total_value=total_value,
        total_cost=total_cost,
        total_return_amount=total_return,
        total_return_rate=rate,
        item_count=len(items),
    )


class PortfolioLedger:
    """CRUD over a user's holdings."""

    def __init__(self, store: DocumentStore, catalog: CatalogStore):
        self.store = store
        self.catalog = catalog

    async def list_items(self, user_id: str) -> list[PortfolioItem]:
        """Holdings in the order they were added."""
        items: list[PortfolioItem] = []
        documents = await self.store.list(portfolio_collection(user_id), order_by="created_at")
        for document in documents:
            try:
                items.append(PortfolioItem.model_validate(document))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed portfolio item for {user_id}: {e}")
        return items

    async def get_item(self, user_id: str, item_id: str) -> PortfolioItem:
        document = await self.store.get(item_path(user_id, item_id))
        if document is None:
            raise NotFoundError(message=f"Portfolio item {item_id} not found")
        return PortfolioItem.model_validate(document)

    async def add_item(
        self,
        user_id: str,
        ticker: str,
        avg_cost: float,
        quantity: int,
        current_price: Optional[float] = None,
    ) -> PortfolioItem:
        ticker = normalize_ticker(ticker or "")
        if not ticker:
            raise ValidationError(message="Ticker is required")
        _require_positive("avg_cost", avg_cost)
        _require_positive("quantity", quantity)
        if current_price is not None and current_price < 0:
            raise ValidationError(message="current_price must not be negative")

        instrument = self.catalog.lookup(ticker)
        if instrument is None:
            raise ValidationError(
                message=f"Unknown ticker: {ticker}", error_code="UNKNOWN_TICKER"
            )

        existing = await self.list_items(user_id)
        if any(item.ticker == ticker for item in existing):
            raise ConflictError(
                message=f"{ticker} is already in the portfolio", error_code="DUPLICATE_TICKER"
            )

        if current_price is None:
            current_price = instrument.current_price or avg_cost

        item = PortfolioItem(
            ticker=ticker,
            name=instrument.name,
            avg_cost=avg_cost,
            quantity=quantity,
            current_price=current_price,
            is_etf=isinstance(instrument, Etf),
            has_dividend=has_dividend(instrument),
            dividend_yield=instrument.dividend_yield,
            sector=instrument.classification,
        )
        await self.store.set(item_path(user_id, item.id), _document(item))
        logger.info(f"Added {ticker} to portfolio of {user_id}", extra={"item_id": item.id})
        return item

    async def update_item(
        self,
        user_id: str,
        item_id: str,
        avg_cost: Optional[float] = None,
        quantity: Optional[int] = None,
        current_price: Optional[float] = None,
    ) -> PortfolioItem:
        _require_positive("avg_cost", avg_cost)
        _require_positive("quantity", quantity)
        if current_price is not None and current_price < 0:
            raise ValidationError(message="current_price must not be negative")

        item = await self.get_item(user_id, item_id)
        changes: dict = {"updated_at": utcnow()}
        if avg_cost is not None:
            changes["avg_cost"] = avg_cost
        if quantity is not None:
            changes["quantity"] = quantity
        if current_price is not None:
            changes["current_price"] = current_price

        instrument = self.catalog.lookup(item.ticker)
        if instrument is not None:
            changes["has_dividend"] = has_dividend(instrument)
            changes["dividend_yield"] = instrument.dividend_yield

        updated = PortfolioItem.model_validate({**item.model_dump(exclude=COMPUTED_FIELDS), **changes})
        await self.store.set(item_path(user_id, item_id), _document(updated), merge=True)
        return updated

    async def delete_item(self, user_id: str, item_id: str) -> None:
        deleted = await self.store.delete(item_path(user_id, item_id))
        if not deleted:
            raise NotFoundError(message=f"Portfolio item {item_id} not found")
        logger.info(f"Deleted portfolio item {item_id} of {user_id}")
