"""Portfolio Pydantic schemas for holdings, totals and API requests."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field, field_validator

from stockpick.domain.instrument import normalize_ticker

from .reports import utcnow


def new_item_id() -> str:
    return uuid4().hex


class PortfolioItem(BaseModel):
    """One holding in a user's portfolio ledger."""

    id: str = Field(default_factory=new_item_id)
    ticker: str
    name: str = ""
    avg_cost: float = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    current_price: float = Field(..., ge=0)
    is_etf: bool = False
    has_dividend: bool = False
    dividend_yield: float | None = None
    sector: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("ticker", mode="before")
    @classmethod
    def normalize(cls, v: object) -> object:
        return normalize_ticker(v) if isinstance(v, str) else v

    @computed_field
    @property
    def cost_basis(self) -> float:
        return self.avg_cost * self.quantity

    @computed_field
    @property
    def current_value(self) -> float:
        return self.current_price * self.quantity

    @computed_field
    @property
    def return_amount(self) -> float:
        return (self.current_price - self.avg_cost) * self.quantity

    @computed_field
    @property
    def return_rate(self) -> float:
        """Return in percent against the average cost."""
        return (self.current_price - self.avg_cost) / self.avg_cost * 100


class PortfolioTotals(BaseModel):
    total_value: float = 0.0
    total_cost: float = 0.0
    total_return_amount: float = 0.0
    total_return_rate: float = Field(default=0.0, description="Percent; 0 when the cost basis is 0")
    item_count: int = 0


class PortfolioItemCreate(BaseModel):
    """Add holding request."""

    ticker: str = Field(..., min_length=1, max_length=20)
    avg_cost: float = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    current_price: float | None = Field(default=None, ge=0)

    @field_validator("ticker", mode="before")
    @classmethod
    def normalize_symbol(cls, v: object) -> object:
        return normalize_ticker(v) if isinstance(v, str) else v


class PortfolioItemUpdate(BaseModel):
    """Update holding request. Omitted fields are left unchanged."""

    avg_cost: float | None = Field(default=None, gt=0)
    quantity: int | None = Field(default=None, gt=0)
    current_price: float | None = Field(default=None, ge=0)


class PortfolioResponse(BaseModel):
    items: list[PortfolioItem] = Field(default_factory=list)
    totals: PortfolioTotals = Field(default_factory=PortfolioTotals)
