"""Instrument domain models.

Type-safe representations of the static stock and ETF catalog records.
Instruments are read-only: the application never creates or mutates them.
"""

from __future__ import annotations

import math
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


InstrumentKind = Literal["stock", "etf"]

# Numeric metrics that can be range-filtered, per instrument kind
STOCK_METRICS: tuple[str, ...] = ("per", "roe", "market_cap", "dividend_yield", "beta")
ETF_METRICS: tuple[str, ...] = ("dividend_yield", "expense_ratio", "aum")

METRICS_BY_KIND: dict[str, tuple[str, ...]] = {
    "stock": STOCK_METRICS,
    "etf": ETF_METRICS,
}


def normalize_ticker(value: str) -> str:
    """Canonical ticker form: stripped, upper-case."""
    return value.strip().upper()


class _InstrumentBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    ticker: str = Field(..., min_length=1, description="Ticker symbol (uppercase)")
    name: str = Field(default="", description="Display name")
    current_price: float | None = Field(None, ge=0, description="Last catalog price (USD)")
    dividend_yield: float | None = Field(None, description="Dividend yield (%)")

    @field_validator("ticker")
    @classmethod
    def canonical_ticker(cls, v: str) -> str:
        return normalize_ticker(v)

    def metric(self, name: str) -> float | None:
        """Numeric metric by name; None when absent or not a finite number."""
        value = getattr(self, name, None)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if math.isnan(value):
            return None
        return float(value)


class Stock(_InstrumentBase):
    """A stock catalog record."""

    kind: Literal["stock"] = "stock"
    sector: str = Field(default="", description="Sector (classification)")
    industry: str | None = Field(None, description="Industry")
    per: float | None = Field(None, description="Price/earnings ratio")
    roe: float | None = Field(None, description="Return on equity (%)")
    market_cap: float | None = Field(None, ge=0, description="Market cap (billions USD)")
    beta: float | None = Field(None, description="Beta vs. market")

    @computed_field
    @property
    def classification(self) -> str:
        return self.sector

    @computed_field
    @property
    def is_etf(self) -> bool:
        return False


class Etf(_InstrumentBase):
    """An ETF catalog record."""

    kind: Literal["etf"] = "etf"
    theme: str = Field(default="", description="Theme (classification)")
    expense_ratio: float | None = Field(None, ge=0, description="Expense ratio (%)")
    aum: float | None = Field(None, ge=0, description="Assets under management (millions USD)")
    is_leveraged: bool = Field(default=False, description="Leveraged or inverse product")
    top_holdings: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def classification(self) -> str:
        return self.theme

    @computed_field
    @property
    def is_etf(self) -> bool:
        return True


Instrument = Annotated[Union[Stock, Etf], Field(discriminator="kind")]


class SectorAverage(BaseModel):
    """Comparison baseline for one sector or ETF theme.

    Every metric is optional; prompts omit comparisons against a missing
    or zero baseline.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    per: float | None = None
    roe: float | None = None
    dividend_yield: float | None = None
    market_cap: float | None = None
    beta: float | None = None
    expense_ratio: float | None = None
    aum: float | None = None
