"""Structured AI report schemas.

One tagged Report type covers instrument and portfolio reports. Every
narrative section is present on the model (empty when the AI response did
not contain it) so consumers never branch on missing keys.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


class StyleFit(BaseModel):
    """Which investor profiles the AI considered this instrument suitable for."""

    conservative: bool = False
    growth: bool = False
    daytrading: bool = False


class Technicals(BaseModel):
    moving_avg: str = Field(default="", description="Moving-average note")
    macd: str = Field(default="", description="MACD note")
    rsi: str = Field(default="", description="RSI note")


class Recommendation(BaseModel):
    buy_range: str = Field(default="", description="Buy range, e.g. $170~$175")
    sell_suggestion: str = Field(default="", description="When or where to sell")


class InstrumentReport(BaseModel):
    """AI analysis of a single stock or ETF."""

    subject_type: Literal["stock", "etf"]
    ticker: str
    style: Optional[str] = Field(default=None, description="Investment style requested")
    created_at: datetime = Field(default_factory=utcnow)
    summary: str = ""
    financials: str = ""
    industry: str = ""
    style_fit: StyleFit = Field(default_factory=StyleFit)
    technical: Technicals = Field(default_factory=Technicals)
    recommendation: Recommendation = Field(default_factory=Recommendation)
    conclusion: str = ""
    raw_text: str = Field(default="", description="Unparsed AI response, kept for audit")
    error: Optional[str] = Field(
        default=None, description="Set when the response could not be structured"
    )
    saved_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PortfolioReport(BaseModel):
    """AI analysis of a user's whole portfolio (one latest per user)."""

    subject_type: Literal["portfolio"] = "portfolio"
    style: Optional[str] = None
    cash_amount: Optional[float] = None
    created_at: datetime = Field(default_factory=utcnow)
    summary: str = ""
    overweight: list[str] = Field(default_factory=list)
    underweight: list[str] = Field(default_factory=list)
    rebalance_advice: str = ""
    risk_analysis: str = ""
    cash_suggestion: Optional[str] = None
    raw_text: str = ""
    error: Optional[str] = None
    saved_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


Report = Annotated[Union[InstrumentReport, PortfolioReport], Field(discriminator="subject_type")]


class CashRecommendation(BaseModel):
    """Suggestions for deploying idle cash. Returned only, never persisted."""

    cash_amount: float
    style: Optional[str] = None
    suggestion: str = ""
    raw_text: str = ""
    created_at: datetime = Field(default_factory=utcnow)
