"""Analysis request schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class AnalysisRequest(BaseModel):
    style: Optional[str] = Field(default=None, description="Investment style, e.g. conservative")


class PortfolioAnalysisRequest(BaseModel):
    style: Optional[str] = None
    cash_amount: Optional[float] = Field(default=None, ge=0, description="Idle cash in KRW")
    item_ids: Optional[list[str]] = Field(default=None, description="Subset of holdings; all when omitted")


class CashRecommendationRequest(BaseModel):
    cash_amount: float = Field(..., gt=0)
    style: Optional[str] = None
