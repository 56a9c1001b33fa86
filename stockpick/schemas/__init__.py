"""Pydantic schemas for API requests, responses and stored documents."""

from .analysis import AnalysisRequest, CashRecommendationRequest, PortfolioAnalysisRequest
from .common import ErrorResponse, HealthResponse, MessageResponse
from .portfolio import (
    PortfolioItem,
    PortfolioItemCreate,
    PortfolioItemUpdate,
    PortfolioResponse,
    PortfolioTotals,
)
from .quota import QuotaLimitUpdate, QuotaRecord
from .reports import (
    CashRecommendation,
    InstrumentReport,
    PortfolioReport,
    Recommendation,
    Report,
    StyleFit,
    Technicals,
)

__all__ = [
    "AnalysisRequest",
    "CashRecommendation",
    "CashRecommendationRequest",
    "ErrorResponse",
    "HealthResponse",
    "InstrumentReport",
    "MessageResponse",
    "PortfolioAnalysisRequest",
    "PortfolioItem",
    "PortfolioItemCreate",
    "PortfolioItemUpdate",
    "PortfolioReport",
    "PortfolioResponse",
    "PortfolioTotals",
    "QuotaLimitUpdate",
    "QuotaRecord",
    "Recommendation",
    "Report",
    "StyleFit",
    "Technicals",
]
