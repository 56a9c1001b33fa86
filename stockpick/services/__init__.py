"""Domain services: quota, portfolio, reports and analysis."""

from .analysis import AnalysisService
from .portfolio import PortfolioLedger, compute_totals
from .quota import QuotaLedger
from .reports import ReportStore

__all__ = [
    "AnalysisService",
    "PortfolioLedger",
    "QuotaLedger",
    "ReportStore",
    "compute_totals",
]
