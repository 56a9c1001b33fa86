"""Prompt builders for instrument, portfolio and cash analysis."""

from .instrument import build_etf_prompt, build_prompt, build_stock_prompt, format_market_cap
from .portfolio import build_cash_prompt, build_portfolio_prompt, format_holding
from .styles import (
    InvestmentStyle,
    format_deviation,
    parse_style,
    percent_deviation,
    style_name,
)

__all__ = [
    "InvestmentStyle",
    "build_cash_prompt",
    "build_etf_prompt",
    "build_portfolio_prompt",
    "build_prompt",
    "build_stock_prompt",
    "format_deviation",
    "format_holding",
    "format_market_cap",
    "parse_style",
    "percent_deviation",
    "style_name",
]
