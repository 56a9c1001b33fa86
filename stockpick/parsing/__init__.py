"""AI response parsing."""

from .extractor import Extraction, SectionExtractor, SectionRule, Strategy, heading_pattern
from .reports import (
    NO_SECTIONS_NOTE,
    PARSE_FAILED_NOTE,
    parse_instrument_response,
    parse_portfolio_response,
    parse_ticker_list,
)

__all__ = [
    "NO_SECTIONS_NOTE",
    "PARSE_FAILED_NOTE",
    "Extraction",
    "SectionExtractor",
    "SectionRule",
    "Strategy",
    "heading_pattern",
    "parse_instrument_response",
    "parse_portfolio_response",
    "parse_ticker_list",
]
