"""Investor styles and the metric comparison helpers used in prompts."""

from __future__ import annotations

from enum import Enum


class InvestmentStyle(str, Enum):
    """Investor profile steering prompt emphasis."""

    CONSERVATIVE = "conservative"
    GROWTH = "growth"
    DIVIDEND = "dividend"
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"


STYLE_ALIASES: dict[str, InvestmentStyle] = {
    "conservative": InvestmentStyle.CONSERVATIVE,
    "stable": InvestmentStyle.CONSERVATIVE,
    "안정형": InvestmentStyle.CONSERVATIVE,
    "growth": InvestmentStyle.GROWTH,
    "성장형": InvestmentStyle.GROWTH,
    "dividend": InvestmentStyle.DIVIDEND,
    "income": InvestmentStyle.DIVIDEND,
    "배당형": InvestmentStyle.DIVIDEND,
    "aggressive": InvestmentStyle.AGGRESSIVE,
    "공격형": InvestmentStyle.AGGRESSIVE,
    "balanced": InvestmentStyle.BALANCED,
    "균형형": InvestmentStyle.BALANCED,
}

STYLE_NAMES: dict[InvestmentStyle, str] = {
    InvestmentStyle.CONSERVATIVE: "안정형",
    InvestmentStyle.GROWTH: "성장형",
    InvestmentStyle.DIVIDEND: "배당형",
    InvestmentStyle.AGGRESSIVE: "공격형",
    InvestmentStyle.BALANCED: "균형형",
}

GENERIC_STYLE_NAME = "일반"


def parse_style(value: str | InvestmentStyle | None) -> InvestmentStyle | None:
    """Resolve a style name or alias; unknown values give None, never an error."""
    if value is None:
        return None
    if isinstance(value, InvestmentStyle):
        return value
    return STYLE_ALIASES.get(str(value).strip().lower())


def style_name(style: InvestmentStyle | None, default: str = GENERIC_STYLE_NAME) -> str:
    if style is None:
        return default
    return STYLE_NAMES.get(style, default)


def percent_deviation(value: float | None, baseline: float | None) -> float | None:
    """(value - baseline) / baseline * 100, or None without a usable baseline."""
    if value is None or baseline is None or baseline == 0:
        return None
    return (value - baseline) / baseline * 100


def format_deviation(deviation: float) -> str:
    return f"{'+' if deviation > 0 else ''}{deviation:.1f}%"


def relative_word(deviation: float) -> str:
    return "높습니다" if deviation > 0 else "낮습니다"
