"""Turn raw AI responses into structured reports.

Both parsers are total: whatever the input, they return a well-formed
report and never raise. When nothing recognizable is found the report
carries ``error`` so callers can fall back to showing ``raw_text``.
"""

from __future__ import annotations

import re
from typing import Any

from stockpick.core.logging import get_logger
from stockpick.schemas.reports import (
    InstrumentReport,
    PortfolioReport,
    Recommendation,
    StyleFit,
    Technicals,
)

from .extractor import SectionExtractor, SectionRule, Strategy, heading_pattern


logger = get_logger("parsing")

NO_SECTIONS_NOTE = "No recognizable sections in AI response; showing raw text"
PARSE_FAILED_NOTE = "Failed to parse AI response"

# $170, $170.5, $170~$175, $170 - $175.25
PRICE_RANGE = re.compile(r"\$[0-9]+(?:\.[0-9]+)?(?:\s*[~-]\s*\$[0-9]+(?:\.[0-9]+)?)?")


# =============================================================================
# INSTRUMENT REPORTS (line scan)
# =============================================================================

INSTRUMENT_RULES: tuple[SectionRule, ...] = (
    SectionRule(
        "summary",
        heading_pattern(["요약", "개요"], ["summary", "overview"]),
    ),
    SectionRule(
        "financials",
        heading_pattern(
            ["재무 분석", "배당 분석", "총보수율"],
            ["financials?", "financial analysis", "dividend analysis", "costs?"],
        ),
    ),
    SectionRule(
        "industry",
        heading_pattern(
            ["산업 분석", "섹터 분석", "테마 분석", "섹터 비교", "구성 및 전략"],
            ["industry", "sector", "theme", "composition"],
        ),
    ),
    SectionRule(
        "style_fit",
        heading_pattern(
            ["투자 스타일", "적합한 투자자"],
            ["style fit", "investment style", "suitable investors?"],
        ),
    ),
    SectionRule(
        "technical",
        heading_pattern(["기술적 분석", "차트 분석"], ["technicals?", "chart analysis"]),
    ),
    SectionRule(
        "buy",
        heading_pattern(
            ["매수 구간", "매수 타이밍", "매수 포인트", "매수 가격대"],
            ["buy range", "buy zone", "entry"],
        ),
        capture=PRICE_RANGE,
    ),
    SectionRule(
        "sell",
        heading_pattern(
            ["매도 타이밍", "매도 포인트", "매도 고려"],
            ["sell"],
        ),
    ),
    SectionRule(
        "conclusion",
        heading_pattern(
            ["종합 의견", "결론", "투자 제안", "종합 평가"],
            ["conclusion", "verdict"],
        ),
    ),
)

_instrument_extractor = SectionExtractor(INSTRUMENT_RULES, Strategy.LINE_SCAN)

SUMMARY_FALLBACK = re.compile(r"(?:요약|개요|summary|overview)[^\n]*\n+([^#]+)", re.IGNORECASE)
CONCLUSION_FALLBACK = re.compile(r"(?:결론|종합\s*의견|conclusion)[^\n]*\n+([^#]+)", re.IGNORECASE)

STYLE_TOKENS: dict[str, tuple[str, ...]] = {
    "conservative": ("안정형", "conservative"),
    "growth": ("성장형", "growth"),
    "daytrading": ("단타형", "day trading", "daytrading", "day-trading"),
}
AFFIRMATION = re.compile(r"적합|추천|suitable|recommended", re.IGNORECASE)
NEGATION = re.compile(
    r"부적합|비추천|적합하지|추천하지|not\s+(?:suitable|recommended)|unsuitable",
    re.IGNORECASE,
)

MACD = re.compile(r"MACD", re.IGNORECASE)
MOVING_AVERAGE = re.compile(r"이동\s*평균|(?<![A-Za-z])[ES]?MA(?![A-Za-z])|moving\s+average|골든\s*크로스|데드\s*크로스")
RSI = re.compile(r"RSI", re.IGNORECASE)


def _style_fit(lines: list[str]) -> StyleFit:
    flags = {name: False for name in STYLE_TOKENS}
    for line in lines:
        if not AFFIRMATION.search(line) or NEGATION.search(line):
            continue
        lowered = line.lower()
        for name, tokens in STYLE_TOKENS.items():
            if any(token in lowered for token in tokens):
                flags[name] = True
    return StyleFit(**flags)


def _technicals(lines: list[str]) -> Technicals:
    # MACD first: "MACD" also contains "MA"
    buckets: dict[str, list[str]] = {"moving_avg": [], "macd": [], "rsi": []}
    for line in lines:
        if MACD.search(line):
            buckets["macd"].append(line)
        elif MOVING_AVERAGE.search(line):
            buckets["moving_avg"].append(line)
        elif RSI.search(line):
            buckets["rsi"].append(line)
    return Technicals(**{k: " ".join(v).strip() for k, v in buckets.items()})


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


def parse_instrument_response(
    raw_text: Any,
    ticker: str,
    subject_type: str = "stock",
    style: str | None = None,
) -> InstrumentReport:
    """Parse an instrument analysis response into an InstrumentReport."""
    text = _as_text(raw_text)
    kind = subject_type if subject_type in ("stock", "etf") else "stock"
    ticker = _as_text(ticker).strip().upper()

    try:
        extraction = _instrument_extractor.extract(text)

        summary = extraction.text("summary")
        conclusion = extraction.text("conclusion")
        if not summary:
            match = SUMMARY_FALLBACK.search(text)
            if match:
                summary = match.group(1).strip()
        if not conclusion:
            match = CONCLUSION_FALLBACK.search(text)
            if match:
                conclusion = match.group(1).strip()

        return InstrumentReport(
            subject_type=kind,
            ticker=ticker,
            style=style,
            summary=summary,
            financials=extraction.text("financials"),
            industry=extraction.text("industry"),
            style_fit=_style_fit(extraction.lines("style_fit")),
            technical=_technicals(extraction.lines("technical")),
            recommendation=Recommendation(
                buy_range=extraction.text("buy"),
                sell_suggestion=extraction.text("sell"),
            ),
            conclusion=conclusion,
            raw_text=text,
            error=None if extraction.found else NO_SECTIONS_NOTE,
        )
    except Exception as e:
        logger.warning(f"Instrument response parsing failed for {ticker}: {e}")
        return InstrumentReport(
            subject_type=kind,
            ticker=ticker,
            style=style,
            raw_text=text,
            error=f"{PARSE_FAILED_NOTE}: {e}",
        )


# =============================================================================
# PORTFOLIO REPORTS (region regex)
# =============================================================================

PORTFOLIO_RULES: tuple[SectionRule, ...] = (
    SectionRule(
        "summary",
        heading_pattern(["요약 분석", "포트폴리오 종합 분석"], ["overall summary", "summary"]),
    ),
    SectionRule(
        "overweight",
        heading_pattern(["과대 비중"], ["overweight(?:\\s+holdings)?"]),
        inline=True,
    ),
    SectionRule(
        "underweight",
        heading_pattern(["과소 비중"], ["underweight(?:\\s+holdings)?"]),
        inline=True,
    ),
    SectionRule(
        "rebalance_advice",
        heading_pattern(["리밸런싱 전략"], ["rebalanc\\w*"]),
    ),
    SectionRule(
        "risk_analysis",
        heading_pattern(["리스크 분석"], ["risk analysis", "risks?"]),
    ),
    SectionRule(
        "cash_suggestion",
        heading_pattern(["예수금 투자 제안", "예수금 투자 추천"], ["cash (?:deployment|suggestions?)"]),
    ),
)

_portfolio_extractor = SectionExtractor(PORTFOLIO_RULES, Strategy.REGION)

PLACEHOLDER_TOKENS = frozenset({"", "NONE", "N/A", "NA", "NULL", "-", "없음", "해당", "해당없음"})
TICKER_TOKEN = re.compile(r"^[A-Z][A-Z0-9.\-]{0,9}$")
_LIST_SPLIT = re.compile(r"[,;\n、]")
_TOKEN_STRIP = "-*•·`'\"[]() \t"


def parse_ticker_list(text: str) -> list[str]:
    """Comma, semicolon or newline separated tickers, upper-cased, placeholders removed."""
    tickers: list[str] = []
    for raw in _LIST_SPLIT.split(text or ""):
        token = raw.strip(_TOKEN_STRIP).upper()
        if token in PLACEHOLDER_TOKENS:
            continue
        word = token.split()[0].strip(_TOKEN_STRIP + ":")
        if word in PLACEHOLDER_TOKENS or not TICKER_TOKEN.match(word):
            continue
        if word not in tickers:
            tickers.append(word)
    return tickers


def parse_portfolio_response(
    raw_text: Any,
    style: str | None = None,
    cash_amount: float | None = None,
) -> PortfolioReport:
    """Parse a portfolio analysis response into a PortfolioReport."""
    text = _as_text(raw_text)

    try:
        extraction = _portfolio_extractor.extract(text)
        cash = extraction.text("cash_suggestion", sep="\n")

        return PortfolioReport(
            style=style,
            cash_amount=cash_amount,
            summary=extraction.text("summary", sep="\n"),
            overweight=parse_ticker_list(extraction.text("overweight", sep="\n")),
            underweight=parse_ticker_list(extraction.text("underweight", sep="\n")),
            rebalance_advice=extraction.text("rebalance_advice", sep="\n"),
            risk_analysis=extraction.text("risk_analysis", sep="\n"),
            cash_suggestion=cash or None,
            raw_text=text,
            error=None if extraction.found else NO_SECTIONS_NOTE,
        )
    except Exception as e:
        logger.warning(f"Portfolio response parsing failed: {e}")
        return PortfolioReport(
            style=style,
            cash_amount=cash_amount,
            raw_text=text,
            error=f"{PARSE_FAILED_NOTE}: {e}",
        )
