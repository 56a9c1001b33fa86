"""Prompts for whole-portfolio analysis and idle-cash deployment."""

from __future__ import annotations

from typing import Sequence

from stockpick.schemas.portfolio import PortfolioItem

from .styles import InvestmentStyle, parse_style, style_name


PORTFOLIO_DEFAULT_STYLE = "균형형"


def _portfolio_style(style: str | InvestmentStyle | None) -> str:
    return style_name(parse_style(style), default=PORTFOLIO_DEFAULT_STYLE)


def format_holding(item: PortfolioItem) -> str:
    """One summary line per holding."""
    etf = " (ETF)" if item.is_etf else ""
    dividend = ""
    if item.has_dividend:
        yield_text = f"{item.dividend_yield:.1f}" if item.dividend_yield is not None else "?"
        dividend = f", 배당률 {yield_text}%"
    sign = "+" if item.return_rate > 0 else ""
    return (
        f"{item.ticker}{etf}: 평균단가 ${item.avg_cost:.2f}, 현재가 ${item.current_price:.2f}, "
        f"수익률 {sign}{item.return_rate:.2f}%{dividend}, 보유 수량 {item.quantity}주"
    )


def format_cash(amount: float) -> str:
    return f"예수금: {amount:,.0f}원"


def _header(items: Sequence[PortfolioItem], style_text: str, cash_amount: float | None) -> list[str]:
    parts = ["사용자의 포트폴리오는 다음과 같습니다:", ""]
    parts.extend(format_holding(item) for item in items)
    parts.extend(["", f"사용자 투자성향: {style_text}"])
    if cash_amount:
        parts.append(format_cash(cash_amount))
    parts.append("")
    return parts


def build_portfolio_prompt(
    items: Sequence[PortfolioItem],
    style: str | InvestmentStyle | None = None,
    cash_amount: float | None = None,
) -> str:
    """Render the portfolio analysis prompt.

    The cash deployment section and its output bullet are only present when
    a positive ``cash_amount`` is given.
    """
    style_text = _portfolio_style(style)
    parts = _header(items, style_text, cash_amount)

    parts += [
        "위 데이터를 바탕으로 아래 항목을 분석해주세요:",
        "",
        "1. 포트폴리오 종합 분석",
        "   - 전체 구성 평가 (업종/섹터 비중, 수익률, 리스크 등)",
        "   - 종목간 분산 정도와 시너지 효과 분석",
        "   - 투자 성향과의 적합도 평가",
        "",
        "2. 투자 비중 분석",
        "   - 과대 비중 종목 (ticker 형식으로 나열)",
        "   - 과소 비중 종목 (ticker 형식으로 나열)",
        "",
        "3. 리밸런싱 전략",
        "   - 포트폴리오 최적화를 위한 리밸런싱 제안",
        "   - 비중 조정이 필요한 종목과 목표 비중",
        "",
        "4. 리스크 분석",
        "   - 현재 포트폴리오의 주요 리스크 요인",
        "   - 시장 상황별 대응 전략",
        "",
    ]
    if cash_amount:
        parts += [
            "5. 예수금 투자 제안",
            "   - 추가 매수 추천 종목 (기존 보유 종목 중)",
            "   - 신규 추천 종목 (다양성 향상을 위한 제안)",
            "   - 투자 성향에 맞는 자산 배분 비율",
            "",
        ]

    parts += [
        "분석 결과는 아래 제목을 그대로 사용하여 구조화해 주세요:",
        "- 요약 분석: 전체 포트폴리오에 대한 종합적인 평가",
        "- 과대 비중 종목: ticker만 쉼표로 구분 (없으면 없음)",
        "- 과소 비중 종목: ticker만 쉼표로 구분 (없으면 없음)",
        "- 리밸런싱 전략: 구체적인 제안",
        "- 리스크 분석: 주요 리스크와 대응 방안",
    ]
    if cash_amount:
        parts.append("- 예수금 투자 제안: 구체적인 종목 추천과 비율")

    parts += ["", f"투자 성향({style_text})을 고려하여 맞춤형 분석을 제공해주세요."]
    return "\n".join(parts)


def build_cash_prompt(
    items: Sequence[PortfolioItem],
    cash_amount: float,
    style: str | InvestmentStyle | None = None,
) -> str:
    """Render the dedicated idle-cash recommendation prompt."""
    style_text = _portfolio_style(style)
    parts = _header(items, style_text, cash_amount)

    parts += [
        "위 데이터를 바탕으로 다음 항목을 분석해주세요:",
        "",
        "1. 예수금 투자 추천",
        "   - 추가 매수하면 좋을 기존 보유 종목과 각각의 비중(%)",
        "   - 다양성 향상을 위한 신규 종목 추천과 각각의 비중(%)",
        "   - 투자 성향에 맞는 자산 배분 제안 (주식/ETF/채권 등)",
        "",
        "2. 추천 근거",
        "   - 각 추천 종목에 대한 간략한 선정 이유",
        "   - 현재 포트폴리오와의 시너지 효과",
        "   - 추천 종목의 예상 리스크와 수익 가능성",
        "",
        f"투자 성향({style_text})을 고려하여 맞춤형 제안을 제공해주세요.",
        "특히 안정형 투자자는 리스크 관리를, 공격형 투자자는 성장 가능성을 중시하여 추천해주세요.",
        "",
        "결과는 다음과 같은 형식으로 구조화하여 제시해주세요:",
        "- 추가 매수 추천 종목 (ticker + 비중 %)",
        "- 신규 추천 종목 (ticker + 비중 %)",
        "- 추천 이유와 예상 효과",
    ]
    return "\n".join(parts)
