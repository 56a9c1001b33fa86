"""Prompts for single stock and ETF analysis.

Prompts are deterministic: the same instrument, baseline and style always
render the same text. Section headings in the requested outline are the
ones the response parser looks for.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable

from stockpick.domain.instrument import Etf, SectorAverage, Stock

from .styles import (
    InvestmentStyle,
    format_deviation,
    parse_style,
    percent_deviation,
    relative_word,
    style_name,
)


MISSING = "정보 없음"
RULE = "-" * 67

REPORT_SCHEMA: dict = {
    "summary": "string",
    "financials": "string",
    "industry": "string",
    "styleFit": {"안정형": "boolean", "성장형": "boolean", "단타형": "boolean"},
    "technical": {"movingAvg": "string", "macd": "string", "rsi": "string"},
    "recommendation": {"buyRange": "string ($000~$000)", "sellSuggestion": "string"},
    "conclusion": "string",
}


# =============================================================================
# FORMATTING
# =============================================================================


def _number(value: float | None, digits: int, suffix: str = "") -> str:
    if value is None:
        return MISSING
    return f"{value:.{digits}f}{suffix}"


def format_market_cap(billions: float | None) -> str:
    """Market cap given in billions of USD."""
    if not billions:
        return MISSING
    if billions >= 1000:
        return f"${billions / 1000:.2f}조 달러"
    if billions >= 1:
        return f"${billions:.2f}십억 달러"
    return f"${billions * 1000:.2f}백만 달러"


def format_aum(millions: float | None) -> str:
    """AUM given in millions of USD."""
    if not millions:
        return MISSING
    if millions >= 1000:
        return f"${millions / 1000:.2f}B"
    return f"${millions:.0f}M"


@dataclass(frozen=True)
class _Metric:
    field: str
    label: str
    subject: str  # label with its Korean subject particle
    render: Callable[[float | None], str]


def _comparison(metric: _Metric, value: float | None, baseline: float | None, word: str) -> str:
    deviation = percent_deviation(value, baseline)
    if deviation is None:
        return ""
    return f" ({word} 평균: {metric.render(baseline)} → {format_deviation(deviation)})"


def _deviations(
    metrics: tuple[_Metric, ...],
    subject: Stock | Etf,
    baseline: SectorAverage | None,
) -> dict[str, float]:
    """Deviation per metric, only for metrics with a usable baseline."""
    result: dict[str, float] = {}
    if baseline is None:
        return result
    for metric in metrics:
        deviation = percent_deviation(subject.metric(metric.field), getattr(baseline, metric.field))
        if deviation is not None:
            result[metric.field] = deviation
    return result


def _schema_block() -> str:
    return json.dumps(REPORT_SCHEMA, ensure_ascii=False, indent=2)


def _outline(kind_word: str, second: tuple[str, list[str]], third: tuple[str, list[str]], name: str) -> list[str]:
    sections: list[tuple[str, list[str]]] = [
        ("요약", [f"{kind_word}의 전반적인 특징과 투자 가치를 간략히 설명"]),
        second,
        third,
        ("적합한 투자자", [
            "안정형, 성장형, 단타형 투자자 각각에 대해 한 줄씩 '적합' 또는 '부적합'으로 평가",
        ]),
        ("기술적 분석", [
            "이동평균선 상황 (골든크로스/데드크로스 등) 한 줄",
            "MACD 지표 분석 한 줄",
            "RSI 과매수/과매도 상황 한 줄",
        ]),
        ("매수 구간", ["적정 매수 가격대를 $000~$000 형식으로 제시"]),
        ("매도 타이밍", ["매도 고려 시점 또는 가격대"]),
        ("종합 의견", [
            f"{name} 투자자에게 이 {kind_word}이(가) 적합한지 명확히 평가",
            "잠재적 리스크 요인과 중장기 전망",
        ]),
    ]
    lines = ["분석 보고서는 아래 번호와 섹션 제목을 그대로 사용해 작성해 주세요:"]
    for number, (title, bullets) in enumerate(sections, start=1):
        lines.append(f"{number}. {title}")
        lines.extend(f"   - {bullet}" for bullet in bullets)
    return lines


def _closing() -> list[str]:
    return [
        "",
        "각 섹션은 아래 JSON 구조의 필드에 대응합니다. 구조를 참고하여 빠짐없이 작성해 주세요:",
        _schema_block(),
        "",
        "가능한 많은 수치와 데이터를 포함해서 분석해 주세요.",
    ]


# =============================================================================
# STOCKS
# =============================================================================

STOCK_METRICS: tuple[_Metric, ...] = (
    _Metric("per", "PER", "PER이", lambda v: _number(v, 1)),
    _Metric("roe", "ROE", "ROE가", lambda v: _number(v, 1, "%")),
    _Metric("dividend_yield", "배당률", "배당률이", lambda v: _number(v, 2, "%")),
)

STOCK_GUIDELINES: dict[InvestmentStyle, dict[str, object]] = {
    InvestmentStyle.CONSERVATIVE: {
        "per": "안정형 투자자에게는 적정 밸류에이션이 중요합니다",
        "roe": "안정적인 수익성이 중요합니다",
        "dividend_yield": "안정적인 배당 수익도 고려해주세요",
        "extra": [
            "변동성과 리스크가 낮은지 특히 강조해서 평가해주세요",
            "베타 수치가 1보다 낮으면 시장 대비 변동성이 낮다는 것을 의미하니 이를 해석해주세요",
            "매수/매도 전략은 안정적인 장기 보유를 전제로 제안해주세요",
        ],
    },
    InvestmentStyle.GROWTH: {
        "per": "성장주는 PER이 높더라도 성장 가능성이 있다면 긍정적으로 평가할 수 있습니다",
        "roe": "높은 자본수익률은 성장 기업의 중요한 지표입니다",
        "dividend_yield": "성장형 투자자는 배당보다 주가 상승 가능성에 더 관심이 있습니다",
        "extra": [
            "회사의 미래 성장 가능성과 혁신성을 강조해서 평가해주세요",
            "현재 주가보다 미래 성장 잠재력에 더 무게를 두어 분석해주세요",
            "시장 트렌드와 미래 산업 전망을 고려해 분석해주세요",
        ],
    },
    InvestmentStyle.DIVIDEND: {
        "per": "배당형 투자자는 밸류에이션 대비 배당 수익률이 중요합니다",
        "roe": "안정적인 수익성이 꾸준한 배당의 원천입니다",
        "dividend_yield": "배당률이 높고 지속가능한지가 핵심입니다",
        "extra": [
            "배당 성장률, 배당 지속성, 페이아웃 비율 등을 심층 분석해주세요",
            "배당금이 안정적으로 유지되거나 성장할 가능성이 있는지 평가해주세요",
            "배당금 재투자 관점에서 복리 효과를 고려한 장기 수익률도 계산해주세요",
        ],
    },
    InvestmentStyle.AGGRESSIVE: {
        "per": "공격형 투자자는 고성장 가능성이 있다면 높은 밸류에이션도 받아들일 수 있습니다",
        "roe": "높은 자본수익률은 주가 상승 가능성을 시사합니다",
        "dividend_yield": "공격형 투자자는 배당보다 자본이득에 관심이 많습니다",
        "extra": [
            "단기적 모멘텀과 기술적 지표를 더 중요하게 다루어주세요",
            "변동성이 크더라도 고수익 가능성이 있는지 평가해주세요",
            "기술적 분석을 통한 단기 매매 전략을 제시해주세요",
            "섹터 내 파괴적 혁신 가능성이나 게임체인저 요소가 있는지 살펴봐주세요",
        ],
    },
}

GENERIC_STOCK_GUIDELINES = [
    "해당 종목의 전반적인 투자 가치를 평가해주세요",
    "PER, ROE, 배당률 등의 지표를 종합적으로 분석해주세요",
    "해당 종목이 어떤 유형의 투자자에게 적합한지 알려주세요",
    "현재 주가 대비 매수/매도 타이밍을 제안해주세요",
]


def _style_guidelines(
    style: InvestmentStyle | None,
    guidelines: dict[InvestmentStyle, dict[str, object]],
    generic: list[str],
    metrics: tuple[_Metric, ...],
    deviations: dict[str, float],
    kind_word: str,
    baseline_word: str,
) -> list[str]:
    lines = ["성향 기반 분석 지침:"]
    rules = guidelines.get(style) if style is not None else None
    if rules is None:
        lines.extend(f"• {line}" for line in generic)
        return lines

    lines.append(f"• {style_name(style)} 투자자에게 적합한 {kind_word}인지 평가해주세요")
    for metric in metrics:
        if metric.field not in deviations or metric.field not in rules:
            continue
        position = relative_word(deviations[metric.field])
        lines.append(f"• {metric.subject} {baseline_word} 평균보다 {position} - {rules[metric.field]}")
    lines.extend(f"• {line}" for line in rules.get("extra", []))
    return lines


def build_stock_prompt(
    stock: Stock,
    sector_average: SectorAverage | None,
    style: str | InvestmentStyle | None = None,
) -> str:
    """Render the analysis prompt for one stock."""
    resolved = parse_style(style)
    name = style_name(resolved)
    deviations = _deviations(STOCK_METRICS, stock, sector_average)

    per, roe, dividend = STOCK_METRICS

    def clause(metric: _Metric) -> str:
        if sector_average is None:
            return ""
        return _comparison(metric, stock.metric(metric.field), getattr(sector_average, metric.field), "섹터")

    parts: list[str] = [
        "안녕하세요! 당신은 주식 분석에 전문성을 갖춘 투자 애널리스트입니다. "
        "아래 주어진 종목 정보와 지침에 따라 전문적인 분석 보고서를 작성해주세요.",
        "",
        f"분석 대상 종목: {stock.ticker} ({stock.name})",
        RULE,
        f"• 섹터: {stock.sector or MISSING}",
        f"• 산업: {stock.industry or MISSING}",
        f"• 시가총액: {format_market_cap(stock.market_cap)}",
        f"• 현재가: {'$' + _number(stock.current_price, 2) if stock.current_price is not None else MISSING}",
        f"• PER: {per.render(stock.per)}{clause(per)}",
        f"• ROE: {roe.render(stock.roe)}{clause(roe)}",
        f"• 배당률: {dividend.render(stock.dividend_yield)}{clause(dividend)}",
        f"• 베타: {_number(stock.beta, 2)}",
        "",
        f"투자 성향: {name}",
        RULE,
    ]
    parts.extend(
        _style_guidelines(
            resolved, STOCK_GUIDELINES, GENERIC_STOCK_GUIDELINES,
            STOCK_METRICS, deviations, "종목", "섹터",
        )
    )
    parts.append("")
    parts.extend(
        _outline(
            "종목",
            ("재무 분석", [
                "PER, ROE 등의 주요 재무지표 해석",
                "해당 지표가 투자 가치에 어떤 의미를 갖는지 설명",
            ]),
            ("섹터 비교 분석", [
                "이 종목의 지표가 섹터 평균과 비교해 어떤 의미를 갖는지",
                "경쟁사 대비 강점과 약점",
            ]),
            name,
        )
    )
    parts.extend(_closing())
    return "\n".join(parts)


# =============================================================================
# ETFS
# =============================================================================

ETF_METRICS: tuple[_Metric, ...] = (
    _Metric("expense_ratio", "비용 비율", "비용 비율이", lambda v: _number(v, 2, "%")),
    _Metric("dividend_yield", "배당 수익률", "배당 수익률이", lambda v: _number(v, 2, "%")),
    _Metric("aum", "자산 규모", "자산 규모가", format_aum),
)

ETF_GUIDELINES: dict[InvestmentStyle, dict[str, object]] = {
    InvestmentStyle.CONSERVATIVE: {
        "expense_ratio": "장기 보유 시 비용 차이가 수익률에 누적됩니다",
        "aum": "자산 규모가 클수록 유동성과 상장 유지 안정성이 높습니다",
        "extra": [
            "변동성이 낮고 안정적인 수익을 제공하는지 분석해주세요",
            "다른 자산과의 상관관계와 분산효과를 고려해주세요",
            "매수/매도 전략은 안정적인 장기 보유를 전제로 제안해주세요",
        ],
    },
    InvestmentStyle.GROWTH: {
        "expense_ratio": "성장 테마 ETF는 비용 대비 기대 수익을 함께 보아야 합니다",
        "extra": [
            "성장 가능성이 높은 산업/섹터에 투자하는지 분석해주세요",
            "수익률의 과거 트렌드와 미래 전망을 평가해주세요",
            "매수/매도 전략은 중장기적 성장을 목표로 제안해주세요",
        ],
    },
    InvestmentStyle.DIVIDEND: {
        "dividend_yield": "배당 수익률의 수준과 지속성이 핵심입니다",
        "expense_ratio": "비용이 배당 수익을 잠식하지 않는지 확인해주세요",
        "extra": [
            "배당 수익률, 배당 성장률, 배당 지속성을 심층 분석해주세요",
            "배당 지급 주기와 배당금 재투자 효과를 평가해주세요",
            "매수/매도 전략은 장기적인 배당 수익을 목표로 제안해주세요",
        ],
    },
    InvestmentStyle.AGGRESSIVE: {
        "expense_ratio": "공격형 투자자는 높은 비용도 초과 수익 가능성으로 정당화할 수 있습니다",
        "extra": [
            "초과 수익 가능성과 그에 따른 리스크를 분석해주세요",
            "레버리지나 특정 산업에 집중된 ETF인 경우 위험도를 설명해주세요",
            "단기적 모멘텀과 기술적 지표를 더 중요하게 다루어주세요",
            "매수/매도 전략은 단기~중기 성과를 목표로 제안해주세요",
        ],
    },
}

GENERIC_ETF_GUIDELINES = [
    "해당 ETF의 전반적인 투자 가치를 평가해주세요",
    "ETF의 구성, 전략, 비용을 종합적으로 분석해주세요",
    "해당 ETF가 어떤 유형의 투자자에게 적합한지 알려주세요",
    "현재 가격 대비 매수/매도 타이밍을 제안해주세요",
]


def build_etf_prompt(
    etf: Etf,
    theme_average: SectorAverage | None,
    style: str | InvestmentStyle | None = None,
) -> str:
    """Render the analysis prompt for one ETF."""
    resolved = parse_style(style)
    name = style_name(resolved)
    deviations = _deviations(ETF_METRICS, etf, theme_average)

    expense, dividend, aum = ETF_METRICS

    def clause(metric: _Metric) -> str:
        if theme_average is None:
            return ""
        return _comparison(metric, etf.metric(metric.field), getattr(theme_average, metric.field), "테마")

    holdings = ", ".join(etf.top_holdings) if etf.top_holdings else MISSING

    parts: list[str] = [
        "안녕하세요! 당신은 ETF 분석에 전문성을 갖춘 투자 애널리스트입니다. "
        "아래 주어진 ETF 정보와 지침에 따라 전문적인 분석 보고서를 작성해주세요.",
        "",
        f"분석 대상 ETF: {etf.ticker} ({etf.name})",
        RULE,
        "• 유형: ETF" + (" (레버리지/인버스)" if etf.is_leveraged else ""),
        f"• 테마/섹터: {etf.theme or MISSING}",
        f"• 자산 규모: {aum.render(etf.aum)}{clause(aum)}",
        f"• 현재가: {'$' + _number(etf.current_price, 2) if etf.current_price is not None else MISSING}",
        f"• 비용 비율: {expense.render(etf.expense_ratio)}{clause(expense)}",
        f"• 배당 수익률: {dividend.render(etf.dividend_yield)}{clause(dividend)}",
        f"• 상위 종목: {holdings}",
        "",
        f"투자 성향: {name}",
        RULE,
    ]
    parts.extend(
        _style_guidelines(
            resolved, ETF_GUIDELINES, GENERIC_ETF_GUIDELINES,
            ETF_METRICS, deviations, "ETF", "테마",
        )
    )
    parts.append("")
    parts.extend(
        _outline(
            "ETF",
            ("구성 및 전략 분석", [
                "ETF의 투자 전략 및 구성 특징",
                "주요 편입 종목 및 섹터 비중 분석",
            ]),
            ("비용 및 배당 분석", [
                "비용 비율 및 배당 수익률 평가",
                "유사 ETF 대비 비용 효율성",
            ]),
            name,
        )
    )
    parts.extend(_closing())
    return "\n".join(parts)


def build_prompt(
    subject: Stock | Etf,
    comparison: SectorAverage | None,
    style: str | InvestmentStyle | None = None,
) -> str:
    """Dispatch to the stock or ETF prompt builder."""
    if isinstance(subject, Etf):
        return build_etf_prompt(subject, comparison, style)
    return build_stock_prompt(subject, comparison, style)
