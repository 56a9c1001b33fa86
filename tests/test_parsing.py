"""Tests for AI response parsing."""

from __future__ import annotations

import pytest

from stockpick.parsing import (
    parse_instrument_response,
    parse_portfolio_response,
    parse_ticker_list,
)
from stockpick.parsing.extractor import SectionExtractor, SectionRule, Strategy, heading_pattern
from stockpick.parsing.reports import NO_SECTIONS_NOTE


class TestInstrumentParsing:
    """Tests for parse_instrument_response."""

    def test_summary_and_conclusion(self):
        report = parse_instrument_response("요약\n분석 내용입니다\n결론\n최종 의견입니다", "aapl")

        assert report.ticker == "AAPL"
        assert report.subject_type == "stock"
        assert report.summary == "분석 내용입니다"
        assert report.conclusion == "최종 의견입니다"
        assert report.financials == ""
        assert report.industry == ""
        assert report.recommendation.buy_range == ""
        assert report.technical.macd == ""
        assert report.error is None

    def test_buy_range_keeps_only_the_price(self):
        report = parse_instrument_response("매수 구간은 $170~$175 입니다", "MSFT")
        assert report.recommendation.buy_range == "$170~$175"

    def test_buy_range_on_following_line(self):
        report = parse_instrument_response("6. 매수 구간\n지지선 부근인 $98.5 - $101 에서 매수", "KO")
        assert report.recommendation.buy_range == "$98.5 - $101"

    def test_full_stock_response(self, stock_response):
        report = parse_instrument_response(stock_response, "AAPL", "stock", "안정형")

        assert report.style == "안정형"
        assert report.summary == "애플은 견고한 생태계를 갖춘 기술 대형주입니다."
        assert "PER 29.5" in report.financials
        assert "ROE 147%" in report.financials
        assert report.industry == "섹터 평균 대비 밸류에이션 부담이 적습니다."
        assert report.style_fit.conservative is True
        assert report.style_fit.growth is True
        assert report.style_fit.daytrading is False
        assert "골든크로스" in report.technical.moving_avg
        assert report.technical.macd.startswith("- MACD")
        assert "58" in report.technical.rsi
        assert report.recommendation.buy_range == "$180~$185"
        assert report.recommendation.sell_suggestion == "$220 부근에서 일부 차익 실현을 고려하세요."
        assert report.conclusion == "장기 보유에 적합한 우량주입니다."
        assert report.raw_text == stock_response
        assert report.error is None

    def test_macd_line_is_not_a_moving_average(self):
        report = parse_instrument_response("기술적 분석\nMACD 골든크로스 직전입니다", "AAPL")
        assert report.technical.macd == "MACD 골든크로스 직전입니다"
        assert report.technical.moving_avg == ""

    def test_english_headings(self):
        text = "## Summary\nSolid franchise.\n## Conclusion\nHold."
        report = parse_instrument_response(text, "AAPL")
        assert report.summary == "Solid franchise."
        assert report.conclusion == "Hold."

    def test_etf_subject(self):
        report = parse_instrument_response("요약\n배당 ETF입니다", "schd", "etf")
        assert report.subject_type == "etf"
        assert report.ticker == "SCHD"

    def test_unknown_subject_type_falls_back_to_stock(self):
        assert parse_instrument_response("", "X", "bond").subject_type == "stock"

    @pytest.mark.parametrize("raw", ["", "   \n\t", None, b"", "just some words", 42])
    def test_parser_is_total(self, raw):
        """Any input yields a well-formed report with the raw text kept."""
        report = parse_instrument_response(raw, "AAPL")
        assert report.ticker == "AAPL"
        assert report.summary == ""
        assert report.error == NO_SECTIONS_NOTE
        assert isinstance(report.raw_text, str)

    def test_bytes_are_decoded(self):
        report = parse_instrument_response("요약\n좋습니다".encode("utf-8"), "AAPL")
        assert report.summary == "좋습니다"


class TestPortfolioParsing:
    """Tests for parse_portfolio_response."""

    def test_korean_response(self, portfolio_response):
        report = parse_portfolio_response(portfolio_response, style="균형형")

        assert report.subject_type == "portfolio"
        assert report.style == "균형형"
        assert report.summary == "기술주 비중이 높아 성장성은 좋지만 변동성이 큽니다."
        assert report.overweight == ["AAPL", "NVDA"]
        assert report.underweight == []
        assert report.rebalance_advice == "기술주 비중을 줄이고 배당 ETF를 늘리세요."
        assert report.risk_analysis == "금리 인상 시 성장주 조정 위험이 있습니다."
        assert report.cash_suggestion is None
        assert report.error is None

    def test_english_response(self):
        text = (
            "Summary\nBalanced mix.\n"
            "Overweight: AAPL, MSFT\n"
            "Underweight: none\n"
            "Risks\nRate risk.\n"
        )
        report = parse_portfolio_response(text)

        assert report.summary == "Balanced mix."
        assert report.overweight == ["AAPL", "MSFT"]
        assert report.underweight == []
        assert report.risk_analysis == "Rate risk."

    def test_cash_section(self, portfolio_response):
        text = portfolio_response + "\n6. 예수금 투자 제안\n- SCHD 50%, TLT 50%\n"
        report = parse_portfolio_response(text, cash_amount=1_000_000)

        assert report.cash_amount == 1_000_000
        assert report.cash_suggestion == "- SCHD 50%, TLT 50%"
        assert report.risk_analysis == "금리 인상 시 성장주 조정 위험이 있습니다."

    @pytest.mark.parametrize("raw", ["", None, "nothing useful"])
    def test_parser_is_total(self, raw):
        report = parse_portfolio_response(raw)
        assert report.overweight == []
        assert report.error == NO_SECTIONS_NOTE


class TestTickerList:
    def test_placeholders_are_removed(self):
        assert parse_ticker_list("AAPL, nvda, 없음, N/A, -") == ["AAPL", "NVDA"]

    def test_bullets_and_duplicates(self):
        assert parse_ticker_list("- TSLA: 고평가\n- tsla\n* BRK.B") == ["TSLA", "BRK.B"]

    def test_empty(self):
        assert parse_ticker_list("") == []


class TestSectionExtractor:
    """Tests for the shared extractor."""

    def test_line_scan_drops_heading_lines(self):
        extractor = SectionExtractor(
            [SectionRule("a", heading_pattern(["가나"])), SectionRule("b", heading_pattern(["다라"]))]
        )
        result = extractor.extract("가나\n하나\n둘\n다라\n셋")
        assert result.lines("a") == ["하나", "둘"]
        assert result.text("b") == "셋"
        assert result.matched == ["a", "b"]

    def test_region_stops_at_next_heading(self):
        extractor = SectionExtractor(
            [
                SectionRule("a", heading_pattern(["가나"])),
                SectionRule("b", heading_pattern(["다라"]), inline=True),
            ],
            Strategy.REGION,
        )
        result = extractor.extract("가나\n하나\n둘\n다라: 셋\n넷")
        assert result.text("a", sep="\n") == "하나\n둘"
        assert result.text("b") == "셋"

    def test_no_headings(self):
        extractor = SectionExtractor([SectionRule("a", heading_pattern(["가나"]))])
        assert extractor.extract("nothing").found is False
