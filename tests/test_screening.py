"""Tests for presets, selection and screening sessions."""

from __future__ import annotations

import pytest

from stockpick.core.exceptions import NotFoundError
from stockpick.screening import (
    FilterCriteria,
    RangeBound,
    ScreeningSession,
    SelectionSet,
    apply_filters,
    apply_preset,
    get_preset,
    list_presets,
)


class TestPresets:
    """Tests for the named presets."""

    def test_four_presets(self):
        assert {(p.kind, p.name) for p in list_presets()} == {
            ("stock", "aggressive"),
            ("stock", "stable"),
            ("etf", "aggressive"),
            ("etf", "stable"),
        }

    def test_list_by_kind(self):
        assert all(p.kind == "etf" for p in list_presets("etf"))

    def test_unknown_preset_raises(self):
        with pytest.raises(NotFoundError):
            get_preset("stock", "yolo")

    def test_stable_stock_preset(self, catalog):
        preset = get_preset("stock", "stable")
        tickers = [s.ticker for s in apply_filters(catalog.stocks, preset.criteria)]
        assert tickers == ["VZ", "HD", "JNJ", "BAC", "KO", "XOM", "CVX", "NEE"]

    def test_etf_presets_exclude_leveraged(self, catalog):
        preset = get_preset("etf", "aggressive")
        tickers = [e.ticker for e in apply_filters(catalog.etfs, preset.criteria)]
        assert "TQQQ" not in tickers
        assert "SOXL" not in tickers
        assert set(tickers) == {"QQQ", "VGT", "XLK", "SOXX"}

    def test_stable_etf_preset(self, catalog):
        preset = get_preset("etf", "stable")
        assert [e.ticker for e in apply_filters(catalog.etfs, preset.criteria)] == ["SCHD"]

    def test_apply_preset_by_name(self, catalog):
        tickers = [s.ticker for s in apply_preset(catalog.stocks, "stock", "stable")]
        assert tickers == ["VZ", "HD", "JNJ", "BAC", "KO", "XOM", "CVX", "NEE"]

    def test_apply_unknown_preset_by_name(self, catalog):
        with pytest.raises(NotFoundError):
            apply_preset(catalog.stocks, "stock", "yolo")

    def test_preset_idempotence(self, catalog):
        session = ScreeningSession(catalog.stocks)
        preset = get_preset("stock", "aggressive")
        first = [s.ticker for s in session.apply_preset(preset)]
        second = [s.ticker for s in session.apply_preset(preset)]
        assert first == second

    def test_applying_preset_does_not_share_criteria(self, catalog):
        session = ScreeningSession(catalog.stocks)
        preset = get_preset("stock", "aggressive")
        session.apply_preset(preset)
        session.criteria.ranges["per"] = RangeBound(min=1000)
        assert preset.criteria.bound("per").max == 20


class TestSelectionSet:
    """Tests for SelectionSet."""

    def test_toggle(self):
        selection = SelectionSet()
        assert selection.toggle("aapl") is True
        assert "AAPL" in selection
        assert selection.toggle("AAPL") is False
        assert "AAPL" not in selection

    def test_keeps_insertion_order_without_duplicates(self):
        selection = SelectionSet(["MSFT", "aapl", "MSFT"])
        assert selection.to_list() == ["MSFT", "AAPL"]

    def test_retain_reports_removed(self):
        selection = SelectionSet(["AAPL", "KO", "XOM"])
        removed = selection.retain(["KO"])
        assert removed == ["AAPL", "XOM"]
        assert selection.to_list() == ["KO"]


class TestScreeningSession:
    """Tests for ScreeningSession."""

    def test_selection_is_subset_of_results_after_refilter(self, catalog):
        session = ScreeningSession(catalog.stocks, SelectionSet(["AAPL", "KO", "VZ"]))
        session.apply(FilterCriteria(ranges={"dividend_yield": RangeBound(min=3)}))
        result_tickers = set(session.result_tickers())
        assert set(session.selection) <= result_tickers
        assert "AAPL" in session.last_removed
        assert session.selection.to_list() == ["KO", "VZ"]

    def test_empty_selection_passed_in_is_kept(self, catalog):
        selection = SelectionSet()
        session = ScreeningSession(catalog.stocks, selection)

        session.toggle("KO")

        assert session.selection is selection
        assert selection.to_list() == ["KO"]

    def test_toggle_ignores_tickers_outside_results(self, catalog):
        session = ScreeningSession(catalog.stocks)
        session.apply(FilterCriteria(category="Energy"))
        assert session.toggle("AAPL") is False
        assert len(session.selection) == 0
        assert session.toggle("XOM") is True

    def test_select_all_and_clear(self, catalog):
        session = ScreeningSession(catalog.etfs)
        session.apply(FilterCriteria(category="Dividend"))
        session.select_all()
        assert session.selection.to_list() == session.result_tickers()
        assert [e.ticker for e in session.selected()] == session.result_tickers()
        session.clear_selection()
        assert session.selected() == []

    def test_unknown_tickers_dropped_on_start(self, catalog):
        session = ScreeningSession(catalog.stocks, SelectionSet(["NOPE", "AAPL"]))
        assert session.selection.to_list() == ["AAPL"]
