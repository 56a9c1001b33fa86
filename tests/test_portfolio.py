"""Tests for the portfolio ledger."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from stockpick.core.exceptions import ConflictError, NotFoundError, ValidationError
from stockpick.schemas.portfolio import PortfolioItem, PortfolioItemCreate
from stockpick.services.portfolio import PortfolioLedger, compute_totals


@pytest.fixture
def ledger(memory_store, catalog) -> PortfolioLedger:
    return PortfolioLedger(memory_store, catalog)


class TestPortfolioItem:
    def test_derived_values(self):
        item = PortfolioItem(ticker="aapl", avg_cost=100, quantity=10, current_price=110)

        assert item.ticker == "AAPL"
        assert item.cost_basis == 1000
        assert item.current_value == 1100
        assert item.return_amount == 100
        assert item.return_rate == pytest.approx(10.0)

    def test_loss(self):
        item = PortfolioItem(ticker="KO", avg_cost=50, quantity=4, current_price=40)
        assert item.return_amount == -40
        assert item.return_rate == pytest.approx(-20.0)

    def test_non_string_ticker_fails_validation(self):
        with pytest.raises(PydanticValidationError):
            PortfolioItemCreate(ticker=123, avg_cost=50, quantity=1)


class TestComputeTotals:
    def test_weighted_by_cost(self):
        items = [
            PortfolioItem(ticker="AAPL", avg_cost=100, quantity=10, current_price=110),
            PortfolioItem(ticker="KO", avg_cost=50, quantity=20, current_price=45),
        ]
        totals = compute_totals(items)

        assert totals.total_cost == 2000
        assert totals.total_value == 2000
        assert totals.total_return_amount == 0
        assert totals.total_return_rate == 0
        assert totals.item_count == 2

    def test_empty_portfolio(self):
        totals = compute_totals([])
        assert totals.total_return_rate == 0.0
        assert totals.item_count == 0


class TestPortfolioLedger:
    """Tests for PortfolioLedger."""

    @pytest.mark.asyncio
    async def test_add_item_enriches_from_catalog(self, ledger):
        item = await ledger.add_item("user-1", "jnj", avg_cost=150, quantity=10)

        assert item.ticker == "JNJ"
        assert item.current_price == 155.0
        assert item.is_etf is False
        assert item.has_dividend is True
        assert item.dividend_yield == 3.1
        assert item.sector == "Healthcare"

    @pytest.mark.asyncio
    async def test_add_etf(self, ledger):
        item = await ledger.add_item("user-1", "SCHD", avg_cost=70, quantity=3, current_price=80)

        assert item.is_etf is True
        assert item.has_dividend is True
        assert item.current_price == 80
        assert item.sector == "Dividend"

    @pytest.mark.asyncio
    async def test_token_dividend_stock_is_not_a_dividend_holding(self, ledger):
        item = await ledger.add_item("user-1", "AAPL", avg_cost=150, quantity=1)
        assert item.has_dividend is False

    @pytest.mark.asyncio
    async def test_duplicate_ticker_rejected_case_insensitively(self, ledger):
        await ledger.add_item("user-1", "AAPL", avg_cost=150, quantity=1)

        with pytest.raises(ConflictError):
            await ledger.add_item("user-1", "aapl", avg_cost=160, quantity=2)

        assert len(await ledger.list_items("user-1")) == 1

    @pytest.mark.asyncio
    async def test_same_ticker_for_different_users(self, ledger):
        await ledger.add_item("user-1", "AAPL", avg_cost=150, quantity=1)
        await ledger.add_item("user-2", "AAPL", avg_cost=150, quantity=1)

        assert len(await ledger.list_items("user-2")) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "ticker,avg_cost,quantity",
        [("NOPE", 10, 1), ("", 10, 1), ("AAPL", 0, 1), ("AAPL", 10, 0), ("AAPL", -5, 1)],
    )
    async def test_invalid_input_rejected(self, ledger, ticker, avg_cost, quantity):
        with pytest.raises(ValidationError):
            await ledger.add_item("user-1", ticker, avg_cost=avg_cost, quantity=quantity)
        assert await ledger.list_items("user-1") == []

    @pytest.mark.asyncio
    async def test_items_listed_in_insertion_order(self, ledger):
        for ticker in ("MSFT", "AAPL", "KO"):
            await ledger.add_item("user-1", ticker, avg_cost=10, quantity=1)

        assert [i.ticker for i in await ledger.list_items("user-1")] == ["MSFT", "AAPL", "KO"]

    @pytest.mark.asyncio
    async def test_update_item(self, ledger):
        item = await ledger.add_item("user-1", "AAPL", avg_cost=100, quantity=10, current_price=100)

        updated = await ledger.update_item("user-1", item.id, current_price=110)

        assert updated.current_price == 110
        assert updated.avg_cost == 100
        assert updated.return_rate == pytest.approx(10.0)
        assert (await ledger.get_item("user-1", item.id)).current_price == 110

    @pytest.mark.asyncio
    async def test_update_rejects_non_positive_quantity(self, ledger):
        item = await ledger.add_item("user-1", "AAPL", avg_cost=100, quantity=10)
        with pytest.raises(ValidationError):
            await ledger.update_item("user-1", item.id, quantity=0)

    @pytest.mark.asyncio
    async def test_delete_item(self, ledger):
        item = await ledger.add_item("user-1", "AAPL", avg_cost=100, quantity=10)

        await ledger.delete_item("user-1", item.id)

        assert await ledger.list_items("user-1") == []
        with pytest.raises(NotFoundError):
            await ledger.delete_item("user-1", item.id)

    @pytest.mark.asyncio
    async def test_other_users_item_not_found(self, ledger):
        item = await ledger.add_item("user-1", "AAPL", avg_cost=100, quantity=10)
        with pytest.raises(NotFoundError):
            await ledger.get_item("user-2", item.id)
