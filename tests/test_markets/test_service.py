"""Tests for MarketService: fetch -> view -> filter/sort pipeline."""

from unittest.mock import AsyncMock

import pytest

from bondmarket.exceptions import ChainReadError, FetchFailed
from bondmarket.markets.aggregator import BondAggregator
from bondmarket.markets.service import MarketListing, MarketService
from bondmarket.models import FetchErrorCause, FilterSpec, SortKey

from factories import CONTRACT, NOW, USER, raw_bond


def _service(reader: AsyncMock, symbol: str = "APT") -> MarketService:
    return MarketService(BondAggregator(reader), display_symbol=symbol)


class TestLoadMarkets:
    @pytest.mark.asyncio
    async def test_lists_sorted_views(self, mock_reader: AsyncMock) -> None:
        mock_reader.list_bonds.return_value = [
            raw_bond(id="1", total_raise="100"),
            raw_bond(id="2", total_raise="300"),
            raw_bond(id="3", total_raise="200"),
        ]
        listing = await _service(mock_reader).load_markets(
            [CONTRACT], NOW, FilterSpec(sort_key=SortKey.VOLUME)
        )

        assert [v.id for v in listing.markets] == [2, 3, 1]
        assert listing.total == 3
        assert listing.matched == 3

    @pytest.mark.asyncio
    async def test_nothing_matched_is_distinct_from_nothing_found(
        self, mock_reader: AsyncMock
    ) -> None:
        mock_reader.list_bonds.return_value = [raw_bond(id="1")]
        listing = await _service(mock_reader).load_markets(
            [CONTRACT], NOW, FilterSpec(search_term="no such company")
        )

        assert listing.markets == []
        assert listing.total == 1
        assert listing.matched == 0

    @pytest.mark.asyncio
    async def test_nothing_found(self, mock_reader: AsyncMock) -> None:
        listing = await _service(mock_reader).load_markets([CONTRACT], NOW, FilterSpec())

        assert listing.total == 0
        assert listing.fetch.empty_addresses == [CONTRACT]

    @pytest.mark.asyncio
    async def test_display_symbol_applied(self, mock_reader: AsyncMock) -> None:
        mock_reader.list_bonds.return_value = [raw_bond(raised="100000000")]
        listing = await _service(mock_reader, symbol="USDC").load_markets(
            [CONTRACT], NOW, FilterSpec()
        )

        assert listing.markets[0].raised == "1.000000 USDC"

    @pytest.mark.asyncio
    async def test_partial_failure_surfaces_in_fetch(self) -> None:
        async def has_bond_store(address: str) -> bool:
            if address == USER:
                raise ChainReadError("timeout")
            return True

        reader = AsyncMock()
        reader.has_bond_store = AsyncMock(side_effect=has_bond_store)
        reader.list_bonds = AsyncMock(return_value=[raw_bond()])

        listing = await _service(reader).load_markets([CONTRACT, USER], NOW, FilterSpec())

        assert listing.total == 1
        assert listing.fetch.is_partial
        assert list(listing.fetch.failures) == [USER]

    @pytest.mark.asyncio
    async def test_all_failed_propagates(self) -> None:
        reader = AsyncMock()
        reader.has_bond_store = AsyncMock(
            side_effect=ChainReadError("Move abort", FetchErrorCause.EXECUTION_REVERTED)
        )

        with pytest.raises(FetchFailed) as exc_info:
            await _service(reader).load_markets([CONTRACT], NOW, FilterSpec())
        assert exc_info.value.cause is FetchErrorCause.EXECUTION_REVERTED


class TestMarketListing:
    def test_defaults(self) -> None:
        listing = MarketListing()
        assert listing.markets == []
        assert listing.total == 0
        assert listing.matched == 0
        assert listing.fetch.records == []
