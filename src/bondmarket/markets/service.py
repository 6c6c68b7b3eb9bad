"""Market listing pipeline: fetch, project, filter and sort.

The service is a pure function of (source addresses, now, filter) plus
the chain state it reads. It holds no subscriptions: callers decide when
inputs changed and call load_markets again.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from bondmarket.logging import get_logger
from bondmarket.markets.aggregator import BondAggregator
from bondmarket.markets.ranker import filter_and_sort
from bondmarket.markets.views import to_views
from bondmarket.models import FetchResult, FilterSpec, MarketView, SortKey

logger = get_logger(__name__)


@dataclass
class MarketListing:
    """A filtered market listing plus the fetch bookkeeping behind it.

    total counts every active market fetched; len(markets) counts those that
    survived the filter. total == 0 means nothing was found, while
    markets == [] with total > 0 means nothing matched the filter.
    """

    markets: list[MarketView] = field(default_factory=list)
    total: int = 0
    fetch: FetchResult = field(default_factory=FetchResult)

    @property
    def matched(self) -> int:
        return len(self.markets)


class MarketService:
    """Runs the full listing pipeline over a BondAggregator.

    Args:
        aggregator: Source of merged bond records.
        display_symbol: Currency symbol for formatted amounts.
    """

    def __init__(self, aggregator: BondAggregator, display_symbol: str = "APT") -> None:
        self._aggregator = aggregator
        self._display_symbol = display_symbol

    async def load_markets(
        self,
        source_addresses: Sequence[str],
        now: int,
        query: FilterSpec,
        abandon: asyncio.Event | None = None,
    ) -> MarketListing:
        """Fetch bonds and return the filtered, sorted listing.

        Raises:
            FetchFailed: If every source address failed.
            FetchAbandoned: If the abandon signal fired mid-fetch.
        """
        fetch = await self._aggregator.fetch_all(source_addresses, abandon=abandon)
        views = to_views(fetch.records, now, self._display_symbol)
        markets = filter_and_sort(views, query)

        logger.debug(
            "markets_listed",
            total=len(views),
            matched=len(markets),
            sort=SortKey(query.sort_key).value,
        )
        return MarketListing(markets=markets, total=len(views), fetch=fetch)
