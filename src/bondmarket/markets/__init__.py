"""Market layer -- bond aggregation, view projection, filtering and ranking."""

from bondmarket.markets.aggregator import BondAggregator, resolve_source_addresses
from bondmarket.markets.ranker import filter_and_sort
from bondmarket.markets.service import MarketListing, MarketService
from bondmarket.markets.views import to_view, to_views

__all__ = [
    "BondAggregator",
    "MarketListing",
    "MarketService",
    "filter_and_sort",
    "resolve_source_addresses",
    "to_view",
    "to_views",
]
