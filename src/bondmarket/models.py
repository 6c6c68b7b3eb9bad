"""Shared data models for the bond market core.

CRITICAL: All money amounts are integer base units (or Decimal display units).
Never use float for amounts, rates, or durations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bondmarket.exceptions import ChainReadError


class FetchErrorCause(str, Enum):
    """Classification of a failed chain lookup."""

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    FUNCTION_NOT_FOUND = "FUNCTION_NOT_FOUND"
    EXECUTION_REVERTED = "EXECUTION_REVERTED"
    UNKNOWN = "UNKNOWN"

    @property
    def message(self) -> str:
        """User-facing explanation of the failure."""
        return _CAUSE_MESSAGES[self]


_CAUSE_MESSAGES = {
    FetchErrorCause.RESOURCE_NOT_FOUND: (
        "BondStore resource not found. Create a bond first to initialize the store."
    ),
    FetchErrorCause.FUNCTION_NOT_FOUND: (
        "View function not found. Check that the contract is deployed correctly."
    ),
    FetchErrorCause.EXECUTION_REVERTED: (
        "Contract execution failed. The contract may not be properly initialized."
    ),
    FetchErrorCause.UNKNOWN: "Failed to fetch bonds from the blockchain.",
}


class SearchScope(str, Enum):
    """Which accounts to search for bond stores."""

    CONTRACT = "contract"
    USER = "user"
    ALL = "all"


class SortKey(str, Enum):
    """Market listing sort order."""

    VOLUME = "volume"
    PARTICIPANTS = "participants"
    DEADLINE = "deadline"
    RAISED = "raised"


@dataclass(frozen=True)
class BondRecord:
    """A bond as stored on chain, parsed and validated at the read boundary."""

    id: int
    issuer: str
    total_raise: int  # base units
    min_invest: int  # base units
    raised: int  # base units
    rate_bps: int
    start_ts: int  # unix seconds
    end_ts: int  # unix seconds
    canceled: bool = False
    investor_count: int = 0
    company: str = ""
    bond_id: str = ""
    question: str = ""
    description: str = ""
    category: str = ""
    coupon_rate: str = ""
    maturity_date: str = ""
    principal_amount: str = ""
    credit_rating: str = ""


@dataclass(frozen=True)
class MarketView:
    """Display-ready projection of one BondRecord at a given instant.

    Raw integer magnitudes are kept next to the formatted strings so that
    sorting never parses display text.
    """

    id: int
    issuer: str
    company: str
    bond_id: str
    question: str
    description: str
    category: str
    coupon_rate: str
    maturity_date: str
    principal_amount: str
    credit_rating: str
    rate_bps: int
    is_active: bool
    deadline_ts: int
    deadline: str  # ISO date (UTC)
    participants: int
    total_raise_raw: int
    raised_raw: int
    min_invest_raw: int
    volume_raw: int
    interest_reserve_raw: int
    total_raise: str
    raised: str
    min_invest: str
    volume: str


@dataclass(frozen=True)
class FilterSpec:
    """Search, category and sort selection for a market listing."""

    search_term: str = ""
    category: str = "all"
    sort_key: SortKey = SortKey.VOLUME


@dataclass
class FetchResult:
    """Outcome of one aggregation pass over a set of source addresses.

    Keeps "found nothing" (empty_addresses) apart from "lookup failed"
    (failures) so callers never conflate the two.
    """

    records: list[BondRecord] = field(default_factory=list)
    source_addresses: list[str] = field(default_factory=list)
    empty_addresses: list[str] = field(default_factory=list)
    failures: dict[str, ChainReadError] = field(default_factory=dict)
    failed_lookups: int = 0  # per position in source_addresses, duplicates included

    @property
    def is_partial(self) -> bool:
        """True when some, but not all, addresses failed."""
        return 0 < self.failed_lookups < len(self.source_addresses)

    @property
    def is_empty(self) -> bool:
        return not self.records
