"""Bond aggregation across source accounts.

Queries every source address concurrently (asyncio.gather) and merges the
results strictly in source-address order once all requests have settled.

Failure policy:
- No bond store at an address: zero records, not an error.
- Malformed list payload: zero records for that address.
- Transport/protocol error at one address: recorded in FetchResult.failures,
  treated as empty.
- Every address failed: FetchFailed with the first failure's cause.

No retries here. Retry policy, if any, belongs to the ChainReader.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from bondmarket.chain.reader import ChainReader
from bondmarket.chain.types import classify_error, parse_bond_list
from bondmarket.exceptions import ChainReadError, FetchAbandoned, FetchFailed
from bondmarket.logging import get_logger
from bondmarket.models import BondRecord, FetchResult, SearchScope

logger = get_logger(__name__)


def resolve_source_addresses(
    scope: SearchScope,
    contract_address: str,
    account: str | None = None,
) -> list[str]:
    """Derive the ordered list of accounts to search.

    The contract address comes first for CONTRACT/ALL; the connected
    account follows for USER/ALL when one is connected. With nothing
    selected (USER scope, no wallet) the contract address is searched.

    Args:
        scope: Which accounts the caller wants searched.
        contract_address: Account that published the bond module.
        account: Connected wallet address, if any.

    Returns:
        Ordered, duplicate-free list of addresses.
    """
    addresses: list[str] = []

    if scope in (SearchScope.CONTRACT, SearchScope.ALL):
        addresses.append(contract_address)

    if scope in (SearchScope.USER, SearchScope.ALL) and account:
        if account not in addresses:
            addresses.append(account)

    if not addresses:
        addresses.append(contract_address)

    return addresses


class BondAggregator:
    """Gathers active bond records from a set of source accounts.

    Holds no state between calls: each fetch_all is independent and
    idempotent for identical chain state.

    Args:
        reader: Read-only chain client.
    """

    def __init__(self, reader: ChainReader) -> None:
        self._reader = reader

    async def fetch_all(
        self,
        source_addresses: Sequence[str],
        abandon: asyncio.Event | None = None,
    ) -> FetchResult:
        """Fetch, merge and filter bond records from every source address.

        Args:
            source_addresses: Accounts to query, in the order results are merged.
            abandon: Optional signal; when set before all requests settle the
                fetch is cancelled and nothing is merged.

        Returns:
            FetchResult with non-canceled records in address order.

        Raises:
            FetchFailed: If every address lookup raised.
            FetchAbandoned: If the abandon signal fired.
        """
        addresses = list(source_addresses)
        result = FetchResult(source_addresses=addresses)
        if not addresses:
            return result

        if abandon is not None and abandon.is_set():
            raise FetchAbandoned("fetch abandoned before start")

        logger.info("fetching_bonds", addresses=addresses)

        gathered = asyncio.gather(
            *(self._fetch_address(address) for address in addresses),
            return_exceptions=True,
        )
        if abandon is None:
            outcomes = await gathered
        else:
            outcomes = await self._await_unless_abandoned(gathered, abandon)

        for address, outcome in zip(addresses, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                error = self._as_chain_error(outcome, address)
                result.failures.setdefault(address, error)
                result.failed_lookups += 1
                logger.warning(
                    "address_fetch_failed",
                    address=address,
                    cause=error.cause.value,
                    error=str(error),
                )
                continue

            active = [record for record in outcome if not record.canceled]
            if not active:
                result.empty_addresses.append(address)
            logger.debug(
                "address_bonds_found",
                address=address,
                count=len(outcome),
                active=len(active),
            )
            result.records.extend(active)

        if result.failed_lookups == len(addresses):
            first = result.failures[addresses[0]]
            logger.error(
                "fetch_failed",
                cause=first.cause.value,
                failed=result.failed_lookups,
            )
            raise FetchFailed(first.cause, dict(result.failures))

        if result.is_partial:
            logger.warning(
                "partial_fetch",
                failed_addresses=list(result.failures),
                records=len(result.records),
            )

        logger.info(
            "bonds_fetched",
            records=len(result.records),
            empty_addresses=len(result.empty_addresses),
        )
        return result

    async def _fetch_address(self, address: str) -> list[BondRecord]:
        """Fetch and parse the bond list for a single account."""
        with structlog.contextvars.bound_contextvars(address=address):
            if not await self._reader.has_bond_store(address):
                logger.info("bond_store_missing", address=address)
                return []

            raw = await self._reader.list_bonds(address)
            return parse_bond_list(raw)

    @staticmethod
    async def _await_unless_abandoned(
        gathered: asyncio.Future,  # type: ignore[type-arg]
        abandon: asyncio.Event,
    ) -> list:
        """Wait for the gathered requests, cancelling them if abandon fires first."""
        abandon_waiter = asyncio.ensure_future(abandon.wait())
        try:
            await asyncio.wait(
                {gathered, abandon_waiter},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            gathered.cancel()
            raise
        finally:
            abandon_waiter.cancel()

        if abandon.is_set():
            gathered.cancel()
            try:
                await gathered
            except asyncio.CancelledError:
                pass
            logger.info("fetch_abandoned")
            raise FetchAbandoned("fetch abandoned by caller")

        return gathered.result()

    @staticmethod
    def _as_chain_error(exc: Exception, address: str) -> ChainReadError:
        if isinstance(exc, ChainReadError):
            if exc.address is None:
                exc.address = address
            return exc
        text = str(exc) or type(exc).__name__
        return ChainReadError(text, cause=classify_error(text), address=address)
