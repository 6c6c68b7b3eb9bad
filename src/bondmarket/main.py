"""Entry point for the bond market service.

Wires settings, logging, the Aptos reader and the market pipeline together.
When the API is enabled (default) the FastAPI app is served by uvicorn and
the lifespan owns the reader session. When disabled, a single listing pass
runs with the configured defaults and its result is logged.

Component wiring order (in _build_components):
1. AptosRestReader (chain reads)
2. BondAggregator (concurrent per-address fetch)
3. MarketService (fetch -> view -> filter/sort)
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from bondmarket.chain.aptos_reader import AptosRestReader
from bondmarket.config import AppSettings
from bondmarket.exceptions import FetchFailed
from bondmarket.logging import get_logger, setup_logging
from bondmarket.markets.aggregator import BondAggregator, resolve_source_addresses
from bondmarket.markets.service import MarketService
from bondmarket.models import FilterSpec, SearchScope, SortKey


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build the reader, aggregator and service from settings.

    Does NOT open the reader session -- that happens in the lifespan
    (API mode) or run_once() (one-shot mode).
    """
    logger = get_logger("bondmarket.main")

    if not settings.chain.module_address:
        logger.warning(
            "no_module_address_configured",
            note="Set CHAIN_MODULE_ADDRESS; contract-scope lookups will fail.",
        )

    reader = AptosRestReader(settings.chain)
    aggregator = BondAggregator(reader)
    service = MarketService(aggregator, display_symbol=settings.market.display_symbol)

    return {
        "reader": reader,
        "aggregator": aggregator,
        "market_service": service,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the chain reader on startup and close it on shutdown."""
    logger = get_logger("bondmarket.main")
    reader = app.state.components["reader"]

    await reader.connect()
    logger.info("lifespan_started", node_url=app.state.settings.chain.node_url)

    yield

    await reader.close()
    logger.info("bond_market_api_stopped")


async def run_once(settings: AppSettings, components: dict[str, Any]) -> None:
    """Fetch one listing with the configured defaults and log it."""
    logger = get_logger("bondmarket.main")
    addresses = resolve_source_addresses(
        SearchScope(settings.market.default_scope),
        settings.chain.module_address,
    )
    query = FilterSpec(sort_key=SortKey(settings.market.default_sort))

    async with components["reader"]:
        try:
            listing = await components["market_service"].load_markets(
                addresses, int(time.time()), query
            )
        except FetchFailed as exc:
            logger.error("listing_failed", cause=exc.cause.value, message=exc.message)
            return

    if listing.total == 0:
        logger.info("no_bonds_found", addresses=addresses)
        return

    for view in listing.markets:
        logger.info(
            "market",
            id=view.id,
            company=view.company,
            bond_id=view.bond_id,
            raised=view.raised,
            total_raise=view.total_raise,
            participants=view.participants,
            deadline=view.deadline,
            active=view.is_active,
        )


async def run() -> None:
    """Run the service: API server, or a single listing pass when the API is disabled."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("bondmarket.main")

    components = _build_components(settings)

    if settings.api.enabled:
        from bondmarket.api.app import create_app

        app = create_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components
        app.state.market_service = components["market_service"]

        logger.info("starting_api", host=settings.api.host, port=settings.api.port)

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        logger.info("running_single_listing", scope=settings.market.default_scope)
        await run_once(settings, components)


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
