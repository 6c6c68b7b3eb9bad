"""JSON API endpoints: market listing, interest reserve, and create-bond preparation."""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse

from bondmarket.exceptions import FetchFailed, InvalidBondParameters, InvalidWindow
from bondmarket.interest import compute_interest_reserve
from bondmarket.issuance.builder import (
    draft_from_mapping,
    estimate_interest_reserve,
    init_modules_payload,
    prepare_create_bond,
)
from bondmarket.logging import get_logger
from bondmarket.markets.aggregator import resolve_source_addresses
from bondmarket.models import FilterSpec, MarketView, SearchScope, SortKey
from bondmarket.units import format_amount

logger = get_logger(__name__)

router = APIRouter()

# Base-unit magnitudes can exceed 2^53, so they travel as strings
_RAW_FIELDS = (
    "total_raise_raw",
    "raised_raw",
    "min_invest_raw",
    "volume_raw",
    "interest_reserve_raw",
)


def _view_to_dict(view: MarketView) -> dict[str, Any]:
    data = asdict(view)
    for name in _RAW_FIELDS:
        data[name] = str(data[name])
    return data


@router.get("/health")
async def health() -> JSONResponse:
    return JSONResponse(content={"status": "ok"})


@router.get("/markets")
async def get_markets(
    request: Request,
    scope: SearchScope | None = Query(default=None),
    account: str | None = Query(default=None),
    search: str = Query(default=""),
    category: str = Query(default="all"),
    sort: SortKey | None = Query(default=None),
) -> JSONResponse:
    """Active bond markets from the selected accounts, filtered and sorted."""
    settings = request.app.state.settings
    service = request.app.state.market_service

    scope = scope or SearchScope(settings.market.default_scope)
    sort = sort or SortKey(settings.market.default_sort)
    addresses = resolve_source_addresses(scope, settings.chain.module_address, account)
    query = FilterSpec(search_term=search, category=category, sort_key=sort)

    try:
        listing = await service.load_markets(addresses, int(time.time()), query)
    except FetchFailed as exc:
        logger.warning("markets_request_failed", cause=exc.cause.value, scope=scope.value)
        return JSONResponse(
            status_code=502,
            content={
                "error": exc.cause.value,
                "message": exc.message,
                "failed_addresses": list(exc.failures),
            },
        )

    return JSONResponse(
        content={
            "scope": scope.value,
            "source_addresses": listing.fetch.source_addresses,
            "markets": [_view_to_dict(view) for view in listing.markets],
            "total": listing.total,
            "matched": listing.matched,
            "empty_addresses": listing.fetch.empty_addresses,
            "failed_addresses": {
                address: error.cause.value
                for address, error in listing.fetch.failures.items()
            },
            "partial": listing.fetch.is_partial,
        }
    )


@router.get("/interest-reserve")
async def get_interest_reserve(
    request: Request,
    total_raise: int = Query(ge=0),
    rate_bps: int = Query(ge=0, le=10_000),
    start_ts: int = Query(),
    end_ts: int = Query(),
) -> JSONResponse:
    """Maximum interest reserve for a raise over [start_ts, end_ts]."""
    symbol = request.app.state.settings.market.display_symbol
    try:
        reserve = compute_interest_reserve(total_raise, rate_bps, start_ts, end_ts)
    except InvalidWindow as exc:
        return JSONResponse(status_code=400, content={"error": "INVALID_WINDOW", "message": str(exc)})

    return JSONResponse(
        content={
            "interest_reserve": str(reserve),
            "interest_reserve_display": format_amount(reserve, symbol),
        }
    )


@router.post("/bonds/prepare")
async def prepare_bond(request: Request, body: dict = Body(...)) -> JSONResponse:
    """Validate a create-bond draft and return its entry-function payloads."""
    settings = request.app.state.settings
    draft = draft_from_mapping(body)

    try:
        prepared = prepare_create_bond(
            draft,
            int(time.time()),
            start_delay=settings.market.create_start_delay_seconds,
        )
    except InvalidBondParameters as exc:
        return JSONResponse(
            status_code=422,
            content={"error": "INVALID_PARAMETERS", "message": str(exc), "fields": exc.fields},
        )

    module_address = settings.chain.module_address
    module_name = settings.chain.module_name
    return JSONResponse(
        content={
            "start_ts": prepared.start_ts,
            "end_ts": prepared.end_ts,
            "duration_days": prepared.duration_days,
            "total_raise": str(prepared.total_raise),
            "min_invest": str(prepared.min_invest),
            "interest_reserve": str(prepared.interest_reserve),
            "interest_reserve_display": prepared.interest_reserve_display(
                settings.market.display_symbol
            ),
            "init_payload": init_modules_payload(module_address, module_name),
            "payload": prepared.entry_function_payload(module_address, module_name),
        }
    )


@router.post("/bonds/estimate")
async def estimate_bond(request: Request, body: dict = Body(...)) -> JSONResponse:
    """Live interest reserve estimate; null while the draft is incomplete."""
    settings = request.app.state.settings
    reserve = estimate_interest_reserve(
        draft_from_mapping(body),
        int(time.time()),
        start_delay=settings.market.create_start_delay_seconds,
    )
    if reserve is None:
        return JSONResponse(content={"interest_reserve": None, "interest_reserve_display": None})
    return JSONResponse(
        content={
            "interest_reserve": str(reserve),
            "interest_reserve_display": format_amount(reserve, settings.market.display_symbol),
        }
    )
