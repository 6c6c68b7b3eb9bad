"""Projection of chain bond records into display-ready market views."""

from datetime import datetime, timezone

from bondmarket.exceptions import InvalidWindow
from bondmarket.interest import compute_interest_reserve
from bondmarket.models import BondRecord, MarketView
from bondmarket.units import format_amount


def _deadline_date(end_ts: int) -> str:
    try:
        return datetime.fromtimestamp(end_ts, tz=timezone.utc).date().isoformat()
    except (OverflowError, OSError, ValueError):
        return ""


def to_view(record: BondRecord, now: int, symbol: str = "APT") -> MarketView:
    """Project a BondRecord at instant `now` (unix seconds).

    Volume is the bond's total raise: the notional the market is written on.
    There is no order book, so no traded volume exists to report.

    The interest reserve is recomputed from the record's own window and is
    0 when the window is not positive.
    """
    try:
        reserve = compute_interest_reserve(
            record.total_raise, record.rate_bps, record.start_ts, record.end_ts
        )
    except InvalidWindow:
        reserve = 0

    return MarketView(
        id=record.id,
        issuer=record.issuer,
        company=record.company,
        bond_id=record.bond_id,
        question=record.question,
        description=record.description,
        category=record.category.lower(),
        coupon_rate=record.coupon_rate,
        maturity_date=record.maturity_date,
        principal_amount=record.principal_amount,
        credit_rating=record.credit_rating,
        rate_bps=record.rate_bps,
        is_active=not record.canceled and record.end_ts > now,
        deadline_ts=record.end_ts,
        deadline=_deadline_date(record.end_ts),
        participants=max(record.investor_count, 0),
        total_raise_raw=record.total_raise,
        raised_raw=record.raised,
        min_invest_raw=record.min_invest,
        volume_raw=record.total_raise,
        interest_reserve_raw=reserve,
        total_raise=format_amount(record.total_raise, symbol),
        raised=format_amount(record.raised, symbol),
        min_invest=format_amount(record.min_invest, symbol),
        volume=format_amount(record.total_raise, symbol),
    )


def to_views(records: list[BondRecord], now: int, symbol: str = "APT") -> list[MarketView]:
    """Project a batch of records, preserving order."""
    return [to_view(record, now, symbol) for record in records]
