"""Create-bond parameter preparation.

Turns a draft entered in display units into the exact integer arguments of
the create_bond entry function, including the interest reserve the creator
must lock up. Signing and submitting the payload happen elsewhere.

Conversion rules:
  - total_raise, min_invest: display units -> base units, rounded DOWN
  - start_ts = now + start_delay (the bond opens shortly after preparation)
  - end_ts   = deadline, naive values read as UTC
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from bondmarket.exceptions import InvalidBondParameters, InvalidWindow
from bondmarket.interest import BPS_DENOM, compute_interest_reserve
from bondmarket.logging import get_logger
from bondmarket.units import U64_MAX, format_amount, to_base_units, to_display_units

logger = get_logger(__name__)

REQUIRED_FIELDS = (
    "company",
    "bond_id",
    "question",
    "deadline",
    "category",
    "total_raise",
    "rate_bps",
    "min_invest",
)

DEFAULT_START_DELAY_SECONDS = 60

_ONE_BASE_UNIT = to_display_units(1)
_MAX_DISPLAY_AMOUNT = to_display_units(U64_MAX)


@dataclass
class BondDraft:
    """Create-bond form input, as entered (amounts in display units)."""

    company: str = ""
    bond_id: str = ""
    question: str = ""
    description: str = ""
    deadline: str = ""
    category: str = ""
    coupon_rate: str = ""
    maturity_date: str = ""
    principal_amount: str = ""
    credit_rating: str = ""
    total_raise: str = "10"
    rate_bps: str = "500"
    min_invest: str = "0.0001"


@dataclass(frozen=True)
class CreateBondRequest:
    """Validated create_bond arguments in chain units."""

    total_raise: int
    rate_bps: int
    start_ts: int
    end_ts: int
    min_invest: int
    interest_reserve: int
    company: str
    bond_id: str
    question: str
    description: str
    deadline: str
    category: str
    coupon_rate: str
    maturity_date: str
    principal_amount: str
    credit_rating: str

    @property
    def duration_days(self) -> int:
        return (self.end_ts - self.start_ts) // 86_400

    def interest_reserve_display(self, symbol: str = "APT") -> str:
        return format_amount(self.interest_reserve, symbol)

    def entry_function_payload(self, module_address: str, module_name: str) -> dict:
        """Build the create_bond entry-function payload.

        u64 arguments are encoded as decimal strings, as the fullnode JSON
        API expects.
        """
        return {
            "type": "entry_function_payload",
            "function": f"{module_address}::{module_name}::create_bond",
            "type_arguments": [],
            "arguments": [
                str(self.total_raise),
                str(self.rate_bps),
                str(self.start_ts),
                str(self.end_ts),
                str(self.min_invest),
                str(self.interest_reserve),
                self.company,
                self.bond_id,
                self.question,
                self.description,
                self.deadline,
                self.category,
                self.coupon_rate or "0",
                self.maturity_date,
                self.principal_amount or "0",
                self.credit_rating or "B1",
            ],
        }


def init_modules_payload(module_address: str, module_name: str) -> dict:
    """Payload for the one-time init_modules call that creates the bond store."""
    return {
        "type": "entry_function_payload",
        "function": f"{module_address}::{module_name}::init_modules",
        "type_arguments": [],
        "arguments": [],
    }


def parse_deadline(value: str) -> int:
    """Parse an ISO date or datetime into unix seconds (UTC when naive)."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidBondParameters(f"Invalid deadline: {value!r}", ["deadline"]) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def _parse_positive_amount(value: str, field_name: str, label: str) -> int:
    try:
        amount = Decimal(value.strip())
    except InvalidOperation as exc:
        raise InvalidBondParameters(f"{label} must be a positive number", [field_name]) from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidBondParameters(f"{label} must be a positive number", [field_name])
    if amount < _ONE_BASE_UNIT:
        raise InvalidBondParameters(f"{label} is below one base unit", [field_name])
    if amount > _MAX_DISPLAY_AMOUNT:
        raise InvalidBondParameters(f"{label} exceeds the u64 maximum", [field_name])

    return to_base_units(amount)


def _parse_rate_bps(value: str) -> int:
    try:
        rate = int(value.strip())
    except ValueError as exc:
        raise InvalidBondParameters(
            "Interest rate must be between 1-10000 basis points (0.01%-100%)", ["rate_bps"]
        ) from exc
    if rate <= 0 or rate > BPS_DENOM:
        raise InvalidBondParameters(
            "Interest rate must be between 1-10000 basis points (0.01%-100%)", ["rate_bps"]
        )
    return rate


def prepare_create_bond(
    draft: BondDraft,
    now: int,
    start_delay: int = DEFAULT_START_DELAY_SECONDS,
) -> CreateBondRequest:
    """Validate a draft and compute create_bond arguments.

    Args:
        draft: Form input in display units.
        now: Current unix time in seconds.
        start_delay: Seconds between now and the bond's start_ts.

    Returns:
        CreateBondRequest with base-unit amounts and the interest reserve.

    Raises:
        InvalidBondParameters: On missing fields, non-positive or above-u64
            amounts, an out-of-range rate, or a deadline not after the start
            time.
    """
    missing = [name for name in REQUIRED_FIELDS if not str(getattr(draft, name)).strip()]
    if missing:
        raise InvalidBondParameters("Please fill in all required fields", missing)

    total_raise = _parse_positive_amount(draft.total_raise, "total_raise", "Total raise")
    rate_bps = _parse_rate_bps(draft.rate_bps)
    min_invest = _parse_positive_amount(draft.min_invest, "min_invest", "Minimum investment")

    start_ts = now + start_delay
    end_ts = parse_deadline(draft.deadline)
    try:
        interest_reserve = compute_interest_reserve(total_raise, rate_bps, start_ts, end_ts)
    except InvalidWindow as exc:
        raise InvalidBondParameters("Deadline must be in the future", ["deadline"]) from exc
    if interest_reserve > U64_MAX:
        raise InvalidBondParameters(
            "Interest reserve exceeds the u64 maximum", ["total_raise", "deadline"]
        )

    request = CreateBondRequest(
        total_raise=total_raise,
        rate_bps=rate_bps,
        start_ts=start_ts,
        end_ts=end_ts,
        min_invest=min_invest,
        interest_reserve=interest_reserve,
        company=draft.company,
        bond_id=draft.bond_id,
        question=draft.question,
        description=draft.description,
        deadline=draft.deadline,
        category=draft.category,
        coupon_rate=draft.coupon_rate,
        maturity_date=draft.maturity_date,
        principal_amount=draft.principal_amount,
        credit_rating=draft.credit_rating,
    )
    logger.info(
        "create_bond_prepared",
        total_raise=total_raise,
        rate_bps=rate_bps,
        start_ts=start_ts,
        end_ts=end_ts,
        interest_reserve=interest_reserve,
        duration_days=request.duration_days,
    )
    return request


def estimate_interest_reserve(
    draft: BondDraft,
    now: int,
    start_delay: int = DEFAULT_START_DELAY_SECONDS,
) -> int | None:
    """Live reserve estimate for a draft still being edited.

    Returns None while the amount, rate or deadline is incomplete or
    invalid, instead of raising.
    """
    try:
        total_raise = _parse_positive_amount(draft.total_raise, "total_raise", "Total raise")
        rate_bps = _parse_rate_bps(draft.rate_bps)
        end_ts = parse_deadline(draft.deadline)
        return compute_interest_reserve(total_raise, rate_bps, now + start_delay, end_ts)
    except (InvalidBondParameters, InvalidWindow):
        return None


def draft_from_mapping(data: dict) -> BondDraft:
    """Build a BondDraft from a mapping, ignoring unknown keys."""
    known = {f.name for f in fields(BondDraft)}
    return BondDraft(**{k: str(v) for k, v in data.items() if k in known and v is not None})
