"""Chain boundary parsing: raw view-function output to typed records.

Move u64 values arrive as decimal strings, bools as JSON bools. Every raw
record passes through parse_bond_record before anything else touches it.
A malformed optional field falls back to its zero value; only a record
without a usable numeric id is rejected.
"""

from typing import Any

from bondmarket.logging import get_logger
from bondmarket.models import BondRecord, FetchErrorCause

logger = get_logger(__name__)

# Substrings checked in order against the error text, case-insensitive
_CAUSE_MARKERS: list[tuple[FetchErrorCause, tuple[str, ...]]] = [
    (
        FetchErrorCause.RESOURCE_NOT_FOUND,
        ("resource_not_found", "account_not_found"),
    ),
    (
        FetchErrorCause.FUNCTION_NOT_FOUND,
        ("function_not_found", "module_not_found"),
    ),
    (
        FetchErrorCause.EXECUTION_REVERTED,
        ("move abort", "execution_reverted", "aborted", "vm_error"),
    ),
]


def classify_error(text: str) -> FetchErrorCause:
    """Map a node error message or error_code to a FetchErrorCause."""
    lowered = text.lower()
    for cause, markers in _CAUSE_MARKERS:
        if any(marker in lowered for marker in markers):
            return cause
    return FetchErrorCause.UNKNOWN


def _parse_int(raw: dict, key: str, default: int = 0) -> int:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning("invalid_bond_field", field=key, raw=value)
        return default


def _parse_bool(raw: dict, key: str) -> bool:
    value = raw.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _parse_str(raw: dict, key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return str(value)


def parse_bond_record(raw: Any) -> BondRecord | None:
    """Validate one raw bond entry.

    Args:
        raw: A single element of the get_all_bonds view result.

    Returns:
        A BondRecord, or None if the entry is not a dict or has no
        parsable id.
    """
    if not isinstance(raw, dict):
        logger.warning("bond_record_rejected", reason="not_a_mapping")
        return None

    try:
        bond_id = int(str(raw.get("id")).strip())
    except ValueError:
        logger.warning("bond_record_rejected", reason="invalid_id", raw_id=raw.get("id"))
        return None

    return BondRecord(
        id=bond_id,
        issuer=_parse_str(raw, "issuer"),
        total_raise=_parse_int(raw, "total_raise"),
        min_invest=_parse_int(raw, "min_invest"),
        raised=_parse_int(raw, "raised"),
        rate_bps=_parse_int(raw, "rate_bps"),
        start_ts=_parse_int(raw, "start_ts"),
        end_ts=_parse_int(raw, "end_ts"),
        canceled=_parse_bool(raw, "canceled"),
        investor_count=_parse_int(raw, "investor_count"),
        company=_parse_str(raw, "company"),
        bond_id=_parse_str(raw, "bondId"),
        question=_parse_str(raw, "question"),
        description=_parse_str(raw, "description"),
        category=_parse_str(raw, "category"),
        coupon_rate=_parse_str(raw, "couponRate"),
        maturity_date=_parse_str(raw, "maturityDate"),
        principal_amount=_parse_str(raw, "principalAmount"),
        credit_rating=_parse_str(raw, "creditRating"),
    )


def parse_bond_list(raw: Any) -> list[BondRecord]:
    """Parse a raw bond list, dropping entries that fail validation.

    Anything other than a list is treated as zero records.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("malformed_bond_list", raw_type=type(raw).__name__)
        return []

    records: list[BondRecord] = []
    for entry in raw:
        record = parse_bond_record(entry)
        if record is not None:
            records.append(record)
    return records
