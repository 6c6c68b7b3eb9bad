"""Interest reserve calculation for bond market creation.

The creator of a market locks up the maximum interest the bond can accrue
over its window, computed with simple annual interest:

  reserve = floor(total_raise * rate_bps * duration / (SECONDS_PER_YEAR * BPS_DENOM))

SECONDS_PER_YEAR is exactly 365 days. It is a fixed constant shared with the
on-chain module, not a calendar- or leap-year-aware value.

Python ints are arbitrary precision, so the numerator never overflows and
the only truncation is the final floor division.
"""

from bondmarket.exceptions import InvalidWindow

SECONDS_PER_YEAR = 31_536_000  # 365 * 86_400
BPS_DENOM = 10_000


def compute_interest_reserve(
    total_raise: int,
    rate_bps: int,
    start_ts: int,
    end_ts: int,
) -> int:
    """Compute the maximum interest reserve for a bond, in base units.

    Args:
        total_raise: Principal to raise, in base units.
        rate_bps: Annual rate in basis points. Range is validated upstream.
        start_ts: Window start, unix seconds.
        end_ts: Window end, unix seconds.

    Returns:
        Reserve in base units, floored.

    Raises:
        InvalidWindow: If end_ts <= start_ts.
    """
    if end_ts <= start_ts:
        raise InvalidWindow(start_ts, end_ts)

    duration = int(end_ts) - int(start_ts)
    numerator = int(total_raise) * int(rate_bps) * duration
    return numerator // (SECONDS_PER_YEAR * BPS_DENOM)
