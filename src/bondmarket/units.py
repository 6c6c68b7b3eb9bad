"""Money unit conversion between chain base units and display units.

1 display unit (APT) = 100,000,000 base units (octas).
All conversions go through int or Decimal. Never use float for amounts.
"""

from decimal import ROUND_DOWN, Decimal

BASE_UNITS_PER_DISPLAY = 100_000_000
DISPLAY_DECIMALS = 6
U64_MAX = 2**64 - 1  # Move u64 ceiling for on-chain amounts

_BASE_SCALE = Decimal(BASE_UNITS_PER_DISPLAY)
_DISPLAY_QUANTUM = Decimal(1).scaleb(-DISPLAY_DECIMALS)  # 0.000001


def to_display_units(base_units: int) -> Decimal:
    """Convert base units to display units exactly.

    Dividing by 10^8 only shifts the decimal exponent, so the result is
    exact and round-trips through to_base_units without loss.
    """
    return Decimal(base_units) / _BASE_SCALE


def to_base_units(display_amount: Decimal) -> int:
    """Convert a display amount to base units, rounding down.

    Sub-base-unit fractions are truncated, never rounded up, so a
    conversion can lose at most one base unit and never gains value.

    Args:
        display_amount: Amount in display units (e.g., Decimal("10.5")).

    Returns:
        Integer base units.

    Raises:
        ValueError: If display_amount is NaN.
        OverflowError: If display_amount is infinite.
    """
    # Exact integer ratio; a Decimal product rounds at context precision
    numerator, denominator = display_amount.as_integer_ratio()
    scaled = abs(numerator) * BASE_UNITS_PER_DISPLAY // denominator
    return -scaled if numerator < 0 else scaled


def round_display(display_amount: Decimal) -> Decimal:
    """Truncate a display amount to DISPLAY_DECIMALS places."""
    return display_amount.quantize(_DISPLAY_QUANTUM, rounding=ROUND_DOWN)


def format_amount(base_units: int, symbol: str = "APT") -> str:
    """Render base units as a fixed six-decimal display string.

    >>> format_amount(150_000_000)
    '1.500000 APT'
    """
    amount = round_display(to_display_units(base_units))
    if symbol:
        return f"{amount:f} {symbol}"
    return f"{amount:f}"
