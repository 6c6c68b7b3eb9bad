"""Custom exceptions for the bond market core.

All calculation, chain-read and aggregation exceptions live here
to avoid circular imports between modules.
"""

from __future__ import annotations

from bondmarket.models import FetchErrorCause


class BondMarketError(Exception):
    """Base exception for all bond market errors."""


class InvalidWindow(BondMarketError):
    """Raised when an interest window has a non-positive duration."""

    def __init__(self, start_ts: int, end_ts: int) -> None:
        self.start_ts = start_ts
        self.end_ts = end_ts
        super().__init__(
            f"End timestamp must be after start timestamp (start_ts={start_ts}, end_ts={end_ts})"
        )


class ChainReadError(BondMarketError):
    """Raised when a single chain lookup fails at the transport or protocol level."""

    def __init__(
        self,
        message: str,
        cause: FetchErrorCause = FetchErrorCause.UNKNOWN,
        address: str | None = None,
    ) -> None:
        self.cause = cause
        self.address = address
        super().__init__(message)


class FetchFailed(BondMarketError):
    """Raised when every source address lookup failed."""

    def __init__(
        self,
        cause: FetchErrorCause,
        failures: dict[str, ChainReadError] | None = None,
    ) -> None:
        self.cause = cause
        self.failures = failures or {}
        self.message = cause.message
        super().__init__(f"{cause.value}: {self.message}")


class FetchAbandoned(BondMarketError):
    """Raised when the caller abandons an in-flight fetch."""


class InvalidBondParameters(BondMarketError):
    """Raised when create-bond input fails validation."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        self.fields = fields or []
        super().__init__(message)
