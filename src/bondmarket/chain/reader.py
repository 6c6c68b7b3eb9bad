"""Abstract chain reader interface.

Defines the read-only contract the aggregator depends on.
Node-specific details (REST paths, error payloads) stay isolated in the
concrete implementation.
"""

from abc import ABC, abstractmethod
from typing import Any


class ChainReader(ABC):
    """Abstract base class for read-only blockchain clients.

    Both methods are side-effect free. Transport or protocol failures are
    raised as ChainReadError carrying a FetchErrorCause.
    """

    @abstractmethod
    async def has_bond_store(self, address: str) -> bool:
        """Return True if the account holds a bond store resource."""
        ...

    @abstractmethod
    async def list_bonds(self, address: str) -> Any:
        """Return the raw bond list for an account.

        The result is untyped until validated: callers must treat anything
        other than a list of dicts as malformed.
        """
        ...
