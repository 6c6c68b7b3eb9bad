"""Aptos fullnode REST reader via aiohttp.

Implements ChainReader against the fullnode REST API:
  - GET  /accounts/{address}/resources  (bond store presence)
  - POST /view                           (get_all_bonds view function)

Node errors come back as JSON {"message", "error_code", "vm_error_code"}.
Both fields feed classify_error so callers get a FetchErrorCause, never a
raw HTTP status.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp

from bondmarket.chain.reader import ChainReader
from bondmarket.chain.types import classify_error
from bondmarket.config import ChainSettings
from bondmarket.exceptions import ChainReadError
from bondmarket.logging import get_logger
from bondmarket.models import FetchErrorCause

logger = get_logger(__name__)


class AptosRestReader(ChainReader):
    """Concrete ChainReader for an Aptos fullnode.

    Owns a single aiohttp session. Use as an async context manager or call
    connect()/close() explicitly. CRITICAL: close() must be called to avoid
    leaking the connector.
    """

    def __init__(self, settings: ChainSettings) -> None:
        self._settings = settings
        self._base_url = settings.node_url.rstrip("/")
        self._session: aiohttp.ClientSession | None = None

    @property
    def view_function(self) -> str:
        """Fully qualified get_all_bonds view function id."""
        return (
            f"{self._settings.module_address}::{self._settings.module_name}::get_all_bonds"
        )

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.request_timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            logger.info("aptos_reader_connected", node_url=self._base_url)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.info("aptos_reader_closed")
        self._session = None

    async def __aenter__(self) -> AptosRestReader:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def has_bond_store(self, address: str) -> bool:
        """Check the account's resources for a bond store type.

        An account the node does not know (never funded) has no store.
        """
        try:
            resources = await self._request("GET", f"/accounts/{address}/resources")
        except ChainReadError as exc:
            if exc.cause is not FetchErrorCause.RESOURCE_NOT_FOUND:
                raise
            logger.debug("account_not_on_chain", address=address, error=str(exc))
            return False
        if not isinstance(resources, list):
            return False

        for resource in resources:
            resource_type = resource.get("type", "") if isinstance(resource, dict) else ""
            if any(marker in resource_type for marker in self._settings.bond_store_markers):
                logger.debug("bond_store_found", address=address, type=resource_type)
                return True
        return False

    async def list_bonds(self, address: str) -> Any:
        """Call get_all_bonds for an account and return its first return value.

        View functions return a list of return values; get_all_bonds has a
        single vector<BondInfo> return. An empty or non-list payload is
        returned as None.
        """
        payload = {
            "function": self.view_function,
            "type_arguments": [],
            "arguments": [address],
        }
        response = await self._request("POST", "/view", json=payload)
        if isinstance(response, list) and response:
            return response[0]
        return None

    async def _request(self, method: str, path: str, json: dict | None = None) -> Any:
        """Issue one request and decode the JSON body.

        Raises:
            ChainReadError: On HTTP status >= 400 or transport failure.
        """
        if self._session is None or self._session.closed:
            await self.connect()
        assert self._session is not None

        url = f"{self._base_url}{path}"
        try:
            async with self._session.request(method, url, json=json) as response:
                if response.status >= 400:
                    body = await self._read_error_body(response)
                    error_code = str(body.get("error_code", ""))
                    message = str(body.get("message", "")) or f"HTTP {response.status}"
                    vm_code = body.get("vm_error_code")
                    cause = classify_error(f"{error_code} {message}")
                    logger.debug(
                        "chain_request_rejected",
                        url=url,
                        status=response.status,
                        error_code=error_code,
                        vm_error_code=vm_code,
                    )
                    raise ChainReadError(message, cause=cause)
                try:
                    return await response.json(content_type=None)
                except ValueError:
                    logger.warning("malformed_chain_response", url=url)
                    return None
        except aiohttp.ClientError as exc:
            raise ChainReadError(str(exc) or type(exc).__name__, FetchErrorCause.UNKNOWN) from exc
        except asyncio.TimeoutError as exc:
            raise ChainReadError("request timed out", FetchErrorCause.UNKNOWN) from exc

    @staticmethod
    async def _read_error_body(response: aiohttp.ClientResponse) -> dict:
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return {"message": await response.text()}
        return body if isinstance(body, dict) else {"message": str(body)}
