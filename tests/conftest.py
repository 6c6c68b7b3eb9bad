"""Shared test fixtures for the bond market core."""

from unittest.mock import AsyncMock

import pytest

from bondmarket.config import AppSettings, ChainSettings, MarketSettings

from factories import CONTRACT


@pytest.fixture
def mock_reader() -> AsyncMock:
    """ChainReader mock: every address has a store and no bonds."""
    reader = AsyncMock()
    reader.has_bond_store = AsyncMock(return_value=True)
    reader.list_bonds = AsyncMock(return_value=[])
    return reader


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (local node, known contract)."""
    return AppSettings(
        log_level="DEBUG",
        chain=ChainSettings(
            node_url="http://localhost:8080/v1",
            module_address=CONTRACT,
            module_name="prediction_market",
        ),
        market=MarketSettings(),
    )
