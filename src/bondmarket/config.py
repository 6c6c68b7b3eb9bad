"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class ChainSettings(BaseSettings):
    """Aptos fullnode and bond module location."""

    model_config = SettingsConfigDict(env_prefix="CHAIN_")

    node_url: str = "https://fullnode.devnet.aptoslabs.com/v1"
    module_address: str = ""  # account that published the bond module
    module_name: str = "prediction_market"
    request_timeout_seconds: float = 10.0
    # A resource whose type contains any of these marks a bond store
    bond_store_markers: tuple[str, ...] = ("BondStore", "prediction_market")


class MarketSettings(BaseSettings):
    """Market listing defaults and display conventions."""

    model_config = SettingsConfigDict(env_prefix="MARKET_")

    display_symbol: str = "APT"
    default_scope: Literal["contract", "user", "all"] = "all"
    default_sort: Literal["volume", "participants", "deadline", "raised"] = "volume"
    create_start_delay_seconds: int = 60  # bonds open one minute after preparation


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    chain: ChainSettings = ChainSettings()
    market: MarketSettings = MarketSettings()
    api: ApiSettings = ApiSettings()
