"""
Feed Engine Configuration

Centralized configuration. All environment variables MUST be defined here.
No os.getenv() calls allowed elsewhere.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from feed_engine.core.types import ConfigurationError


def _optional_env(name: str, default: str = "") -> str:
    """Get an optional environment variable with a default."""
    return os.environ.get(name, default)


def _optional_env_int(name: str, default: int) -> int:
    """Get an optional integer environment variable with a default."""
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid integer value for {name}: {value}")


@dataclass(frozen=True)
class StoreConfig:
    """Redis key-value store configuration."""
    url: str
    namespace: str = "gamefeed:"


@dataclass(frozen=True)
class FetcherConfig:
    """Remote fetcher configuration."""
    base_url: str
    timeout_seconds: int = 0  # 0 = transport default

    @property
    def timeout(self) -> float | None:
        """Total request timeout in seconds, or None for the aiohttp default."""
        return float(self.timeout_seconds) if self.timeout_seconds > 0 else None


@dataclass(frozen=True)
class AssetsConfig:
    """Where the shipped default-sources document and category catalogs live."""
    defaults_path: str = "/default_sources.json"
    catalog_path_template: str = "/sources/{category}/games.json"

    def catalog_path(self, category_id: str) -> str:
        """Path of the catalog document for a category id."""
        return self.catalog_path_template.format(category=category_id)


@dataclass(frozen=True)
class Settings:
    """Root configuration container."""
    store: StoreConfig
    fetcher: FetcherConfig
    assets: AssetsConfig


def _load_settings() -> Settings:
    """Load all settings from environment variables.

    Every value has a default so that --mock mode works without a .env file.
    """
    store = StoreConfig(
        url=_optional_env("FEED_REDIS_URL", "redis://localhost:6379/0"),
        namespace=_optional_env("FEED_STORE_NAMESPACE", "gamefeed:"),
    )

    fetcher = FetcherConfig(
        base_url=_optional_env("FEED_ASSETS_BASE_URL", "http://localhost:8080"),
        timeout_seconds=_optional_env_int("FEED_FETCH_TIMEOUT_SECONDS", 0),
    )

    assets = AssetsConfig(
        defaults_path=_optional_env("FEED_DEFAULTS_PATH", "/default_sources.json"),
        catalog_path_template=_optional_env(
            "FEED_CATALOG_PATH_TEMPLATE", "/sources/{category}/games.json"
        ),
    )

    return Settings(store=store, fetcher=fetcher, assets=assets)


settings = _load_settings()
