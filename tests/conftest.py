"""Shared test fixtures."""

import json
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any, cast
from unittest.mock import patch

import pytest
import structlog

from game_market.catalog import CatalogClient
from game_market.config import CatalogAPIConfig, CollectorConfig, RetryConfig, get_settings
from game_market.utils.rate_limiter import RateLimiter

FIXTURES_DIR = Path(__file__).parent / "fixtures"

BASE_URL = "https://api.gamalytic.com"


def load_fixture(name: str) -> dict[str, Any]:
    """Load a JSON fixture file."""
    with (FIXTURES_DIR / name).open(encoding="utf-8") as f:
        return cast(dict[str, Any], json.load(f))


@pytest.fixture(autouse=True, scope="session")
def quiet_logging() -> None:
    """Keep log lines out of captured stdout."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    """Settings are cached per process; reset around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_env() -> Iterator[None]:
    """Mock environment variables for tests."""
    with patch.dict(os.environ, {"CATALOG_API_KEY": "test_api_key_123"}):
        yield


@pytest.fixture
def search_response() -> dict[str, Any]:
    """Load catalog search response fixture."""
    return load_fixture("search_response.json")


@pytest.fixture
def detail_response() -> dict[str, Any]:
    """Load catalog game detail response fixture."""
    return load_fixture("game_detail_response.json")


@pytest.fixture
def api_config() -> CatalogAPIConfig:
    return CatalogAPIConfig(api_key="test_api_key_123", base_url=BASE_URL)


@pytest.fixture
def retry_config() -> RetryConfig:
    """Fast retries so tests never sleep."""
    return RetryConfig(max_attempts=2, base_delay_seconds=0.0, max_delay_seconds=0.0)


@pytest.fixture
def collector_config() -> CollectorConfig:
    return CollectorConfig(page_size=100, price_min=7.99, max_pages=50)


@pytest.fixture
def client(api_config: CatalogAPIConfig, retry_config: RetryConfig) -> CatalogClient:
    return CatalogClient(
        api_config=api_config,
        retry_config=retry_config,
        rate_limiter=RateLimiter(requests_per_minute=6000, burst_size=100),
    )
