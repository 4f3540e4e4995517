"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

# Set test environment before importing settings
os.environ["ENV"] = "development"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"

from report_engine.config import ExportSettings, get_settings  # noqa: E402
from report_engine.models import (  # noqa: E402
    AnalyticsBundle,
    ExportCategory,
    GeoData,
    SecurityMetrics,
    TrafficMetrics,
)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Re-read settings for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def export_settings(tmp_path) -> ExportSettings:
    """Export settings writing into a temporary directory."""
    return ExportSettings(output_dir=tmp_path, slow_warning_seconds=30.0)


@pytest.fixture
def period() -> tuple[datetime, datetime]:
    """A one-day window ending an hour ago."""
    end = datetime.now(UTC) - timedelta(hours=1)
    return end - timedelta(days=1), end


@pytest.fixture
def sample_traffic_data() -> dict[str, Any]:
    """Traffic payload as a data source returns it (camelCase keys)."""
    return {
        "zoneId": "zone-123",
        "requests": 1_500_000,
        "bytes": 5 * 1024**3,
        "bandwidth": 1500,
        "pageViews": 42_000,
        "visits": 999,
        "timeSeries": [
            {"timestamp": "2026-01-05T10:00:00Z", "requests": 1200, "bytes": 4096},
            {"timestamp": "2026-01-05T11:00:00Z", "requests": 1800, "bytes": 8192},
            {"timestamp": "2026-01-05T12:00:00Z", "requests": 900, "bytes": 2048},
        ],
    }


@pytest.fixture
def sample_security_data() -> dict[str, Any]:
    return {
        "cacheStatus": {"hit": 750, "miss": 250},
        "firewallEvents": {"total": 120, "blocked": 80, "challenged": 30, "allowed": 10},
        "timeSeries": [
            {"timestamp": "2026-01-05T10:00:00Z", "total": 40},
            {"timestamp": "2026-01-05T11:00:00Z", "total": 80},
        ],
    }


@pytest.fixture
def sample_geo_data() -> dict[str, Any]:
    return {
        "countries": [
            {"code": "US", "name": "United States", "requests": 700},
            {"code": "DE", "name": "Germany", "requests": 200},
            {"code": "JP", "name": "Japan", "requests": 100},
        ]
    }


@pytest.fixture
def sample_bundle(
    sample_traffic_data: dict[str, Any],
    sample_security_data: dict[str, Any],
    sample_geo_data: dict[str, Any],
) -> AnalyticsBundle:
    """Bundle with traffic, security and geo populated."""
    return AnalyticsBundle(
        traffic=TrafficMetrics.model_validate(sample_traffic_data),
        security=SecurityMetrics.model_validate(sample_security_data),
        geo=GeoData.model_validate(sample_geo_data),
    )


@pytest.fixture
def mock_data_source(
    sample_traffic_data: dict[str, Any],
    sample_security_data: dict[str, Any],
    sample_geo_data: dict[str, Any],
) -> AsyncMock:
    """Data source returning payloads for traffic, security and geo only."""
    payloads = {
        ExportCategory.TRAFFIC: sample_traffic_data,
        ExportCategory.SECURITY: sample_security_data,
        ExportCategory.GEO: sample_geo_data,
    }

    async def fetch(category, zone_id, account_tag, start_date, end_date):
        return payloads.get(category)

    source = AsyncMock()
    source.fetch = AsyncMock(side_effect=fetch)
    return source


@pytest.fixture
def mock_storage_checker() -> AsyncMock:
    checker = AsyncMock()
    checker.has_free_space = AsyncMock(return_value=True)
    return checker


@pytest.fixture
def mock_file_renderer() -> AsyncMock:
    async def render(document: str, file_name: str) -> str:
        return f"/reports/{file_name}"

    renderer = AsyncMock()
    renderer.render = AsyncMock(side_effect=render)
    return renderer


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "pdf: Tests that need the WeasyPrint extra")
    config.addinivalue_line("markers", "slow: Slow tests")
