"""Unit tests for ngkeeper.core.registry.

Test Coverage:
- Packument URL building (scoped names, custom registries)
- Caching with double-checked locking under concurrency
- Failure handling: errors become ``None`` and are not cached
- Convenience queries built on fetch_package_metadata
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from ngkeeper.core.registry import NpmRegistry, package_url
from ngkeeper.exceptions import NetworkError, RegistryError
from ngkeeper.utils.http import HTTPClient

from tests.conftest import make_packument


@pytest.fixture
def mock_http_client() -> MagicMock:
    """Create a mock HTTPClient whose get_json is awaitable."""
    client = MagicMock(spec=HTTPClient)
    client.get_json = AsyncMock()
    return client


@pytest.fixture
def core_packument() -> Dict[str, Any]:
    return make_packument(
        "@angular/core", ["16.2.0", "17.0.0", "17.1.0"], latest="17.1.0"
    )


@pytest.mark.unit
class TestPackageUrl:
    """Tests for package_url."""

    def test_unscoped(self) -> None:
        assert package_url("rxjs") == "https://registry.npmjs.org/rxjs"

    def test_scoped_name_is_encoded(self) -> None:
        assert package_url("@angular/core") == (
            "https://registry.npmjs.org/@angular%2Fcore"
        )

    def test_custom_registry_trailing_slash(self) -> None:
        assert package_url("rxjs", "https://npm.example.com/") == (
            "https://npm.example.com/rxjs"
        )


@pytest.mark.unit
class TestNpmRegistryFetch:
    """Tests for NpmRegistry.fetch_package_metadata."""

    @pytest.mark.asyncio
    async def test_fetch_builds_metadata(
        self, mock_http_client: MagicMock, core_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get_json.return_value = core_packument
        registry = NpmRegistry(mock_http_client)

        metadata = await registry.fetch_package_metadata("@angular/core")

        assert metadata is not None
        assert metadata.name == "@angular/core"
        assert metadata.latest == "17.1.0"
        assert metadata.version_list == ["16.2.0", "17.0.0", "17.1.0"]
        mock_http_client.get_json.assert_awaited_once_with(
            "https://registry.npmjs.org/@angular%2Fcore"
        )

    @pytest.mark.asyncio
    async def test_uses_configured_registry(
        self, mock_http_client: MagicMock, core_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get_json.return_value = core_packument
        registry = NpmRegistry(mock_http_client, registry_url="https://npm.local/")

        await registry.fetch_package_metadata("rxjs")

        mock_http_client.get_json.assert_awaited_once_with("https://npm.local/rxjs")

    @pytest.mark.asyncio
    async def test_second_fetch_hits_cache(
        self, mock_http_client: MagicMock, core_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get_json.return_value = core_packument
        registry = NpmRegistry(mock_http_client)

        first = await registry.fetch_package_metadata("@angular/core")
        second = await registry.fetch_package_metadata("@angular/core")

        assert first is second
        assert mock_http_client.get_json.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_one_request(
        self, mock_http_client: MagicMock, core_packument: Dict[str, Any]
    ) -> None:
        """Test concurrent callers for one name trigger a single request."""

        async def slow_get_json(url: str) -> Dict[str, Any]:
            await asyncio.sleep(0.01)
            return core_packument

        mock_http_client.get_json.side_effect = slow_get_json
        registry = NpmRegistry(mock_http_client, concurrent_limit=1)

        results = await asyncio.gather(
            *(registry.fetch_package_metadata("@angular/core") for _ in range(5))
        )

        assert all(r is results[0] for r in results)
        assert mock_http_client.get_json.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            RegistryError("Resource not found", status_code=404),
            NetworkError("Request failed after 4 attempts"),
            httpx.ConnectError("connection refused"),
        ],
        ids=["not-found", "network", "httpx"],
    )
    async def test_failure_returns_none(
        self, mock_http_client: MagicMock, error: Exception
    ) -> None:
        mock_http_client.get_json.side_effect = error
        registry = NpmRegistry(mock_http_client)

        assert await registry.fetch_package_metadata("ghost") is None

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(
        self, mock_http_client: MagicMock, core_packument: Dict[str, Any]
    ) -> None:
        """Test a failed lookup is retried on the next call."""
        mock_http_client.get_json.side_effect = [
            NetworkError("temporary"),
            core_packument,
        ]
        registry = NpmRegistry(mock_http_client)

        assert await registry.fetch_package_metadata("@angular/core") is None

        metadata = await registry.fetch_package_metadata("@angular/core")

        assert metadata is not None
        assert mock_http_client.get_json.await_count == 2


@pytest.mark.unit
class TestNpmRegistryQueries:
    """Tests for the convenience queries."""

    @pytest.mark.asyncio
    async def test_latest_and_all_versions(
        self, mock_http_client: MagicMock, core_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get_json.return_value = core_packument
        registry = NpmRegistry(mock_http_client)

        assert await registry.get_latest_version("@angular/core") == "17.1.0"
        assert await registry.get_all_versions("@angular/core") == [
            "16.2.0",
            "17.0.0",
            "17.1.0",
        ]
        assert await registry.package_exists("@angular/core") is True

    @pytest.mark.asyncio
    async def test_queries_on_missing_package(
        self, mock_http_client: MagicMock
    ) -> None:
        mock_http_client.get_json.side_effect = RegistryError("not found")
        registry = NpmRegistry(mock_http_client)

        assert await registry.get_latest_version("ghost") is None
        assert await registry.get_all_versions("ghost") == []
        assert await registry.package_exists("ghost") is False
