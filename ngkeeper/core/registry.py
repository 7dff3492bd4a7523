"""npm registry access for ngkeeper.

The analyzer never talks HTTP itself. It is handed a *registry lookup*,
any object implementing :class:`RegistryLookup`, and asks it for one
:class:`~ngkeeper.models.PackageMetadata` per dependency. A lookup must
never raise: a missing package or a transport failure is reported as
``None`` ("absent metadata") and the analyzer falls back to the current
version.

:class:`NpmRegistry` is the production implementation. It fetches
``GET {registry}/{package}`` through a shared
:class:`~ngkeeper.utils.http.HTTPClient` and caches each package for the
lifetime of the instance, so a name is fetched at most once per run.

Typical usage::

    async with HTTPClient() as http:
        registry = NpmRegistry(http)
        metadata = await registry.fetch_package_metadata("@angular/core")
        print(metadata.latest if metadata else "unavailable")
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Protocol

import httpx

from ngkeeper.constants import (
    DEFAULT_CONCURRENT_LIMIT,
    NPM_PACKAGE_PATH,
    NPM_REGISTRY_URL,
)
from ngkeeper.exceptions import NgKeeperError
from ngkeeper.models.metadata import PackageMetadata
from ngkeeper.utils.http import HTTPClient
from ngkeeper.utils.logger import get_logger

logger = get_logger("registry")

__all__ = ["RegistryLookup", "NpmRegistry", "package_url"]


class RegistryLookup(Protocol):
    """Capability the analyzer needs from a package registry."""

    async def fetch_package_metadata(self, name: str) -> Optional[PackageMetadata]:
        """Return metadata for *name*, or ``None`` if it is unavailable.

        Implementations must not raise.
        """
        ...


def package_url(name: str, registry_url: str = NPM_REGISTRY_URL) -> str:
    """Return the packument URL for *name*.

    The slash of a scoped name is percent-encoded, as the registry expects.

    >>> package_url("@angular/core")
    'https://registry.npmjs.org/@angular%2Fcore'
    """
    return NPM_PACKAGE_PATH.format(
        registry=registry_url.rstrip("/"),
        package=name.replace("/", "%2F"),
    )


class NpmRegistry:
    """Cached, failure-tolerant npm registry client.

    Each package name triggers at most one successful HTTP request. A
    semaphore bounds in-flight fetches and a second cache check inside it
    stops concurrent callers from fetching the same package twice.
    Failures are not cached, so a later call may retry.

    Args:
        http_client: Shared :class:`HTTPClient` (owns the connection pool).
        registry_url: Base URL of the registry.
        concurrent_limit: Maximum number of fetches in flight at once.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        registry_url: str = NPM_REGISTRY_URL,
        concurrent_limit: int = DEFAULT_CONCURRENT_LIMIT,
    ) -> None:
        self.http_client = http_client
        self.registry_url = registry_url.rstrip("/")
        self._semaphore = asyncio.Semaphore(concurrent_limit)
        self._cache: Dict[str, PackageMetadata] = {}

    # ------------------------------------------------------------------
    # RegistryLookup
    # ------------------------------------------------------------------

    async def fetch_package_metadata(self, name: str) -> Optional[PackageMetadata]:
        """Fetch (or return cached) metadata for *name*; ``None`` on failure."""
        if name in self._cache:
            return self._cache[name]

        async with self._semaphore:
            if name in self._cache:
                return self._cache[name]

            url = package_url(name, self.registry_url)
            try:
                data = await self.http_client.get_json(url)
            except (NgKeeperError, httpx.HTTPError) as exc:
                logger.warning("Failed to fetch package %s: %s", name, exc)
                return None

            metadata = PackageMetadata.from_registry_json(data, name=name)
            self._cache[name] = metadata
            logger.debug(
                "Fetched %s: %d version(s), latest=%s",
                name,
                len(metadata.versions),
                metadata.latest,
            )
            return metadata

    # ------------------------------------------------------------------
    # Convenience queries
    # ------------------------------------------------------------------

    async def get_latest_version(self, name: str) -> Optional[str]:
        """Return the ``latest`` dist tag of *name*, or ``None``."""
        metadata = await self.fetch_package_metadata(name)
        return metadata.latest if metadata else None

    async def get_all_versions(self, name: str) -> List[str]:
        """Return every published version of *name* (empty if unavailable)."""
        metadata = await self.fetch_package_metadata(name)
        return metadata.version_list if metadata else []

    async def package_exists(self, name: str) -> bool:
        return await self.fetch_package_metadata(name) is not None
