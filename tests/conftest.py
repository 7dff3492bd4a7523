"""Shared fixtures for the ngkeeper test suite.

Provides an in-memory registry that satisfies ``RegistryLookup`` and
helpers for building packuments without touching the network.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pytest

from ngkeeper.models.metadata import PackageMetadata

VersionSpec = Union[Iterable[str], Mapping[str, Optional[str]]]


def make_packument(
    name: str,
    versions: VersionSpec,
    *,
    latest: Optional[str] = None,
    peer: str = "@angular/core",
) -> Dict[str, Any]:
    """Build a raw npm packument.

    *versions* is either a list of version strings (no peer dependencies)
    or a mapping of version to the peer constraint on *peer* (``None`` for
    no peer dependency).
    """
    if isinstance(versions, Mapping):
        items = list(versions.items())
    else:
        items = [(v, None) for v in versions]

    raw_versions: Dict[str, Any] = {}
    for version, constraint in items:
        record: Dict[str, Any] = {"name": name, "version": version}
        if constraint is not None:
            record["peerDependencies"] = {peer: constraint}
        raw_versions[version] = record

    data: Dict[str, Any] = {"name": name, "versions": raw_versions}
    if latest is not None:
        data["dist-tags"] = {"latest": latest}
    return data


def make_metadata(
    name: str,
    versions: VersionSpec,
    *,
    latest: Optional[str] = None,
    peer: str = "@angular/core",
) -> PackageMetadata:
    """Build :class:`PackageMetadata` from the same arguments as make_packument."""
    return PackageMetadata.from_registry_json(
        make_packument(name, versions, latest=latest, peer=peer)
    )


class FakeRegistry:
    """In-memory ``RegistryLookup`` returning canned metadata.

    Names listed in *failing* raise from ``fetch_package_metadata`` so the
    analyzer's exception path can be exercised. Every lookup is recorded.
    """

    def __init__(
        self,
        packages: Optional[Mapping[str, PackageMetadata]] = None,
        *,
        failing: Iterable[str] = (),
    ) -> None:
        self.packages: Dict[str, PackageMetadata] = dict(packages or {})
        self.failing = set(failing)
        self.calls: List[str] = []

    async def fetch_package_metadata(self, name: str) -> Optional[PackageMetadata]:
        self.calls.append(name)
        if name in self.failing:
            raise RuntimeError(f"lookup exploded for {name}")
        return self.packages.get(name)


@pytest.fixture
def angular_registry() -> FakeRegistry:
    """Registry with a small Angular 16/17 world.

    - framework packages with 16.x, 17.x and an 18 pre-release
    - ``@angular/material`` gated by peer deps
    - ``ngx-toastr`` with 17 and 18 compatible lines
    - ``rxjs`` with no peer dependency on the framework
    """
    framework_versions = ["16.2.0", "17.0.0", "17.1.0", "18.0.0-next.0"]
    return FakeRegistry(
        {
            "@angular/core": make_metadata(
                "@angular/core", framework_versions, latest="17.1.0"
            ),
            "@angular/common": make_metadata(
                "@angular/common", framework_versions, latest="17.1.0"
            ),
            "@angular/material": make_metadata(
                "@angular/material",
                {
                    "16.2.0": "^16.0.0",
                    "17.0.0": "^17.0.0",
                    "17.1.2": "^17.0.0 || ^18.0.0",
                },
                latest="17.1.2",
            ),
            "ngx-toastr": make_metadata(
                "ngx-toastr",
                {
                    "17.0.0": "^16.0.0",
                    "18.0.0": ">=17.0.0-0",
                    "19.0.0": "^19.0.0",
                },
                latest="19.0.0",
            ),
            "rxjs": make_metadata(
                "rxjs", ["7.5.0", "7.8.1", "8.0.0-alpha.14"], latest="7.8.1"
            ),
        }
    )


@pytest.fixture
def sample_manifest() -> Dict[str, Any]:
    """A typical Angular 16 ``package.json``."""
    return {
        "name": "demo-app",
        "version": "0.0.0",
        "scripts": {"start": "ng serve"},
        "dependencies": {
            "@angular/core": "^16.2.0",
            "@angular/common": "^16.2.0",
            "@angular/material": "^16.2.0",
            "ngx-toastr": "^17.0.0",
            "rxjs": "~7.5.0",
        },
        "devDependencies": {
            "typescript": "~5.1.3",
        },
    }
