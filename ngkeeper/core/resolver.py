"""Version resolution policies for ngkeeper.

Two policies pick the recommended version of a dependency from its
registry metadata:

1. :class:`FrameworkVersionResolver` for the framework's own packages
   (``@angular/*`` except the Material/CDK toolkits). Compatibility is
   decided by the version itself: the recommendation is the highest
   release of the target major.
2. :class:`EcosystemVersionResolver` for everything else. Compatibility is
   inferred from each version's peer dependency on ``@angular/core``.

Both share the same ground rules:

- **No downgrades** -- the result never orders below the current version
  unless the registry has nothing at or above it, in which case the
  current version is echoed back.
- **Stable first** -- pre-releases are only considered when the current
  version is itself a pre-release.

Typical usage::

    resolver = resolver_for("@angular/router", target=17)
    recommended = resolver.resolve(metadata, "16.2.0")
"""

from __future__ import annotations

from typing import Iterable, List, Union

from ngkeeper.constants import (
    FRAMEWORK_CORE_PACKAGE,
    FRAMEWORK_SCOPE,
    FRAMEWORK_TOOLKIT_MARKERS,
)
from ngkeeper.core.peer_dependencies import satisfies_peer_dependency
from ngkeeper.models.metadata import PackageMetadata
from ngkeeper.utils.logger import get_logger
from ngkeeper.utils.version_utils import (
    compare_versions,
    is_prerelease,
    parse_major,
    sort_versions_descending,
    version_major,
)

logger = get_logger("resolver")

Target = Union[int, str]


def is_framework_package(name: str) -> bool:
    """Return True for framework-core packages.

    >>> is_framework_package("@angular/router")
    True
    >>> is_framework_package("@angular/material")
    False
    """
    return name.startswith(FRAMEWORK_SCOPE) and not any(
        marker in name for marker in FRAMEWORK_TOOLKIT_MARKERS
    )


class _TargetedResolver:
    """Holds the target framework major shared by both policies."""

    def __init__(self, target: Target) -> None:
        self.target: str = str(target)
        self.target_major = parse_major(target)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(target={self.target!r})"


# ---------------------------------------------------------------------------
# Framework-core packages
# ---------------------------------------------------------------------------


class FrameworkVersionResolver(_TargetedResolver):
    """Pick the highest release of the target major for a framework package.

    Args:
        target: Target framework major, as an int or numeric string. A
            non-numeric target matches no version and resolves to the
            synthesized ``"<target>.0.0"`` fallback.

    Example::

        >>> resolver = FrameworkVersionResolver(17)
        >>> resolver.resolve_versions(
        ...     ["16.2.0", "17.0.0", "17.1.0", "18.0.0-next.0"], "16.2.0"
        ... )
        '17.1.0'
    """

    def resolve(self, metadata: PackageMetadata, current_version: str) -> str:
        return self.resolve_versions(metadata.version_list, current_version)

    def resolve_versions(self, versions: Iterable[str], current_version: str) -> str:
        """Apply the framework policy to a plain list of versions.

        1. Keep versions whose major equals the target major.
        2. Unless the current version is a pre-release, keep only the
           stable ones among them (when there are any).
        3. Return the highest remaining version.
        4. With no candidates, keep a current version whose major is
           already above the target.
        5. Otherwise synthesize ``"<target>.0.0"``.
        """
        candidates = [v for v in versions if version_major(v) == self.target_major]

        if not is_prerelease(current_version):
            stable = [v for v in candidates if not is_prerelease(v)]
            if stable:
                candidates = stable

        if candidates:
            return sort_versions_descending(candidates)[0]

        if version_major(current_version) > self.target_major:
            logger.debug(
                "Current %s is ahead of target major %s; keeping it",
                current_version,
                self.target,
            )
            return current_version

        fallback = f"{self.target}.0.0"
        logger.debug("No release for major %s; falling back to %s", self.target, fallback)
        return fallback


# ---------------------------------------------------------------------------
# Ecosystem packages
# ---------------------------------------------------------------------------


class EcosystemVersionResolver(_TargetedResolver):
    """Pick the best peer-compatible version for a non-framework package.

    Args:
        target: Target framework major, as an int or numeric string.
        core_package: Package whose peer constraint signals framework
            compatibility. Defaults to ``@angular/core``.
    """

    def __init__(
        self,
        target: Target,
        core_package: str = FRAMEWORK_CORE_PACKAGE,
    ) -> None:
        super().__init__(target)
        self.core_package = core_package

    def compatible_versions(
        self,
        metadata: PackageMetadata,
        include_prerelease: bool = False,
    ) -> List[str]:
        """Return versions usable with the target major, in registry order.

        A version qualifies when it declares no peer dependency on the core
        package, or declares one that the target major satisfies.
        Pre-releases are skipped unless *include_prerelease* is set.
        """
        compatible: List[str] = []

        for version, record in metadata.versions.items():
            if not include_prerelease and is_prerelease(version):
                continue

            constraint = record.peer_constraint(self.core_package)
            if constraint is None or satisfies_peer_dependency(
                self.target_major, constraint
            ):
                compatible.append(version)

        return compatible

    def resolve(self, metadata: PackageMetadata, current_version: str) -> str:
        """Choose the recommended version for *current_version*.

        1. Among compatible versions, return the highest one that does not
           order below the current version.
        2. Otherwise fall back to the ``latest`` dist tag (or the current
           version when there is none). A pre-release ``latest`` is
           replaced with the highest stable version when the current
           version is stable.
        3. Never return something below the current version.
        """
        current_is_prerelease = is_prerelease(current_version)

        compatible = self.compatible_versions(
            metadata, include_prerelease=current_is_prerelease
        )
        for version in sort_versions_descending(compatible):
            if compare_versions(version, current_version) >= 0:
                return version

        latest = metadata.latest or current_version

        if not current_is_prerelease and is_prerelease(latest):
            stable = [v for v in metadata.versions if not is_prerelease(v)]
            if stable:
                latest = sort_versions_descending(stable)[0]

        if compare_versions(latest, current_version) >= 0:
            logger.debug(
                "%s: no peer-compatible upgrade, using latest %s",
                metadata.name,
                latest,
            )
            return latest

        return current_version


def resolver_for(
    name: str,
    target: Target,
) -> Union[FrameworkVersionResolver, EcosystemVersionResolver]:
    """Return the resolution policy that applies to package *name*."""
    if is_framework_package(name):
        return FrameworkVersionResolver(target)
    return EcosystemVersionResolver(target)
