"""Manifest-wide upgrade analysis for ngkeeper.

:class:`DependencyAnalyzer` turns a ``package.json`` and a target framework
major into an :class:`~ngkeeper.models.AnalysisResult`:

1. ``dependencies`` and ``devDependencies`` are merged (a name declared in
   both uses the ``devDependencies`` constraint).
2. One registry lookup per dependency is started concurrently and all of
   them are awaited before anything is aggregated.
3. Each dependency is routed to the framework or ecosystem resolver, then
   classified (``needs_update``, risk, notes).
4. Entries are assembled in manifest order, summarised, and the manifest
   is rewritten with ``^<recommended>`` versions.

Lookups are independent and side-effect free; a failure degrades only the
affected dependency, which then keeps its current version.

Typical usage::

    async with HTTPClient() as http:
        analyzer = DependencyAnalyzer(NpmRegistry(http))
        result = await analyzer.analyze(manifest, target=17)

    for entry in result.analysis:
        print(entry.name, entry.current_version, "->", entry.recommended_version)
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Union

from ngkeeper.constants import (
    ECOSYSTEM_MARKERS,
    ECOSYSTEM_PREFIXES,
    FRAMEWORK_NAME,
)
from ngkeeper.core.registry import RegistryLookup
from ngkeeper.core.resolver import is_framework_package, resolver_for
from ngkeeper.models.analysis import (
    AnalysisEntry,
    AnalysisResult,
    AnalysisSummary,
    RiskLevel,
)
from ngkeeper.models.manifest import merged_dependencies, rewrite_manifest
from ngkeeper.models.metadata import PackageMetadata
from ngkeeper.utils.logger import get_logger
from ngkeeper.utils.version_utils import clean_version, compare_versions

logger = get_logger("dependency_analyzer")

Target = Union[int, str]


# ---------------------------------------------------------------------------
# Classification helpers
# ---------------------------------------------------------------------------


def is_ecosystem_package(name: str) -> bool:
    """Return True for packages built around the framework.

    Covers community prefixes (``ng-``, ``ngx-``, ``@ng-``) and the
    first-party toolkits (Material, CDK, NgRx).
    """
    return name.startswith(tuple(ECOSYSTEM_PREFIXES)) or any(
        marker in name for marker in ECOSYSTEM_MARKERS
    )


def assess_risk(name: str) -> RiskLevel:
    """Return the upgrade risk for *name*.

    Ecosystem packages track framework internals and need verification,
    so they are ``MEDIUM``. Nothing is classified ``HIGH`` yet.
    """
    return RiskLevel.MEDIUM if is_ecosystem_package(name) else RiskLevel.LOW


def build_notes(name: str, comparison: int, target: str) -> str:
    """Describe the recommendation for *name*.

    Args:
        name: Package name.
        comparison: ``compare_versions(current, recommended)``.
        target: Target framework major as given by the caller.
    """
    framework = is_framework_package(name)

    if comparison < 0:
        if framework:
            return f"Upgrade to match {FRAMEWORK_NAME} {target}"
        if is_ecosystem_package(name):
            return (
                f"Update available - verify compatibility with "
                f"{FRAMEWORK_NAME} {target}"
            )
        return "Update available"

    if comparison == 0:
        return f"Aligned with {FRAMEWORK_NAME} {target}" if framework else "Up to date"

    return "Current version is newer"


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------


class DependencyAnalyzer:
    """Compute upgrade recommendations for every dependency of a manifest.

    Args:
        registry: Metadata source implementing
            :class:`~ngkeeper.core.registry.RegistryLookup`. Injected so
            tests can use canned metadata.

    Raises:
        TypeError: If *registry* is ``None``.
    """

    def __init__(self, registry: RegistryLookup) -> None:
        if registry is None:
            raise TypeError("registry must not be None; pass a RegistryLookup")
        self.registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def analyze(
        self,
        manifest: Mapping[str, Any],
        target: Target,
    ) -> AnalysisResult:
        """Analyse every dependency of *manifest* against *target*.

        *manifest* is expected to have been validated already (see
        :func:`~ngkeeper.models.validate_manifest`). Never raises for
        registry problems.
        """
        dependencies = merged_dependencies(manifest)

        if not dependencies:
            logger.info("Manifest declares no dependencies")
            return AnalysisResult(
                original=dict(manifest),
                updated=dict(manifest),
                analysis=[],
                summary=AnalysisSummary(),
            )

        logger.info(
            "Analysing %d dependencies against %s %s",
            len(dependencies),
            FRAMEWORK_NAME,
            target,
        )

        names = list(dependencies)
        results = await asyncio.gather(
            *(self.analyze_dependency(n, dependencies[n], target) for n in names),
            return_exceptions=True,
        )

        entries: List[AnalysisEntry] = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error("Failed to analyse %s: %s", name, result)
                result = self.build_entry(name, dependencies[name], None, target)
            entries.append(result)

        return self._build_result(manifest, entries)

    async def analyze_dependency(
        self,
        name: str,
        constraint: str,
        target: Target,
    ) -> AnalysisEntry:
        """Look up one dependency and build its :class:`AnalysisEntry`."""
        metadata = await self.registry.fetch_package_metadata(name)
        return self.build_entry(name, constraint, metadata, target)

    def build_entry(
        self,
        name: str,
        constraint: str,
        metadata: Optional[PackageMetadata],
        target: Target,
    ) -> AnalysisEntry:
        """Resolve and classify one dependency from already-fetched metadata.

        With ``metadata=None`` the current version is echoed back and no
        update is flagged.
        """
        current = clean_version(constraint)

        recommended: Optional[str] = None
        if metadata is not None:
            recommended = resolver_for(name, target).resolve(metadata, current)
        recommended = recommended or current

        comparison = compare_versions(current, recommended)
        if comparison > 0:
            logger.warning(
                "%s: recommended %s is below current %s",
                name,
                recommended,
                current,
            )

        return AnalysisEntry(
            name=name,
            current_version=current,
            recommended_version=recommended,
            latest_version=recommended,
            is_framework_package=is_framework_package(name),
            needs_update=comparison < 0,
            risk=assess_risk(name),
            notes=build_notes(name, comparison, str(target)),
        )

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    @staticmethod
    def _build_result(
        manifest: Mapping[str, Any],
        entries: List[AnalysisEntry],
    ) -> AnalysisResult:
        recommendations: Dict[str, str] = {
            e.name: e.recommended_version for e in entries
        }
        summary = AnalysisSummary.from_entries(entries)

        logger.info(
            "%d of %d dependencies can be updated",
            summary.needs_update,
            summary.total,
        )

        return AnalysisResult(
            original=dict(manifest),
            updated=rewrite_manifest(manifest, recommendations),
            analysis=entries,
            summary=summary,
        )
