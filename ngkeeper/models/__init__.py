"""
Unified data model exports for ngkeeper.

Example:
    >>> from ngkeeper.models import AnalysisEntry, PackageMetadata, RiskLevel
"""

from __future__ import annotations

from ngkeeper.models.metadata import PackageMetadata, VersionRecord
from ngkeeper.models.analysis import (
    AnalysisEntry,
    AnalysisResult,
    AnalysisSummary,
    RiskLevel,
)
from ngkeeper.models.manifest import (
    DEPENDENCY_GROUPS,
    detect_framework_major,
    load_manifest,
    merged_dependencies,
    rewrite_manifest,
    validate_manifest,
)

__all__ = [
    "PackageMetadata",
    "VersionRecord",
    "AnalysisEntry",
    "AnalysisResult",
    "AnalysisSummary",
    "RiskLevel",
    "DEPENDENCY_GROUPS",
    "detect_framework_major",
    "load_manifest",
    "merged_dependencies",
    "rewrite_manifest",
    "validate_manifest",
]
