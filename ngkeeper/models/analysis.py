"""
Analysis result models for ngkeeper.

One :class:`AnalysisEntry` is produced per dependency and never changed
afterwards. :class:`AnalysisSummary` is a pure fold over the entries and
:class:`AnalysisResult` bundles both with the original and rewritten
manifests.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


class RiskLevel(str, Enum):
    """How much verification an upgrade needs."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class AnalysisEntry:
    """Upgrade recommendation for a single dependency.

    Attributes:
        name: Package name as declared in the manifest.
        current_version: Declared constraint with range operators removed.
        recommended_version: Best version found by the resolvers.
        latest_version: Same as ``recommended_version``; there is no
            separate "true latest" in this model.
        is_framework_package: Resolved by the framework-core policy.
        needs_update: ``recommended_version`` orders above ``current_version``.
        risk: Verification effort expected for the upgrade.
        notes: Human-readable explanation.
    """

    name: str
    current_version: str
    recommended_version: str
    latest_version: str
    is_framework_package: bool
    needs_update: bool
    risk: RiskLevel
    notes: str

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "current_version": self.current_version,
            "recommended_version": self.recommended_version,
            "latest_version": self.latest_version,
            "is_framework_package": self.is_framework_package,
            "needs_update": self.needs_update,
            "risk": self.risk.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class AnalysisSummary:
    """Counts over a list of :class:`AnalysisEntry`."""

    total: int = 0
    needs_update: int = 0
    low_risk: int = 0
    medium_risk: int = 0
    high_risk: int = 0

    @classmethod
    def from_entries(cls, entries: Iterable[AnalysisEntry]) -> "AnalysisSummary":
        items = list(entries)
        return cls(
            total=len(items),
            needs_update=sum(1 for e in items if e.needs_update),
            low_risk=sum(1 for e in items if e.risk is RiskLevel.LOW),
            medium_risk=sum(1 for e in items if e.risk is RiskLevel.MEDIUM),
            high_risk=sum(1 for e in items if e.risk is RiskLevel.HIGH),
        )

    def to_json(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "needs_update": self.needs_update,
            "low_risk": self.low_risk,
            "medium_risk": self.medium_risk,
            "high_risk": self.high_risk,
        }


@dataclass
class AnalysisResult:
    """Outcome of analysing one manifest against one target major.

    Attributes:
        original: The manifest as given.
        updated: Copy of the manifest with every analysed dependency
            rewritten to ``^<recommended_version>``; other fields and key
            order unchanged.
        analysis: One entry per dependency, in manifest order.
        summary: Counts over ``analysis``.
    """

    original: Dict[str, Any]
    updated: Dict[str, Any]
    analysis: List[AnalysisEntry] = field(default_factory=list)
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)

    def entries_by_risk(self, risk: RiskLevel) -> List[AnalysisEntry]:
        """Return entries with the given risk level, in manifest order."""
        return [e for e in self.analysis if e.risk is RiskLevel(risk)]

    def entries_by_update_status(self, needs_update: bool) -> List[AnalysisEntry]:
        """Return entries that do (or do not) need an update."""
        return [e for e in self.analysis if e.needs_update is needs_update]

    def get_entry(self, name: str) -> Optional[AnalysisEntry]:
        for entry in self.analysis:
            if entry.name == name:
                return entry
        return None

    def to_json(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "updated": self.updated,
            "analysis": [e.to_json() for e in self.analysis],
            "summary": self.summary.to_json(),
        }
