"""
Core functionality exports for ngkeeper.

Importing from here keeps user-facing imports short and stable:

    from ngkeeper.core import DependencyAnalyzer, NpmRegistry
"""

from __future__ import annotations

from ngkeeper.core.registry import NpmRegistry, RegistryLookup, package_url
from ngkeeper.core.peer_dependencies import satisfies_peer_dependency
from ngkeeper.core.resolver import (
    EcosystemVersionResolver,
    FrameworkVersionResolver,
    is_framework_package,
    resolver_for,
)
from ngkeeper.core.dependency_analyzer import (
    DependencyAnalyzer,
    assess_risk,
    build_notes,
    is_ecosystem_package,
)
from ngkeeper.core.manifest_renderer import (
    render_annotated_manifest,
    render_manifest,
)

__all__ = [
    "NpmRegistry",
    "RegistryLookup",
    "package_url",
    "satisfies_peer_dependency",
    "FrameworkVersionResolver",
    "EcosystemVersionResolver",
    "is_framework_package",
    "resolver_for",
    "DependencyAnalyzer",
    "assess_risk",
    "build_notes",
    "is_ecosystem_package",
    "render_manifest",
    "render_annotated_manifest",
]
