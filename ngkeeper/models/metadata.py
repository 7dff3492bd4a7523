"""
Registry metadata model for ngkeeper.

A :class:`PackageMetadata` is the slice of an npm packument the resolvers
need: every published version with its peer dependencies, the dist tags
and the publish-time map. Instances are built once per lookup and are not
mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class VersionRecord:
    """One published version of a package.

    Attributes:
        version: Version string as published.
        peer_dependencies: Peer dependency name to constraint string.
    """

    version: str
    peer_dependencies: Dict[str, str] = field(default_factory=dict)

    def peer_constraint(self, package_name: str) -> Optional[str]:
        """Return the declared peer constraint on *package_name*.

        Empty constraints count as "not declared".
        """
        return self.peer_dependencies.get(package_name) or None


@dataclass(frozen=True)
class PackageMetadata:
    """Registry metadata for a single package.

    Attributes:
        name: Package name.
        versions: Version string to :class:`VersionRecord`, in the order
            the registry listed them.
        dist_tags: Distribution tags such as ``latest`` and ``next``.
        time: Version (and ``created``/``modified``) to ISO timestamp.
    """

    name: str
    versions: Dict[str, VersionRecord] = field(default_factory=dict)
    dist_tags: Dict[str, str] = field(default_factory=dict)
    time: Dict[str, str] = field(default_factory=dict)

    @property
    def latest(self) -> Optional[str]:
        """The ``latest`` dist tag, if the registry reported one."""
        return self.dist_tags.get("latest") or None

    @property
    def version_list(self) -> List[str]:
        return list(self.versions)

    @classmethod
    def from_registry_json(
        cls,
        data: Mapping[str, Any],
        *,
        name: Optional[str] = None,
    ) -> "PackageMetadata":
        """Build metadata from a raw npm packument.

        Unknown fields are ignored and malformed sections are treated as
        empty, so a partial document still yields usable metadata.

        Args:
            data: Decoded JSON body of ``GET /{package}``.
            name: Fallback name when the document has none.
        """
        raw_versions = data.get("versions")
        versions: Dict[str, VersionRecord] = {}
        if isinstance(raw_versions, Mapping):
            for version, record in raw_versions.items():
                peers = record.get("peerDependencies") if isinstance(record, Mapping) else None
                versions[str(version)] = VersionRecord(
                    version=str(version),
                    peer_dependencies=_string_map(peers),
                )

        return cls(
            name=str(data.get("name") or name or ""),
            versions=versions,
            dist_tags=_string_map(data.get("dist-tags")),
            time=_string_map(data.get("time")),
        )


def _string_map(value: Any) -> Dict[str, str]:
    """Keep only the string-valued entries of a JSON object."""
    if not isinstance(value, Mapping):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str)}
