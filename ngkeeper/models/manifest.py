"""
``package.json`` handling for ngkeeper.

Manifests are kept as plain ``dict`` objects decoded with the standard
``json`` module so that every field (and its order) passes through the
analysis untouched. This module validates the shape the analyzer relies
on, merges the dependency groups and writes recommended versions back.
"""

from __future__ import annotations

import re
import json
from typing import Any, Dict, Mapping, Optional

from ngkeeper.constants import FRAMEWORK_CORE_PACKAGE
from ngkeeper.exceptions import ManifestError

#: Manifest keys holding ``name -> constraint`` maps, in merge order.
DEPENDENCY_GROUPS = ("dependencies", "devDependencies")

_MAJOR_IN_CONSTRAINT = re.compile(r"(\d+)\.")


def load_manifest(text: str, *, file_path: Optional[str] = None) -> Dict[str, Any]:
    """Decode and validate a manifest.

    Raises:
        ManifestError: Empty input, invalid JSON or an unusable document.
    """
    if not text.strip():
        raise ManifestError(
            "Manifest is empty. Please provide a package.json",
            file_path=file_path,
        )

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(
            f"Invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}",
            file_path=file_path,
        ) from exc

    return validate_manifest(data, file_path=file_path)


def validate_manifest(data: Any, *, file_path: Optional[str] = None) -> Dict[str, Any]:
    """Check that *data* looks like a ``package.json`` the analyzer can use.

    A manifest must be a JSON object with at least one of ``name``,
    ``dependencies`` or ``devDependencies``. Dependency groups, when
    present, must map package names to constraint strings.

    Returns:
        *data* itself, unchanged.
    """
    if not isinstance(data, dict):
        raise ManifestError(
            f"Manifest must be a JSON object, got {type(data).__name__}",
            file_path=file_path,
        )

    if not data.get("name") and all(data.get(g) is None for g in DEPENDENCY_GROUPS):
        raise ManifestError(
            "This does not look like a package.json "
            "(no name, dependencies or devDependencies)",
            file_path=file_path,
        )

    for group in DEPENDENCY_GROUPS:
        deps = data.get(group)
        if deps is None:
            continue
        if not isinstance(deps, dict):
            raise ManifestError(
                f"'{group}' must be an object",
                file_path=file_path,
                field=group,
            )
        for name, constraint in deps.items():
            if not isinstance(constraint, str):
                raise ManifestError(
                    f"Version of '{name}' in '{group}' must be a string",
                    file_path=file_path,
                    field=f"{group}.{name}",
                )

    return data


def merged_dependencies(manifest: Mapping[str, Any]) -> Dict[str, str]:
    """Merge ``dependencies`` and ``devDependencies``.

    Keys keep their first-seen position; a name declared in both groups
    takes its constraint from ``devDependencies``.
    """
    merged: Dict[str, str] = {}
    for group in DEPENDENCY_GROUPS:
        merged.update(manifest.get(group) or {})
    return merged


def rewrite_manifest(
    original: Mapping[str, Any],
    recommendations: Mapping[str, str],
) -> Dict[str, Any]:
    """Return a copy of *original* with recommended versions substituted.

    Every dependency found in *recommendations* is rewritten to
    ``^<version>`` in each group that declares it. Entries without a
    recommendation, other fields and all key orders are left as they were.
    """
    updated: Dict[str, Any] = dict(original)

    for group in DEPENDENCY_GROUPS:
        deps = original.get(group)
        if not deps:
            continue
        updated[group] = {
            name: (
                f"^{recommendations[name]}" if name in recommendations else constraint
            )
            for name, constraint in deps.items()
        }

    return updated


def detect_framework_major(manifest: Mapping[str, Any]) -> Optional[int]:
    """Return the framework major the manifest currently depends on.

    Reads the first ``<digits>.`` of the framework core constraint, so
    ``"^19.1.3"`` gives ``19``. Returns ``None`` when the core package is
    not declared or its constraint has no such number.
    """
    constraint = merged_dependencies(manifest).get(FRAMEWORK_CORE_PACKAGE)
    if not constraint:
        return None
    match = _MAJOR_IN_CONSTRAINT.search(constraint)
    return int(match.group(1)) if match else None
