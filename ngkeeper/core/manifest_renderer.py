"""Render rewritten manifests for output.

:func:`render_manifest` produces the plain ``package.json`` text that is
written to disk. :func:`render_annotated_manifest` produces a review
copy in which every upgraded dependency carries a trailing comment::

    "@angular/core": "^17.1.0", // ⬆️ 16.2.0 → 17.1.0

The annotated form is JSON-with-comments and is meant for display only.
"""

from __future__ import annotations

import json
from typing import Any, List, Tuple

from ngkeeper.models.analysis import AnalysisResult
from ngkeeper.models.manifest import DEPENDENCY_GROUPS

_INDENT = "  "


def render_manifest(result: AnalysisResult) -> str:
    """Return the updated manifest as two-space indented JSON."""
    return json.dumps(result.updated, indent=2, ensure_ascii=False) + "\n"


def render_annotated_manifest(result: AnalysisResult) -> str:
    """Return the updated manifest with upgrade comments on changed lines.

    Empty dependency groups are left out.
    """
    fields: List[Tuple[str, Any]] = [
        (key, value)
        for key, value in result.updated.items()
        if not (key in DEPENDENCY_GROUPS and not value)
    ]

    lines = ["{"]
    for index, (key, value) in enumerate(fields):
        comma = "," if index < len(fields) - 1 else ""
        if key in DEPENDENCY_GROUPS and isinstance(value, dict):
            lines.extend(_render_group(result, key, value, comma))
        else:
            lines.append(f"{_INDENT}{_dumps(key)}: {_indent_value(value)}{comma}")
    lines.append("}")

    return "\n".join(lines) + "\n"


def _render_group(
    result: AnalysisResult,
    key: str,
    deps: dict,
    trailing_comma: str,
) -> List[str]:
    lines = [f"{_INDENT}{_dumps(key)}: {{"]
    items = list(deps.items())

    for index, (name, version) in enumerate(items):
        comma = "," if index < len(items) - 1 else ""
        line = f"{_INDENT * 2}{_dumps(name)}: {_dumps(version)}{comma}"

        entry = result.get_entry(name)
        if entry is not None and entry.needs_update:
            line += f" // ⬆️ {entry.current_version} → {entry.recommended_version}"
        lines.append(line)

    lines.append(f"{_INDENT}}}{trailing_comma}")
    return lines


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _indent_value(value: Any) -> str:
    """Dump *value* and shift continuation lines one level to the right."""
    text = json.dumps(value, indent=2, ensure_ascii=False)
    return text.replace("\n", "\n" + _INDENT)
