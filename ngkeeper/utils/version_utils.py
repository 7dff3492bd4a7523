"""
Version helpers for ngkeeper.

npm version strings are handled with a deliberately simple model rather
than a full semantic-version parser:

- ordering looks only at the leading digits of each dot-separated
  component, so ``"18.0.0-next.0"`` orders like ``18.0.0.0``;
- pre-release detection is a keyword search anywhere in the string;
- declared constraints are "cleaned" by deleting range operator
  characters, so ``"^17.0.2"`` becomes ``"17.0.2"``.

Nothing here raises on malformed input; unparsable components count as 0.
"""

from __future__ import annotations

import re
import math
from functools import cmp_to_key
from typing import Iterable, List, Union

from ngkeeper.constants import PRERELEASE_KEYWORDS, RANGE_OPERATOR_CHARS

#: A major version number, or ``NaN`` when it could not be read.
Major = Union[int, float]

_LEADING_DIGITS = re.compile(r"\s*(\d+)")
_RANGE_OPERATORS = re.compile(f"[{re.escape(RANGE_OPERATOR_CHARS)}]")


def _leading_int(text: str) -> Union[int, None]:
    """Return the integer formed by the leading digits of *text*, if any."""
    match = _LEADING_DIGITS.match(text)
    return int(match.group(1)) if match else None


def _components(version: str) -> List[int]:
    return [_leading_int(part) or 0 for part in version.split(".")]


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings component by component.

    Missing or non-numeric components are treated as ``0``.

    Returns:
        ``-1`` if *a* < *b*, ``0`` if equal, ``1`` if *a* > *b*.

    Examples:
        >>> compare_versions("17.0.0", "9.0.0")
        1
        >>> compare_versions("1.2", "1.2.0")
        0
    """
    parts_a = _components(a)
    parts_b = _components(b)

    for index in range(max(len(parts_a), len(parts_b))):
        left = parts_a[index] if index < len(parts_a) else 0
        right = parts_b[index] if index < len(parts_b) else 0
        if left < right:
            return -1
        if left > right:
            return 1

    return 0


def sort_versions_descending(versions: Iterable[str]) -> List[str]:
    """Return a new list of *versions*, highest first."""
    return sorted(versions, key=cmp_to_key(compare_versions), reverse=True)


def is_prerelease(version: str) -> bool:
    """Return True if *version* contains any pre-release keyword.

    >>> is_prerelease("19.0.0-next.3")
    True
    >>> is_prerelease("19.0.0")
    False
    """
    lowered = version.lower()
    return any(keyword in lowered for keyword in PRERELEASE_KEYWORDS)


def clean_version(constraint: str) -> str:
    """Strip range operators (``^ ~ > = <``) from a declared constraint."""
    return _RANGE_OPERATORS.sub("", constraint)


def parse_major(value: Union[int, str]) -> Major:
    """Read a major version from an int or the leading digits of a string.

    Returns ``NaN`` when *value* has no leading digits. ``NaN`` compares
    unequal and unordered to every integer, which disables any major
    matching that depends on it.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, int):
        return value
    parsed = _leading_int(str(value))
    return math.nan if parsed is None else parsed


def version_major(version: str) -> Major:
    """Return the major component of a version string (``NaN`` if unreadable)."""
    return parse_major(version.split(".")[0])


def get_update_type(current_version: str, target_version: str) -> str:
    """Classify the change between two versions for display.

    Returns one of ``"same"``, ``"downgrade"``, ``"major"``, ``"minor"``,
    ``"patch"`` or ``"update"`` (only non-numeric or trailing components
    differ).

    >>> get_update_type("16.2.0", "17.1.0")
    'major'
    """
    order = compare_versions(current_version, target_version)
    if order == 0:
        return "same"
    if order > 0:
        return "downgrade"

    current = (_components(current_version) + [0, 0, 0])[:3]
    target = (_components(target_version) + [0, 0, 0])[:3]
    for label, old, new in zip(("major", "minor", "patch"), current, target):
        if old != new:
            return label
    return "update"
