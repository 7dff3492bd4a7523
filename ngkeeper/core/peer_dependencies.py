"""Peer dependency compatibility for ngkeeper.

Ecosystem packages declare which framework majors they support through a
peer dependency on the framework core package, e.g.
``"@angular/core": "^16.0.0 || ^17.0.0"``. This module answers a single
question: does a target major satisfy such a constraint?

The reader is intentionally narrow and only looks at majors:

- alternatives are split on ``||`` and trimmed;
- the first run of digits in an alternative is its major;
- ``>=N`` accepts any target ``>= N``;
- ``^N`` and ``~N`` accept exactly ``N`` (no minor/patch distinction);
- any other alternative (bare versions, ``<``, ``*``, ``x`` ranges) is
  ignored.

This over-admits for open ``>=`` ranges that span majors the package was
never tested against. Swapping in a full semver range library would change
which versions are recommended, so the behaviour is kept as is.
"""

from __future__ import annotations

import re
from typing import Iterator, Optional, Tuple

from ngkeeper.utils.version_utils import Major

__all__ = ["satisfies_peer_dependency", "parse_alternatives"]

_FIRST_NUMBER = re.compile(r"(\d+)")


def parse_alternatives(constraint: str) -> Iterator[Tuple[str, Optional[int]]]:
    """Yield ``(alternative, major)`` for each ``||``-separated alternative.

    ``major`` is ``None`` when the alternative contains no digits.

    >>> list(parse_alternatives("^16.0.0 || >=17"))
    [('^16.0.0', 16), ('>=17', 17)]
    """
    for alternative in constraint.split("||"):
        alternative = alternative.strip()
        match = _FIRST_NUMBER.search(alternative)
        yield alternative, int(match.group(1)) if match else None


def satisfies_peer_dependency(target_major: Major, constraint: str) -> bool:
    """Return True if *target_major* satisfies any alternative of *constraint*.

    >>> satisfies_peer_dependency(18, "^17.0.0 || ^18.0.0")
    True
    >>> satisfies_peer_dependency(16, "^17.0.0 || ^18.0.0")
    False
    >>> satisfies_peer_dependency(19, ">=15.0.0")
    True
    """
    for alternative, major in parse_alternatives(constraint):
        if major is None:
            continue

        if ">=" in alternative:
            if target_major >= major:
                return True
        elif "^" in alternative or "~" in alternative:
            if target_major == major:
                return True

    return False
