"""
ngkeeper version information.

Single source of truth for the package version, read by ``pyproject.toml``
consumers, the ``--version`` option and the HTTP User-Agent.
"""

from __future__ import annotations

__version__ = "0.2.0"
