"""
ngkeeper -- safe dependency upgrades for Angular projects.

ngkeeper reads a ``package.json``, looks every dependency up on the npm
registry and recommends the newest version that is compatible with a
chosen Angular major without ever downgrading what is already declared.

Features include:
    • Framework-aware resolution for ``@angular/*`` packages
    • Peer-dependency based compatibility for the wider ecosystem
    • Stable-first recommendations that respect existing pre-releases
    • Risk levels and notes for every dependency
    • Rewritten (and annotated) manifests ready to review or save
"""

from __future__ import annotations

from ngkeeper.__version__ import __version__

__author__ = "ngkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Safe dependency upgrades for Angular package.json files."

__all__ = [
    "__version__",
]
