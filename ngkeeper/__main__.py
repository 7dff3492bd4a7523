"""
Executable module for ngkeeper.

Running:
    python -m ngkeeper

is equivalent to:
    ngkeeper
"""

from __future__ import annotations

import sys


def main() -> int:
    """Entry point for ``python -m ngkeeper``; returns the CLI exit code."""
    # Imported lazily so that click/rich/httpx load only for CLI use
    from ngkeeper.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
