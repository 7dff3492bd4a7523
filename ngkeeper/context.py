"""
Shared context object for ngkeeper CLI commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ngkeeper.config import NgKeeperConfig


class NgKeeperContext:
    """Per-invocation state shared between the CLI group and its commands.

    Attributes:
        config_path: Configuration file in use, if any.
        config: Loaded configuration (defaults when no file was found).
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "config", "verbose", "color")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.config: NgKeeperConfig = NgKeeperConfig()
        self.verbose: int = 0
        self.color: bool = True


#: Click decorator for injecting :class:`NgKeeperContext` into commands.
pass_context = click.make_pass_decorator(NgKeeperContext, ensure=True)
