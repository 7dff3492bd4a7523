"""
Command-line interface for ngkeeper.

Defines the ``ngkeeper`` command group, its global options (configuration,
verbosity, color) and registers the subcommands.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from ngkeeper.config import load_config
from ngkeeper.__version__ import __version__
from ngkeeper.context import NgKeeperContext
from ngkeeper.exceptions import ConfigError, NgKeeperError
from ngkeeper.utils.logger import get_logger, level_for_verbosity, setup_logging
from ngkeeper.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="NGKEEPER_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="NGKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="ngkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """ngkeeper -- safe dependency upgrades for Angular projects.

    \b
    Available commands:
      ngkeeper analyze             Recommend upgrades for a package.json

    \b
    Examples:
      ngkeeper analyze --target 17
      ngkeeper analyze frontend/package.json -t 18 -o package-updated.json
      ngkeeper -v analyze --format json

    Use ``ngkeeper COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR before any handler or console is created
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    ngkeeper_ctx = NgKeeperContext()
    ngkeeper_ctx.config_path = config or loaded_config.source_path
    ngkeeper_ctx.config = loaded_config
    ngkeeper_ctx.color = color
    ngkeeper_ctx.verbose = verbose
    ctx.obj = ngkeeper_ctx

    logger.debug("ngkeeper v%s", __version__)
    logger.debug("Config path: %s", ngkeeper_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())


# Register CLI subcommands
from ngkeeper.commands.analyze import analyze  # noqa: E402

cli.add_command(analyze)


def main() -> int:
    """Main entry point for the ngkeeper CLI.

    Returns:
        Exit code:
            0   Success, nothing to update
            1   Updates available, or an application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1

    except NgKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "NgKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
