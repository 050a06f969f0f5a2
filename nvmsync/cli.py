"""
Command-line interface for nvmsync.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from nvmsync.config import load_config
from nvmsync.__version__ import __version__
from nvmsync.context import NvmSyncContext
from nvmsync.exceptions import ConfigError, NvmSyncError
from nvmsync.utils.logger import get_logger, level_for_verbosity, setup_logging
from nvmsync.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="NVMSYNC_CONFIG",
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
    envvar="NVMSYNC_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="nvmsync",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """nvmsync: keep the active Node.js version in line with .nvmrc.

    \b
    Available commands:
      nvmsync check                Switch to (or install) the declared version
      nvmsync suggest [VERSION]    Show released versions nearest to VERSION

    \b
    Examples:
      nvmsync check
      nvmsync check --yes
      nvmsync suggest 19.3.0

    Use ``nvmsync COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for downstream libraries
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

    nvmsync_ctx = NvmSyncContext()
    nvmsync_ctx.config_path = config or loaded_config.source_path
    nvmsync_ctx.color = color
    nvmsync_ctx.verbose = verbose
    nvmsync_ctx.config = loaded_config
    ctx.obj = nvmsync_ctx

    logger.debug("nvmsync v%s", __version__)
    logger.debug("Config path: %s", nvmsync_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


# Register CLI subcommands
try:
    from nvmsync.commands.check import check
    from nvmsync.commands.suggest import suggest

    cli.add_command(check)
    cli.add_command(suggest)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the nvmsync CLI.

    Returns:
        Exit code:
            0   Declared version active / command succeeded
            1   Aborted, failed, or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except NvmSyncError as exc:
        print_error(str(exc))
        logger.debug(
            "NvmSyncError details: %s",
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
