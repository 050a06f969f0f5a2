"""Check command implementation for nvmsync.

Makes the active Node.js version match the project's declaration, driving
:class:`~nvmsync.core.orchestrator.Orchestrator` through declaration lookup,
version comparison, ``nvm use`` / ``nvm install`` and, when installing
fails, nearest-version suggestions.

Typical usage::

    # Reconcile against ./.nvmrc
    $ nvmsync check

    # Use another declaration file and accept every confirmation
    $ nvmsync check --file frontend/.nvmrc --yes
"""

from __future__ import annotations

import sys
import asyncio
import dataclasses
from pathlib import Path
from typing import Optional

import click

from nvmsync.config import NvmSyncConfig
from nvmsync.core import ConsolePrompter, Orchestrator, Outcome
from nvmsync.context import pass_context, NvmSyncContext
from nvmsync.exceptions import NvmSyncError
from nvmsync.utils import get_logger, print_error

logger = get_logger("commands.check")


@click.command()
@click.option(
    "--file",
    "-f",
    "declaration_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Version declaration file (default: .nvmrc).",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Answer yes to every confirmation prompt.",
)
@pass_context
def check(
    ctx: NvmSyncContext,
    declaration_file: Optional[Path],
    yes: bool,
) -> None:
    """Switch to the Node.js version declared for this project.

    Reads the declaration, asks nvm for the active version and, when they
    differ, switches or installs. If installation fails, nearby releases
    from the official catalog are offered as alternatives.

    Exits:
        0 if the declared version is active, 1 otherwise.
    """
    config = ctx.get_config()
    if declaration_file is not None:
        config = dataclasses.replace(config, declaration_file=str(declaration_file))

    try:
        outcome = asyncio.run(_check_async(config, assume_yes=yes))
        logger.debug("State history: %s", " -> ".join(s.name for s in outcome.history))
        sys.exit(outcome.exit_code)

    except NvmSyncError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in check command")
        sys.exit(1)


async def _check_async(config: NvmSyncConfig, *, assume_yes: bool) -> Outcome:
    """Run one reconciliation with console prompts."""
    orchestrator = Orchestrator(config, prompter=ConsolePrompter(assume_yes=assume_yes))
    return await orchestrator.run()
