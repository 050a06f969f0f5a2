"""Suggest command implementation for nvmsync.

Shows the releases nearest to a Node.js version without touching the
version manager: the latest and latest LTS releases plus the closest LTS
and current releases on either side of the target.

Typical usage::

    # Alternatives to the version declared in ./.nvmrc
    $ nvmsync suggest

    # Alternatives to an explicit version, as JSON
    $ nvmsync suggest 19.3.0 --format json
"""

from __future__ import annotations

import sys
import json
import asyncio
from pathlib import Path
from typing import List, Optional

import click

from nvmsync.config import NvmSyncConfig
from nvmsync.context import pass_context, NvmSyncContext
from nvmsync.core import Declaration, fetch_catalog, suggest as compute_suggestions
from nvmsync.core.report import display_suggestions
from nvmsync.exceptions import InvalidVersionError, NvmSyncError
from nvmsync.models import ReleaseRecord
from nvmsync.utils import HTTPClient, get_logger, is_valid_version, normalize, print_error

logger = get_logger("commands.suggest")


@click.command()
@click.argument("version", required=False)
@click.option(
    "--file",
    "-f",
    "declaration_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Version declaration file used when VERSION is omitted.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def suggest(
    ctx: NvmSyncContext,
    version: Optional[str],
    declaration_file: Optional[Path],
    output_format: str,
) -> None:
    """Show released Node.js versions nearest to VERSION.

    VERSION defaults to the version declared in the project's declaration
    file.

    Exits:
        0 if suggestions were shown, 1 on any error.
    """
    config = ctx.get_config()

    try:
        if version is None:
            path = declaration_file or Path(config.declaration_file)
            version = Declaration(path).read()

        target = normalize(version)
        if not is_valid_version(target):
            raise InvalidVersionError(version)

        records = asyncio.run(_fetch(config))
        suggestions = compute_suggestions(
            records, target, minimum=config.minimum_version
        )

    except NvmSyncError as e:
        print_error(f"{e}")
        sys.exit(1)

    if output_format.lower() == "json":
        print(json.dumps({"target": target, **suggestions.to_json()}, indent=2))
    else:
        display_suggestions(suggestions, target)


async def _fetch(config: NvmSyncConfig) -> List[ReleaseRecord]:
    async with HTTPClient(
        timeout=config.http_timeout,
        max_retries=config.max_retries,
    ) as http:
        return await fetch_catalog(http, config.catalog_url)
