"""Async subprocess helpers.

Every external command nvmsync runs goes through :func:`run_command`, which
captures output, enforces a timeout and never raises on a non-zero exit
code; callers decide what a failure means.
"""

from __future__ import annotations

import shlex
import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence

from nvmsync.utils.logger import get_logger
from nvmsync.exceptions import OperationTimeoutError

logger = get_logger("process")


@dataclass
class CommandResult:
    """Representation of a completed subprocess."""

    args: List[str]
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr joined, for marker matching and diagnostics."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def format_command(args: Sequence[str]) -> str:
    return shlex.join(list(args))


async def run_command(
    args: Sequence[str],
    *,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Run ``args`` and wait for it to exit.

    Args:
        args: Program and arguments; no shell is involved.
        timeout: Seconds to wait before killing the process.

    Returns:
        The captured :class:`CommandResult`.

    Raises:
        OSError: The program could not be started (e.g. not on ``PATH``).
        OperationTimeoutError: The process outlived ``timeout``.
    """
    argv = list(args)
    display = format_command(argv)
    logger.debug("Running: %s", display)

    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        proc.kill()
        await proc.wait()
        raise OperationTimeoutError(
            f"Command timed out after {timeout}s: {display}",
            operation=display,
            timeout=timeout,
        ) from exc

    result = CommandResult(
        args=argv,
        stdout=(stdout or b"").decode("utf-8", errors="replace"),
        stderr=(stderr or b"").decode("utf-8", errors="replace"),
        returncode=proc.returncode if proc.returncode is not None else -1,
    )
    logger.debug("Exit code %d: %s", result.returncode, display)
    return result
