"""Adapter around the external Node.js version manager (nvm / nvm-windows).

nvmsync never manages Node.js installations itself; it delegates to four
manager verbs:

- ``current``  → :meth:`VersionManager.report_version`
- ``use``      → :meth:`VersionManager.activate`
- ``install``  → :meth:`VersionManager.install`
- ``ls``/``list`` → :meth:`VersionManager.list_installed` (diagnostics only)

nvm reports a missing version on ``use`` only through free text (and
nvm-windows even exits ``0``). That phrasing is matched in exactly one
place, :func:`classify_activation`, which turns it into an
:class:`ActivationStatus`.
"""

from __future__ import annotations

import sys
from enum import Enum
from dataclasses import dataclass
from typing import List, Optional, Sequence

from nvmsync.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    NOT_INSTALLED_MARKERS,
    POSIX_MANAGER_COMMAND,
    WINDOWS_MANAGER_COMMAND,
)
from nvmsync.exceptions import (
    InstallFailedError,
    ManagerUnavailableError,
    SwitchFailedError,
)
from nvmsync.utils.logger import get_logger
from nvmsync.utils.process import CommandResult, format_command, run_command
from nvmsync.utils.version_utils import is_valid_version, normalize

logger = get_logger("manager")


def is_windows(platform: Optional[str] = None) -> bool:
    return (platform or sys.platform).startswith("win")


def default_manager_command(platform: Optional[str] = None) -> List[str]:
    """Return the command prefix that reaches nvm on ``platform``."""
    if is_windows(platform):
        return list(WINDOWS_MANAGER_COMMAND)
    return list(POSIX_MANAGER_COMMAND)


class ActivationStatus(Enum):
    ACTIVATED = "activated"
    NOT_INSTALLED = "not_installed"
    FAILED = "failed"


@dataclass
class ActivationResult:
    """Outcome of ``use <version>``."""

    version: str
    status: ActivationStatus
    output: str = ""

    @property
    def activated(self) -> bool:
        return self.status is ActivationStatus.ACTIVATED

    def raise_for_status(self) -> None:
        """Raise :class:`SwitchFailedError` unless activation succeeded."""
        if self.activated:
            return
        reason = (
            "is not installed"
            if self.status is ActivationStatus.NOT_INSTALLED
            else "could not be activated"
        )
        raise SwitchFailedError(
            f"Node.js {self.version} {reason}",
            command="use",
            version=self.version,
            output=self.output,
        )


def classify_activation(result: CommandResult) -> ActivationStatus:
    """Interpret the output of ``use``.

    This is the only place that depends on nvm's wording; update
    ``NOT_INSTALLED_MARKERS`` if a manager release rephrases it.
    """
    text = result.output.lower()
    if any(marker in text for marker in NOT_INSTALLED_MARKERS):
        return ActivationStatus.NOT_INSTALLED
    if not result.ok:
        return ActivationStatus.FAILED
    return ActivationStatus.ACTIVATED


def parse_current(output: str) -> Optional[str]:
    """Extract the active version from ``current`` output.

    Returns ``None`` when no managed version is active (``none``,
    ``system``, or nvm-windows' "No current version" message).
    """
    for token in output.split():
        candidate = normalize(token)
        if is_valid_version(candidate):
            return candidate
    return None


class VersionManager:
    """Runs version-manager verbs as subprocesses.

    Args:
        command: Command prefix reaching the manager; the verb and its
            arguments are appended. Defaults to the platform's nvm.
        timeout: Seconds allowed per command.
        platform: ``sys.platform``-style name; selects the default command
            and the listing verb.
    """

    def __init__(
        self,
        command: Optional[Sequence[str]] = None,
        *,
        timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT,
        platform: Optional[str] = None,
    ) -> None:
        self.command = list(command) if command else default_manager_command(platform)
        self.timeout = timeout
        self.list_args = ["list"] if is_windows(platform) else ["ls", "--no-colors"]

    async def _run(self, *args: str) -> CommandResult:
        argv = [*self.command, *args]
        try:
            return await run_command(argv, timeout=self.timeout)
        except OSError as exc:
            raise ManagerUnavailableError(
                f"Cannot launch version manager: {exc}",
                command=format_command(argv),
            ) from exc

    async def report_version(self) -> Optional[str]:
        """Return the active Node.js version, or ``None`` if there is none.

        Raises:
            ManagerUnavailableError: The manager is missing or broken.
            OperationTimeoutError: The command outlived the timeout.
        """
        result = await self._run("current")
        if not result.ok:
            raise ManagerUnavailableError(
                "Version manager did not report the current version",
                command="current",
                output=result.output,
            )
        current = parse_current(result.stdout)
        logger.debug("Manager reports current version: %s", current or "<none>")
        return current

    async def activate(self, version: str) -> ActivationResult:
        """Switch to ``version``.

        Raises:
            ManagerUnavailableError: The manager could not be launched.
            OperationTimeoutError: The command outlived the timeout.
        """
        result = await self._run("use", version)
        status = classify_activation(result)
        logger.info("use %s: %s", version, status.value)
        return ActivationResult(version=version, status=status, output=result.output)

    async def install(self, version: str) -> CommandResult:
        """Install ``version``.

        Raises:
            InstallFailedError: The manager reported a failure.
            ManagerUnavailableError: The manager could not be launched.
            OperationTimeoutError: The command outlived the timeout.
        """
        result = await self._run("install", version)
        if not result.ok:
            raise InstallFailedError(
                f"Installing Node.js {version} failed",
                command="install",
                version=version,
                output=result.output,
            )
        logger.info("Installed Node.js %s", version)
        return result

    async def list_installed(self) -> str:
        """Return the manager's installed-versions listing, unparsed."""
        result = await self._run(*self.list_args)
        if not result.ok:
            logger.warning("Listing installed versions failed (exit %d)", result.returncode)
        return result.output
