"""Reconciliation state machine for nvmsync.

One run drives the project from "some Node.js is active" to "the declared
Node.js is active", or stops with a diagnostic:

1. **Declaration**: read ``.nvmrc``; if it is missing or empty, ask the
   operator for a version and record it.
2. **Manager**: ask nvm for the active version; if nvm is unavailable,
   print install guidance and optionally install it.
3. **Compare / switch**: nothing to do when versions match, otherwise
   ``nvm use`` the declared version.
4. **Install**: when the version is missing (or switching failed and the
   operator agrees), ``nvm install`` then ``nvm use`` it.
5. **Suggest**: when installing fails, fetch the release catalog, show the
   nearest alternatives and let the operator pick one to install instead.

Each step is a :class:`State`; its handler returns the next state. The run
ends in ``RESOLVED`` (exit ``0``), ``ABORTED`` (operator declined) or
``FAILED`` (unrecoverable error), both exiting ``1``.

Typical usage::

    orchestrator = Orchestrator(config, prompter=ConsolePrompter())
    outcome = asyncio.run(orchestrator.run())
    sys.exit(outcome.exit_code)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Set,
)

from nvmsync.exceptions import (
    CatalogParseError,
    DeclarationError,
    EmptyCatalogError,
    InstallFailedError,
    InvalidVersionError,
    ManagerUnavailableError,
    NetworkError,
    NvmSyncError,
    OperationTimeoutError,
    SwitchFailedError,
    UserAbortedError,
)
from nvmsync.models.release import ReleaseRecord
from nvmsync.core.bootstrap import install_command, install_guidance
from nvmsync.core.catalog import fetch_catalog, suggest
from nvmsync.core.declaration import Declaration
from nvmsync.core.manager import ActivationStatus, VersionManager
from nvmsync.core.report import display_suggestions
from nvmsync.utils import console
from nvmsync.utils.http import HTTPClient
from nvmsync.utils.logger import get_logger
from nvmsync.utils.process import run_command
from nvmsync.utils.version_utils import (
    Ordering,
    compare,
    is_valid_version,
    normalize,
)

if TYPE_CHECKING:
    from nvmsync.config import NvmSyncConfig

logger = get_logger("orchestrator")

CatalogLoader = Callable[[], Awaitable[List[ReleaseRecord]]]


class State(Enum):
    DECLARATION_MISSING = "declaration_missing"
    DECLARATION_EMPTY = "declaration_empty"
    DECLARATION_READY = "declaration_ready"
    MANAGER_UNAVAILABLE = "manager_unavailable"
    COMPARING = "comparing"
    SWITCHING = "switching"
    PROMPT_INSTALL = "prompt_install"
    INSTALLING = "installing"
    SUGGESTING = "suggesting"
    RESOLVED = "resolved"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (State.RESOLVED, State.ABORTED, State.FAILED)


@dataclass
class RunContext:
    """Data carried between states during one run."""

    target: Optional[str] = None
    current: Optional[str] = None
    failed_installs: Set[str] = field(default_factory=set)
    history: List[State] = field(default_factory=list)


@dataclass
class Outcome:
    """Final result of :meth:`Orchestrator.run`."""

    state: State
    target: Optional[str]
    current: Optional[str]
    history: List[State]

    @property
    def exit_code(self) -> int:
        return 0 if self.state is State.RESOLVED else 1


class ConsolePrompter:
    """Line prompts on the terminal.

    Args:
        assume_yes: Answer every yes/no question affirmatively. Free-text
            questions are still asked.
    """

    def __init__(self, *, assume_yes: bool = False) -> None:
        self.assume_yes = assume_yes

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            console.print_info(f"{message} [y/N]: y")
            return True
        return console.confirm(message)

    def ask(self, message: str) -> str:
        return console.ask(message)


def same_version(a: str, b: str) -> bool:
    """Compare numerically, falling back to text for aliases like ``lts/*``."""
    try:
        return compare(a, b) == Ordering.EQUAL
    except InvalidVersionError:
        return normalize(a) == normalize(b)


class Orchestrator:
    """Drive one reconciliation run.

    Args:
        config: Settings for this run.
        declaration: Declaration file; defaults to ``config.declaration_file``.
        manager: Version-manager adapter; defaults to one built from config.
        prompter: Object with ``confirm(message) -> bool`` and
            ``ask(message) -> str``.
        catalog_loader: Coroutine function returning the release catalog;
            defaults to fetching ``config.catalog_url``.
        platform: ``sys.platform``-style name for install guidance.
    """

    def __init__(
        self,
        config: "NvmSyncConfig",
        *,
        declaration: Optional[Declaration] = None,
        manager: Optional[VersionManager] = None,
        prompter: Optional[ConsolePrompter] = None,
        catalog_loader: Optional[CatalogLoader] = None,
        platform: Optional[str] = None,
    ) -> None:
        self.config = config
        self.declaration = declaration or Declaration(Path(config.declaration_file))
        self.manager = manager or VersionManager(
            config.manager_command,
            timeout=config.command_timeout,
            platform=platform,
        )
        self.prompter = prompter or ConsolePrompter()
        self.catalog_loader = catalog_loader or self._fetch_catalog
        self.platform = platform
        self.context = RunContext()

        self._handlers: Dict[State, Callable[[], Awaitable[State]]] = {
            State.DECLARATION_MISSING: self._declaration_missing,
            State.DECLARATION_EMPTY: self._declaration_empty,
            State.DECLARATION_READY: self._declaration_ready,
            State.MANAGER_UNAVAILABLE: self._manager_unavailable,
            State.COMPARING: self._comparing,
            State.SWITCHING: self._switching,
            State.PROMPT_INSTALL: self._prompt_install,
            State.INSTALLING: self._installing,
            State.SUGGESTING: self._suggesting,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self) -> Outcome:
        """Run the state machine until it reaches a terminal state."""
        state = await self._step(self._locate_declaration)

        while not state.is_terminal:
            self.context.history.append(state)
            logger.debug("Entering state %s", state.name)
            state = await self._step(self._handlers[state])

        self.context.history.append(state)
        logger.info("Run finished in state %s", state.name)
        if state is State.ABORTED:
            console.print_warning("Aborted; the active Node.js version was not changed")

        return Outcome(
            state=state,
            target=self.context.target,
            current=self.context.current,
            history=list(self.context.history),
        )

    async def _step(self, handler: Callable[[], Awaitable[State]]) -> State:
        """Run one handler, turning stray errors into terminal states."""
        try:
            return await handler()
        except UserAbortedError as exc:
            console.print_warning(exc.message)
            return State.ABORTED
        except NvmSyncError as exc:
            console.print_error(str(exc))
            logger.debug("Unrecoverable error", exc_info=True)
            return State.FAILED

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    async def _locate_declaration(self) -> State:
        try:
            self.context.target = self.declaration.read()
        except DeclarationError as exc:
            console.print_warning(exc.message)
            if exc.reason == "missing":
                return State.DECLARATION_MISSING
            return State.DECLARATION_EMPTY
        return State.DECLARATION_READY

    async def _declaration_missing(self) -> State:
        if not self.prompter.confirm(f"Create {self.declaration.path} now?"):
            return State.ABORTED
        return self._declare()

    async def _declaration_empty(self) -> State:
        return self._declare()

    def _declare(self) -> State:
        answer = self.prompter.ask("Node.js version to declare (e.g. 18.17.0)")
        if not answer:
            raise UserAbortedError("No version entered")
        self.context.target = self.declaration.write(answer)
        console.print_success(f"Recorded {answer.strip()} in {self.declaration.path}")
        return State.DECLARATION_READY

    # ------------------------------------------------------------------
    # Version manager
    # ------------------------------------------------------------------

    async def _declaration_ready(self) -> State:
        try:
            self.context.current = await self.manager.report_version()
        except ManagerUnavailableError as exc:
            console.print_error(str(exc))
            return State.MANAGER_UNAVAILABLE
        return State.COMPARING

    async def _manager_unavailable(self) -> State:
        for line in install_guidance(self.platform):
            console.print_info(line)

        if not (
            self.config.auto_install_manager
            or self.prompter.confirm("Install the version manager now?")
        ):
            return State.ABORTED

        try:
            result = await run_command(
                install_command(self.platform),
                timeout=self.config.command_timeout,
            )
        except OSError as exc:
            console.print_error(f"Cannot run the version manager installer: {exc}")
            return State.FAILED

        console.print_output(result.output)
        if not result.ok:
            console.print_error(
                f"Version manager installation failed (exit {result.returncode})"
            )
            return State.FAILED

        try:
            self.context.current = await self.manager.report_version()
        except ManagerUnavailableError as exc:
            console.print_error(str(exc))
            console.print_info("Open a new terminal and run nvmsync again.")
            return State.FAILED
        return State.COMPARING

    # ------------------------------------------------------------------
    # Compare / switch / install
    # ------------------------------------------------------------------

    async def _comparing(self) -> State:
        target, current = self._target(), self.context.current

        if current is not None and same_version(current, target):
            console.print_success(f"Node.js versions match: {current}")
            return State.RESOLVED

        console.print_info(f"Current Node.js version: {current or 'none'}")
        console.print_info(f"Switching to declared version: {target}")
        return State.SWITCHING

    async def _switching(self) -> State:
        target = self._target()
        activation = await self.manager.activate(target)

        if activation.activated:
            return await self._confirm_switch()

        if activation.status is ActivationStatus.NOT_INSTALLED:
            console.print_warning(f"Node.js {target} is not installed")
            await self._show_installed()
            if self.config.auto_install:
                return State.INSTALLING
            return State.PROMPT_INSTALL

        try:
            activation.raise_for_status()
        except SwitchFailedError as exc:
            console.print_error(exc.message)
            console.print_output(activation.output)
        return State.PROMPT_INSTALL

    async def _prompt_install(self) -> State:
        target = self._target()
        if self.prompter.confirm(f"Do you want to install Node.js {target}?"):
            return State.INSTALLING
        console.print_info(f"Run 'nvm install {target}' to install it manually.")
        return State.ABORTED

    async def _installing(self) -> State:
        target = self._target()
        console.print_info(f"Installing Node.js {target}...")

        try:
            result = await self.manager.install(target)
        except InstallFailedError as exc:
            console.print_error(exc.message)
            console.print_output(exc.output or "")
            self.context.failed_installs.add(normalize(target))
            return State.SUGGESTING

        console.print_output(result.output)
        activation = await self.manager.activate(target)
        if activation.activated:
            return await self._confirm_switch()

        console.print_error(f"Node.js {target} was installed but could not be activated")
        console.print_info(f"Please run 'nvm use {target}' manually.")
        return State.FAILED

    async def _confirm_switch(self) -> State:
        target = self._target()

        if self.config.verify_switch:
            reported = await self.manager.report_version()
            if reported is None or not same_version(reported, target):
                console.print_error(
                    f"Node.js version did not switch (active: {reported or 'none'})"
                )
                console.print_info(f"Please run 'nvm use {target}' manually.")
                return State.FAILED

        self.context.current = target
        console.print_success(f"Now using Node.js {target}")
        return State.RESOLVED

    async def _show_installed(self) -> None:
        # Diagnostic only; a failed listing never changes the outcome.
        try:
            listing = await self.manager.list_installed()
        except NvmSyncError as exc:
            logger.warning("Could not list installed versions: %s", exc)
            return
        if listing.strip():
            console.print_info("Installed versions:")
            console.print_output(listing)

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    async def _suggesting(self) -> State:
        target = self._target()

        try:
            records = await self.catalog_loader()
            suggestions = suggest(
                records, target, minimum=self.config.minimum_version
            )
        except (
            NetworkError,
            OperationTimeoutError,
            CatalogParseError,
            EmptyCatalogError,
            InvalidVersionError,
        ) as exc:
            console.print_error(f"Cannot suggest alternatives: {exc}")
            return State.FAILED

        display_suggestions(suggestions, target)
        choice = self._choose_alternative()

        if self.config.record_choice and self.prompter.confirm(
            f"Record {choice} in {self.declaration.path}?"
        ):
            self.declaration.write(choice)

        self.context.target = normalize(choice)
        return State.INSTALLING

    def _choose_alternative(self) -> str:
        """Ask until the operator names a valid, not yet failed version."""
        while True:
            answer = self.prompter.ask(
                "Enter a version to install instead (blank to abort)"
            )
            if not answer:
                raise UserAbortedError("No alternative version chosen")

            version = normalize(answer)
            if not is_valid_version(version):
                console.print_warning(f"{answer!r} is not a valid version")
                continue
            if any(same_version(version, failed) for failed in self.context.failed_installs):
                console.print_warning(
                    f"Installing {version} already failed; choose another version"
                )
                continue
            return answer.strip()

    async def _fetch_catalog(self) -> List[ReleaseRecord]:
        async with HTTPClient(
            timeout=self.config.http_timeout,
            max_retries=self.config.max_retries,
        ) as http:
            return await fetch_catalog(http, self.config.catalog_url)

    def _target(self) -> str:
        assert self.context.target is not None
        return self.context.target
