from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from nvmsync.config import NvmSyncConfig
from nvmsync.core.declaration import Declaration
from nvmsync.core.manager import ActivationResult, ActivationStatus, VersionManager
from nvmsync.core.orchestrator import (
    ConsolePrompter,
    Orchestrator,
    State,
    same_version,
)
from nvmsync.exceptions import (
    InstallFailedError,
    ManagerUnavailableError,
    NetworkError,
    OperationTimeoutError,
)
from nvmsync.models import ReleaseRecord
from nvmsync.utils.process import CommandResult


# ==============================================================================
# Helpers
# ==============================================================================


class ScriptedPrompter:
    """Answers prompts from pre-recorded lists and remembers what was asked."""

    def __init__(
        self,
        confirms: Iterable[bool] = (),
        answers: Iterable[str] = (),
    ) -> None:
        self.confirms = list(confirms)
        self.answers = list(answers)
        self.prompts: List[str] = []

    def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.confirms.pop(0)

    def ask(self, message: str) -> str:
        self.prompts.append(message)
        return self.answers.pop(0)


def _activated(version: str) -> ActivationResult:
    return ActivationResult(version, ActivationStatus.ACTIVATED, f"Now using node v{version}")


def _not_installed(version: str) -> ActivationResult:
    return ActivationResult(
        version,
        ActivationStatus.NOT_INSTALLED,
        f'N/A: version "v{version}" is not yet installed.',
    )


def _install_ok(version: str) -> CommandResult:
    return CommandResult(["nvm", "install", version], f"Installed v{version}", "", 0)


def _install_failed(version: str) -> InstallFailedError:
    return InstallFailedError(
        f"Installing Node.js {version} failed",
        command="install",
        version=version,
        output=f"Version '{version}' not found - try `nvm ls-remote`",
    )


def _release(version: str, lts=False) -> ReleaseRecord:
    return ReleaseRecord(version.lstrip("v"), version, "2023-01-01", lts)


CATALOG = [
    _release("v21.1.0"),
    _release("v20.9.0", "Iron"),
    _release("v19.9.0"),
    _release("v18.18.0", "Hydrogen"),
    _release("v18.17.0", "Hydrogen"),
]


@pytest.fixture
def nvmrc(tmp_path: Path) -> Path:
    """Path of the declaration file (not created)."""
    return tmp_path / ".nvmrc"


@pytest.fixture
def manager() -> MagicMock:
    """Version manager double; tests script its async methods."""
    fake = MagicMock(spec=VersionManager)
    fake.report_version = AsyncMock(return_value=None)
    fake.activate = AsyncMock()
    fake.install = AsyncMock()
    fake.list_installed = AsyncMock(return_value="       v16.20.2")
    return fake


def _orchestrator(
    nvmrc: Path,
    manager: MagicMock,
    prompter: ScriptedPrompter,
    *,
    catalog_loader: Optional[AsyncMock] = None,
    **config_overrides,
) -> Orchestrator:
    config = NvmSyncConfig(declaration_file=str(nvmrc), **config_overrides)
    return Orchestrator(
        config,
        declaration=Declaration(nvmrc),
        manager=manager,
        prompter=prompter,
        catalog_loader=catalog_loader or AsyncMock(return_value=list(CATALOG)),
        platform="linux",
    )


# ==============================================================================
# Building blocks
# ==============================================================================


@pytest.mark.unit
class TestState:
    """Tests for State."""

    @pytest.mark.parametrize("state", [State.RESOLVED, State.ABORTED, State.FAILED])
    def test_terminal_states(self, state: State) -> None:
        """Test the three end states are terminal."""
        assert state.is_terminal is True

    def test_intermediate_states_are_not_terminal(self) -> None:
        """Test every other state keeps the machine running."""
        others = set(State) - {State.RESOLVED, State.ABORTED, State.FAILED}

        assert len(others) == 9
        assert not any(state.is_terminal for state in others)


@pytest.mark.unit
class TestSameVersion:
    """Tests for same_version."""

    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("18.17.0", "v18.17.0", True),
            ("18", "18.0.0", True),
            ("18.17.0", "18.17.1", False),
            ("lts/*", "lts/*", True),
            ("lts/*", "18.17.0", False),
        ],
    )
    def test_same_version(self, a: str, b: str, expected: bool) -> None:
        """Test numeric comparison with a textual fallback for aliases."""
        assert same_version(a, b) is expected


@pytest.mark.unit
class TestConsolePrompter:
    """Tests for ConsolePrompter."""

    def test_assume_yes_skips_input(self) -> None:
        """Test --yes answers confirmations without reading stdin."""
        with patch("nvmsync.core.orchestrator.console.confirm") as mock_confirm:
            assert ConsolePrompter(assume_yes=True).confirm("Install?") is True

        mock_confirm.assert_not_called()

    def test_delegates_to_console(self) -> None:
        """Test prompts go to the console helpers otherwise."""
        with patch(
            "nvmsync.core.orchestrator.console.confirm", return_value=False
        ), patch("nvmsync.core.orchestrator.console.ask", return_value="18"):
            prompter = ConsolePrompter()

            assert prompter.confirm("Install?") is False
            assert prompter.ask("Version") == "18"

    def test_assume_yes_still_asks_free_text(self) -> None:
        """Test --yes never invents a version."""
        with patch("nvmsync.core.orchestrator.console.ask", return_value="") as mock_ask:
            assert ConsolePrompter(assume_yes=True).ask("Version") == ""

        mock_ask.assert_called_once_with("Version")


# ==============================================================================
# End-to-end runs
# ==============================================================================


@pytest.mark.integration
class TestVersionsMatch:
    """Declared version already active."""

    @pytest.mark.asyncio
    async def test_resolves_without_switching(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test matching versions end the run immediately."""
        nvmrc.write_text("v18.17.0\n", encoding="utf-8")
        manager.report_version.return_value = "18.17.0"

        outcome = await _orchestrator(nvmrc, manager, ScriptedPrompter()).run()

        assert outcome.state is State.RESOLVED
        assert outcome.exit_code == 0
        assert outcome.history == [
            State.DECLARATION_READY,
            State.COMPARING,
            State.RESOLVED,
        ]
        manager.activate.assert_not_awaited()


@pytest.mark.integration
class TestSwitching:
    """Declared version installed but not active."""

    @pytest.mark.asyncio
    async def test_switches_to_declared_version(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test a mismatch is fixed with 'use'."""
        nvmrc.write_text("18.17.0\n", encoding="utf-8")
        manager.report_version.return_value = "16.20.2"
        manager.activate.return_value = _activated("18.17.0")

        outcome = await _orchestrator(nvmrc, manager, ScriptedPrompter()).run()

        assert outcome.state is State.RESOLVED
        assert outcome.current == "18.17.0"
        assert State.SWITCHING in outcome.history
        manager.activate.assert_awaited_once_with("18.17.0")
        manager.install.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_active_version_switches(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test 'none' active is treated as a mismatch."""
        nvmrc.write_text("18.17.0\n", encoding="utf-8")
        manager.activate.return_value = _activated("18.17.0")

        outcome = await _orchestrator(nvmrc, manager, ScriptedPrompter()).run()

        assert outcome.state is State.RESOLVED

    @pytest.mark.asyncio
    async def test_verify_switch_detects_unchanged_version(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test verify_switch re-reads the active version after 'use'."""
        nvmrc.write_text("18.17.0\n", encoding="utf-8")
        manager.report_version.side_effect = ["16.20.2", "16.20.2"]
        manager.activate.return_value = _activated("18.17.0")

        outcome = await _orchestrator(
            nvmrc, manager, ScriptedPrompter(), verify_switch=True
        ).run()

        assert outcome.state is State.FAILED
        assert outcome.exit_code == 1

    @pytest.mark.asyncio
    async def test_switch_failure_offers_install(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test a failed 'use' asks before reinstalling."""
        nvmrc.write_text("18.17.0\n", encoding="utf-8")
        manager.report_version.return_value = "16.20.2"
        manager.activate.side_effect = [
            ActivationResult("18.17.0", ActivationStatus.FAILED, "corrupt install"),
            _activated("18.17.0"),
        ]
        manager.install.return_value = _install_ok("18.17.0")
        prompter = ScriptedPrompter(confirms=[True])

        outcome = await _orchestrator(nvmrc, manager, prompter).run()

        assert outcome.state is State.RESOLVED
        assert prompter.prompts == ["Do you want to install Node.js 18.17.0?"]
        assert outcome.history[2:] == [
            State.SWITCHING,
            State.PROMPT_INSTALL,
            State.INSTALLING,
            State.RESOLVED,
        ]


@pytest.mark.integration
class TestInstalling:
    """Declared version not installed."""

    @pytest.mark.asyncio
    async def test_auto_install_then_activate(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test a missing version is installed without asking by default."""
        nvmrc.write_text("20.9.0\n", encoding="utf-8")
        manager.report_version.return_value = "18.17.0"
        manager.activate.side_effect = [_not_installed("20.9.0"), _activated("20.9.0")]
        manager.install.return_value = _install_ok("20.9.0")
        prompter = ScriptedPrompter()

        outcome = await _orchestrator(nvmrc, manager, prompter).run()

        assert outcome.state is State.RESOLVED
        assert outcome.history == [
            State.DECLARATION_READY,
            State.COMPARING,
            State.SWITCHING,
            State.INSTALLING,
            State.RESOLVED,
        ]
        manager.install.assert_awaited_once_with("20.9.0")
        manager.list_installed.assert_awaited_once()
        assert prompter.prompts == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            OperationTimeoutError("nvm ls timed out", timeout=600),
            ManagerUnavailableError("Cannot launch nvm", command="ls"),
        ],
    )
    async def test_listing_failure_does_not_stop_install(
        self, nvmrc: Path, manager: MagicMock, error: Exception
    ) -> None:
        """Test the installed-versions listing is diagnostic only."""
        nvmrc.write_text("20.9.0\n", encoding="utf-8")
        manager.report_version.return_value = "18.17.0"
        manager.activate.side_effect = [_not_installed("20.9.0"), _activated("20.9.0")]
        manager.install.return_value = _install_ok("20.9.0")
        manager.list_installed.side_effect = error

        outcome = await _orchestrator(nvmrc, manager, ScriptedPrompter()).run()

        assert outcome.state is State.RESOLVED
        assert outcome.history == [
            State.DECLARATION_READY,
            State.COMPARING,
            State.SWITCHING,
            State.INSTALLING,
            State.RESOLVED,
        ]
        manager.install.assert_awaited_once_with("20.9.0")

    @pytest.mark.asyncio
    async def test_prompt_declined_aborts(self, nvmrc: Path, manager: MagicMock) -> None:
        """Test declining the install leaves the active version alone."""
        nvmrc.write_text("20.9.0\n", encoding="utf-8")
        manager.report_version.return_value = "18.17.0"
        manager.activate.return_value = _not_installed("20.9.0")

        outcome = await _orchestrator(
            nvmrc, manager, ScriptedPrompter(confirms=[False]), auto_install=False
        ).run()

        assert outcome.state is State.ABORTED
        assert outcome.exit_code == 1
        assert outcome.current == "18.17.0"
        manager.install.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_installed_but_not_activated_fails(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test a 'use' failure after a good install is unrecoverable."""
        nvmrc.write_text("20.9.0\n", encoding="utf-8")
        manager.activate.side_effect = [
            _not_installed("20.9.0"),
            ActivationResult("20.9.0", ActivationStatus.FAILED, "EACCES"),
        ]
        manager.install.return_value = _install_ok("20.9.0")

        outcome = await _orchestrator(nvmrc, manager, ScriptedPrompter()).run()

        assert outcome.state is State.FAILED


@pytest.mark.integration
class TestSuggesting:
    """Installing the declared version fails."""

    @pytest.mark.asyncio
    async def test_alternative_is_installed_and_recorded(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test the operator's pick is recorded, installed and activated."""
        nvmrc.write_text("18.99.0\n", encoding="utf-8")
        manager.report_version.return_value = "16.20.2"
        manager.activate.side_effect = [
            _not_installed("18.99.0"),
            _activated("18.18.0"),
        ]
        manager.install.side_effect = [_install_failed("18.99.0"), _install_ok("18.18.0")]
        loader = AsyncMock(return_value=list(CATALOG))
        prompter = ScriptedPrompter(confirms=[True], answers=["v18.18.0"])

        outcome = await _orchestrator(
            nvmrc, manager, prompter, catalog_loader=loader
        ).run()

        assert outcome.state is State.RESOLVED
        assert outcome.target == "18.18.0"
        assert outcome.history == [
            State.DECLARATION_READY,
            State.COMPARING,
            State.SWITCHING,
            State.INSTALLING,
            State.SUGGESTING,
            State.INSTALLING,
            State.RESOLVED,
        ]
        loader.assert_awaited_once()
        assert nvmrc.read_text(encoding="utf-8") == "v18.18.0"
        assert manager.install.await_args_list[1].args == ("18.18.0",)

    @pytest.mark.asyncio
    async def test_record_choice_disabled(self, nvmrc: Path, manager: MagicMock) -> None:
        """Test the declaration is left alone when recording is disabled."""
        nvmrc.write_text("18.99.0\n", encoding="utf-8")
        manager.activate.side_effect = [_not_installed("18.99.0"), _activated("20.9.0")]
        manager.install.side_effect = [_install_failed("18.99.0"), _install_ok("20.9.0")]
        prompter = ScriptedPrompter(answers=["20.9.0"])

        outcome = await _orchestrator(
            nvmrc, manager, prompter, record_choice=False
        ).run()

        assert outcome.state is State.RESOLVED
        assert nvmrc.read_text(encoding="utf-8") == "18.99.0"

    @pytest.mark.asyncio
    async def test_rejects_invalid_and_failed_choices(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test bad picks are re-asked and a blank answer aborts."""
        nvmrc.write_text("18.99.0\n", encoding="utf-8")
        manager.activate.return_value = _not_installed("18.99.0")
        manager.install.side_effect = _install_failed("18.99.0")
        prompter = ScriptedPrompter(answers=["latest", "v18.99.0", ""])

        outcome = await _orchestrator(nvmrc, manager, prompter).run()

        assert outcome.state is State.ABORTED
        assert prompter.answers == []
        manager.install.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_failure_suggests_again(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test a failed alternative loops back and cannot be picked twice."""
        nvmrc.write_text("18.99.0\n", encoding="utf-8")
        manager.activate.side_effect = [_not_installed("18.99.0"), _activated("20.9.0")]
        manager.install.side_effect = [
            _install_failed("18.99.0"),
            _install_failed("18.18.0"),
            _install_ok("20.9.0"),
        ]
        prompter = ScriptedPrompter(
            confirms=[False, False],
            answers=["18.18.0", "18.18.0", "20.9.0"],
        )

        outcome = await _orchestrator(nvmrc, manager, prompter).run()

        assert outcome.state is State.RESOLVED
        assert outcome.history.count(State.SUGGESTING) == 2
        assert manager.install.await_count == 3

    @pytest.mark.asyncio
    async def test_catalog_failure_fails_run(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test an unreachable catalog ends the run in FAILED."""
        nvmrc.write_text("18.99.0\n", encoding="utf-8")
        manager.activate.return_value = _not_installed("18.99.0")
        manager.install.side_effect = _install_failed("18.99.0")
        loader = AsyncMock(side_effect=NetworkError("HTTP 503", status_code=503))

        outcome = await _orchestrator(
            nvmrc, manager, ScriptedPrompter(), catalog_loader=loader
        ).run()

        assert outcome.state is State.FAILED
        assert outcome.history[-2:] == [State.SUGGESTING, State.FAILED]

    @pytest.mark.asyncio
    async def test_empty_catalog_fails_run(self, nvmrc: Path, manager: MagicMock) -> None:
        """Test an empty catalog ends the run in FAILED."""
        nvmrc.write_text("18.99.0\n", encoding="utf-8")
        manager.activate.return_value = _not_installed("18.99.0")
        manager.install.side_effect = _install_failed("18.99.0")

        outcome = await _orchestrator(
            nvmrc,
            manager,
            ScriptedPrompter(),
            catalog_loader=AsyncMock(return_value=[]),
        ).run()

        assert outcome.state is State.FAILED


@pytest.mark.integration
class TestDeclaration:
    """Declaration file missing or empty."""

    @pytest.mark.asyncio
    async def test_missing_file_is_created(self, nvmrc: Path, manager: MagicMock) -> None:
        """Test the operator can create the declaration and continue."""
        manager.report_version.return_value = "18.17.0"
        prompter = ScriptedPrompter(confirms=[True], answers=["v18.17.0"])

        outcome = await _orchestrator(nvmrc, manager, prompter).run()

        assert outcome.state is State.RESOLVED
        assert outcome.history[:2] == [State.DECLARATION_MISSING, State.DECLARATION_READY]
        assert nvmrc.read_text(encoding="utf-8") == "v18.17.0"

    @pytest.mark.asyncio
    async def test_missing_file_declined(self, nvmrc: Path, manager: MagicMock) -> None:
        """Test declining creation aborts without writing anything."""
        outcome = await _orchestrator(
            nvmrc, manager, ScriptedPrompter(confirms=[False])
        ).run()

        assert outcome.state is State.ABORTED
        assert not nvmrc.exists()
        manager.report_version.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_file_without_answer(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test an empty answer never writes an empty declaration."""
        nvmrc.write_text("\n", encoding="utf-8")

        outcome = await _orchestrator(
            nvmrc, manager, ScriptedPrompter(answers=[""])
        ).run()

        assert outcome.state is State.ABORTED
        assert outcome.history == [State.DECLARATION_EMPTY, State.ABORTED]
        assert nvmrc.read_text(encoding="utf-8") == "\n"


@pytest.mark.integration
class TestManagerUnavailable:
    """Version manager missing."""

    @pytest.mark.asyncio
    async def test_declining_install_aborts(self, nvmrc: Path, manager: MagicMock) -> None:
        """Test guidance is shown and declining ends the run."""
        nvmrc.write_text("18.17.0\n", encoding="utf-8")
        manager.report_version.side_effect = ManagerUnavailableError("nvm not found")
        prompter = ScriptedPrompter(confirms=[False])

        outcome = await _orchestrator(nvmrc, manager, prompter).run()

        assert outcome.state is State.ABORTED
        assert prompter.prompts == ["Install the version manager now?"]

    @pytest.mark.asyncio
    async def test_auto_install_manager(self, nvmrc: Path, manager: MagicMock) -> None:
        """Test the installer runs unattended and the run continues."""
        nvmrc.write_text("18.17.0\n", encoding="utf-8")
        manager.report_version.side_effect = [
            ManagerUnavailableError("nvm not found"),
            "18.17.0",
        ]
        installer = CommandResult(["bash"], "=> nvm installed", "", 0)

        with patch(
            "nvmsync.core.orchestrator.run_command",
            new_callable=AsyncMock,
            return_value=installer,
        ) as mock_run:
            outcome = await _orchestrator(
                nvmrc, manager, ScriptedPrompter(), auto_install_manager=True
            ).run()

        assert outcome.state is State.RESOLVED
        assert State.MANAGER_UNAVAILABLE in outcome.history
        assert mock_run.await_args.args[0][:2] == ["bash", "-c"]

    @pytest.mark.asyncio
    async def test_installer_failure_fails_run(
        self, nvmrc: Path, manager: MagicMock
    ) -> None:
        """Test a failing installer ends the run in FAILED."""
        nvmrc.write_text("18.17.0\n", encoding="utf-8")
        manager.report_version.side_effect = ManagerUnavailableError("nvm not found")
        installer = CommandResult(["bash"], "", "curl: (6) Could not resolve host", 6)

        with patch(
            "nvmsync.core.orchestrator.run_command",
            new_callable=AsyncMock,
            return_value=installer,
        ):
            outcome = await _orchestrator(
                nvmrc, manager, ScriptedPrompter(confirms=[True])
            ).run()

        assert outcome.state is State.FAILED
