"""
Centralized constants for nvmsync.

This module defines immutable default values used across nvmsync,
including the release catalog endpoint, version-manager markers,
network and subprocess limits, and logging formats. Runtime behaviour is
driven by :class:`nvmsync.config.NvmSyncConfig`; these are only the
defaults it starts from.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "nvmsync/{version} (https://github.com/nvmsync/nvmsync)"
)

# ---------------------------------------------------------------------------
# Declaration file
# ---------------------------------------------------------------------------

#: Default project-local file naming the required Node.js version.
DEFAULT_DECLARATION_FILE: Final[str] = ".nvmrc"

# ---------------------------------------------------------------------------
# Release catalog
# ---------------------------------------------------------------------------

#: Official Node.js release index (JSON array, newest first).
DEFAULT_CATALOG_URL: Final[str] = "https://nodejs.org/dist/index.json"

#: Number of suggestions offered on each side of the target version.
SUGGESTION_LIMIT: Final[int] = 3

# ---------------------------------------------------------------------------
# Version manager
# ---------------------------------------------------------------------------

#: nvm is a shell function on POSIX systems, so it is reached through bash.
#: The trailing ``nvm`` becomes ``$0``; the verb and its arguments follow.
POSIX_MANAGER_COMMAND: Final[Sequence[str]] = (
    "bash",
    "-c",
    '. "${NVM_DIR:-$HOME/.nvm}/nvm.sh" && nvm "$@"',
    "nvm",
)

#: nvm-windows ships a real executable.
WINDOWS_MANAGER_COMMAND: Final[Sequence[str]] = ("nvm",)

#: Substrings nvm / nvm-windows print when ``use`` targets a missing version.
NOT_INSTALLED_MARKERS: Final[Sequence[str]] = (
    "is not installed",
    "is not yet installed",
)

#: Installer script for nvm on POSIX systems.
NVM_INSTALL_SCRIPT_URL: Final[str] = (
    "https://raw.githubusercontent.com/nvm-sh/nvm/v0.40.1/install.sh"
)

#: winget package identifier of nvm-windows.
NVM_WINDOWS_WINGET_ID: Final[str] = "CoreyButler.NVMforWindows"

# ---------------------------------------------------------------------------
# Timeouts and retries
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Catalog fetch failures are terminal, so no retries by default.
DEFAULT_MAX_RETRIES: Final[int] = 0

#: Default timeout for a single version-manager command (installs are slow).
DEFAULT_COMMAND_TIMEOUT: Final[int] = 600

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed size (in bytes) of a declaration file.
MAX_FILE_SIZE: Final[int] = 64 * 1024  # 64 KB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
