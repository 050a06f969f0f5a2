"""Configuration file loader for nvmsync.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``nvmsync.toml``: settings under ``[nvmsync]`` table
- ``pyproject.toml``: settings under ``[tool.nvmsync]`` table

Discovery order:

1. Explicit path from ``--config`` or ``NVMSYNC_CONFIG``
2. ``nvmsync.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.nvmsync]`` section

Configuration precedence: defaults < config file < CLI args.

Example (``nvmsync.toml``)::

    [nvmsync]
    declaration_file = ".nvmrc"
    auto_install = false
    minimum_version = "18.0.0"
"""

from __future__ import annotations


import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from nvmsync.exceptions import ConfigError
from nvmsync.core.manager import default_manager_command
from nvmsync.utils.logger import get_logger
from nvmsync.utils.version_utils import is_valid_version, normalize
from nvmsync.constants import (
    DEFAULT_CATALOG_URL,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_DECLARATION_FILE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")


@dataclass
class NvmSyncConfig:
    """Parsed and validated nvmsync configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        declaration_file: Path of the version declaration, relative to the
            working directory.
        catalog_url: URL of the Node.js release index.
        manager_command: Command prefix reaching nvm; the verb is appended.
        command_timeout: Seconds allowed per version-manager command.
        http_timeout: Seconds allowed for the catalog request.
        max_retries: Retries of a failed catalog request.
        auto_install: Install a missing version without asking first.
        auto_install_manager: Run the nvm installer without asking first.
        verify_switch: Re-read the active version after ``use``.
        record_choice: Offer to write a chosen alternative to the
            declaration file.
        minimum_version: Never suggest releases older than this.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    declaration_file: str = DEFAULT_DECLARATION_FILE
    catalog_url: str = DEFAULT_CATALOG_URL
    manager_command: List[str] = field(default_factory=default_manager_command)
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    http_timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    auto_install: bool = True
    auto_install_manager: bool = False
    verify_switch: bool = False
    record_choice: bool = True
    minimum_version: Optional[str] = None

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "declaration_file": self.declaration_file,
            "catalog_url": self.catalog_url,
            "manager_command": list(self.manager_command),
            "command_timeout": self.command_timeout,
            "http_timeout": self.http_timeout,
            "max_retries": self.max_retries,
            "auto_install": self.auto_install,
            "auto_install_manager": self.auto_install_manager,
            "verify_switch": self.verify_switch,
            "record_choice": self.record_choice,
            "minimum_version": self.minimum_version,
        }


_BOOL_OPTIONS = (
    "auto_install",
    "auto_install_manager",
    "verify_switch",
    "record_choice",
)
_STRING_OPTIONS = ("declaration_file", "catalog_url")
_TIMEOUT_OPTIONS = ("command_timeout", "http_timeout")
_KNOWN_OPTIONS = frozenset(
    _BOOL_OPTIONS
    + _STRING_OPTIONS
    + _TIMEOUT_OPTIONS
    + ("manager_command", "max_retries", "minimum_version")
)


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Search order:

    1. ``explicit_path`` (from ``--config`` or ``NVMSYNC_CONFIG``)
    2. ``nvmsync.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.nvmsync]`` section in current directory

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    nvmsync_toml = cwd / "nvmsync.toml"
    if nvmsync_toml.is_file():
        logger.debug("Found nvmsync.toml: %s", nvmsync_toml)
        return nvmsync_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_nvmsync_section(pyproject_toml):
        logger.debug("Found [tool.nvmsync] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_nvmsync_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.nvmsync] section.

    Unreadable or invalid files count as "no section" so discovery falls
    back to defaults.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "nvmsync" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> NvmSyncConfig:
    """Load and validate nvmsync configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`NvmSyncConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return NvmSyncConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("nvmsync", {})
    else:
        section = raw.get("nvmsync", {})

    if not section:
        logger.debug("Config file found but no nvmsync section, using defaults")
        return NvmSyncConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> NvmSyncConfig:
    """Parse and validate the ``[nvmsync]`` / ``[tool.nvmsync]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    config = NvmSyncConfig()

    unknown = set(section.keys()) - _KNOWN_OPTIONS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for name in _BOOL_OPTIONS:
        if name in section:
            val = section[name]
            if not isinstance(val, bool):
                raise ConfigError(
                    f"{name} must be a boolean, got {type(val).__name__}",
                    config_path=config_path,
                    option=name,
                )
            setattr(config, name, val)

    for name in _STRING_OPTIONS:
        if name in section:
            val = section[name]
            if not isinstance(val, str) or not val.strip():
                raise ConfigError(
                    f"{name} must be a non-empty string",
                    config_path=config_path,
                    option=name,
                )
            setattr(config, name, val.strip())

    for name in _TIMEOUT_OPTIONS:
        if name in section:
            val = section[name]
            if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
                raise ConfigError(
                    f"{name} must be a positive number of seconds",
                    config_path=config_path,
                    option=name,
                )
            setattr(config, name, float(val))

    if "max_retries" in section:
        val = section["max_retries"]
        if isinstance(val, bool) or not isinstance(val, int) or val < 0:
            raise ConfigError(
                "max_retries must be a non-negative integer",
                config_path=config_path,
                option="max_retries",
            )
        config.max_retries = val

    if "manager_command" in section:
        val = section["manager_command"]
        if (
            not isinstance(val, list)
            or not val
            or not all(isinstance(part, str) and part for part in val)
        ):
            raise ConfigError(
                "manager_command must be a non-empty list of strings",
                config_path=config_path,
                option="manager_command",
            )
        config.manager_command = list(val)

    if "minimum_version" in section:
        val = section["minimum_version"]
        if not isinstance(val, str) or not is_valid_version(val):
            raise ConfigError(
                f"minimum_version must be a version like '18.0.0', got {val!r}",
                config_path=config_path,
                option="minimum_version",
            )
        config.minimum_version = normalize(val)

    return config
