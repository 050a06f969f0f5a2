"""
Shared context object for nvmsync CLI commands.

This module defines the Click context object used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from nvmsync.config import NvmSyncConfig


class NvmSyncContext:
    """Global context object for nvmsync CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        config_path: Path to the nvmsync configuration file, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration, or ``None`` before loading.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: Optional[NvmSyncConfig] = None

    def get_config(self) -> NvmSyncConfig:
        """Return the loaded configuration, or defaults when none was loaded."""
        if self.config is None:
            self.config = NvmSyncConfig()
        return self.config


#: Click decorator for injecting :class:`NvmSyncContext` into commands.
pass_context = click.make_pass_decorator(NvmSyncContext, ensure=True)
