"""
Utility helpers for nvmsync.

This package provides reusable utilities used across nvmsync, including:

- Console output and prompts (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client and subprocess runner
- Version normalization and comparison

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from nvmsync.utils.filesystem import safe_read_file, safe_write_file

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from nvmsync.utils.logger import (
    get_logger,
    level_for_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from nvmsync.utils.console import (
    ask,
    colorize_lts,
    confirm,
    print_error,
    print_info,
    print_output,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP and subprocess utilities
# ---------------------------------------------------------------------------

from nvmsync.utils.http import HTTPClient
from nvmsync.utils.process import CommandResult, run_command

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from nvmsync.utils.version_utils import (
    Ordering,
    compare,
    is_valid_version,
    normalize,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "ask",
    "confirm",
    "print_error",
    "print_info",
    "print_output",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "colorize_lts",
    # Logging
    "get_logger",
    "setup_logging",
    "level_for_verbosity",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    # HTTP / subprocess
    "HTTPClient",
    "CommandResult",
    "run_command",
    # Version utilities
    "Ordering",
    "compare",
    "is_valid_version",
    "normalize",
]
