"""
nvmsync version information.

Single source of truth for the package version.

Version format:
    MAJOR.MINOR.PATCH[.devN]
"""

from __future__ import annotations

__version__ = "0.1.0.dev0"

# Human-readable version (for CLI)
VERSION_STRING = f"nvmsync {__version__}"
