"""
Core functionality exports for nvmsync.

This module provides convenient access to the core subsystems of nvmsync:

    from nvmsync.core import Orchestrator, suggest
"""

from __future__ import annotations

from nvmsync.core.catalog import fetch_catalog, parse_catalog, sort_releases, suggest
from nvmsync.core.declaration import Declaration
from nvmsync.core.manager import (
    ActivationResult,
    ActivationStatus,
    VersionManager,
    classify_activation,
)
from nvmsync.core.orchestrator import (
    ConsolePrompter,
    Orchestrator,
    Outcome,
    State,
)

__all__ = [
    "ActivationResult",
    "ActivationStatus",
    "ConsolePrompter",
    "Declaration",
    "Orchestrator",
    "Outcome",
    "State",
    "VersionManager",
    "classify_activation",
    "fetch_catalog",
    "parse_catalog",
    "sort_releases",
    "suggest",
]
