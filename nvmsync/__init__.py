"""
nvmsync: keep the active Node.js version in line with the project.

nvmsync reads the version a project declares in ``.nvmrc``, compares it
with the version nvm reports as active, and switches or installs as
needed. When the declared version cannot be installed, it suggests the
nearest released alternatives from the official Node.js release index.
"""

from __future__ import annotations

from nvmsync.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "nvmsync Contributors"
__license__ = "Apache-2.0"
__description__ = "Reconcile the active Node.js version with a project's .nvmrc."

__all__ = [
    "__version__",
]
