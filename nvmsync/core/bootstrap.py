"""Installation guidance for the version manager itself.

Used when nvm cannot be launched: prints platform-specific instructions and
offers a one-shot installer command the operator may let nvmsync run.
"""

from __future__ import annotations

import sys
from typing import List, Optional

from nvmsync.constants import NVM_INSTALL_SCRIPT_URL, NVM_WINDOWS_WINGET_ID
from nvmsync.core.manager import is_windows


def install_guidance(platform: Optional[str] = None) -> List[str]:
    """Return human-readable steps to install nvm on ``platform``."""
    platform = platform or sys.platform

    if is_windows(platform):
        return [
            "nvm-windows is required on Windows.",
            f"Install it with: winget install --id {NVM_WINDOWS_WINGET_ID} -e",
            "or download the installer from "
            "https://github.com/coreybutler/nvm-windows/releases",
            "Open a new terminal afterwards so 'nvm' is on PATH.",
        ]

    steps = [
        "nvm (https://github.com/nvm-sh/nvm) is required.",
        f"Install it with: curl -o- {NVM_INSTALL_SCRIPT_URL} | bash",
    ]
    if platform == "darwin":
        steps.append("Homebrew users can run: brew install nvm")
    steps.append("Then restart your shell or source ~/.nvm/nvm.sh.")
    return steps


def install_command(platform: Optional[str] = None) -> List[str]:
    """Return the command that installs nvm unattended on ``platform``."""
    if is_windows(platform):
        return [
            "winget",
            "install",
            "--id",
            NVM_WINDOWS_WINGET_ID,
            "-e",
            "--accept-source-agreements",
            "--accept-package-agreements",
        ]
    return ["bash", "-c", f"curl -fsSL -o- {NVM_INSTALL_SCRIPT_URL} | bash"]
