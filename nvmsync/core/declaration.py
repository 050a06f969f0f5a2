"""Access to the project's version declaration file (``.nvmrc``).

The whole trimmed content of the file is the declared version. The file is
only ever written with a complete, non-empty string the operator typed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from nvmsync.exceptions import DeclarationError
from nvmsync.utils.filesystem import safe_read_file, safe_write_file
from nvmsync.utils.logger import get_logger
from nvmsync.utils.version_utils import normalize

logger = get_logger("declaration")


class Declaration:
    """The declaration file at ``path``.

    Args:
        path: Location of the file, usually ``.nvmrc`` in the project root.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"Declaration(path={str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def read_raw(self) -> str:
        """Return the trimmed file content, as written.

        Raises:
            DeclarationError: The file is missing (``reason="missing"``) or
                blank (``reason="empty"``).
            FileOperationError: The file exists but cannot be read.
        """
        if not self.exists():
            raise DeclarationError(
                f"No version declaration found at {self.path}",
                file_path=str(self.path),
                reason="missing",
            )

        content = safe_read_file(self.path).strip()
        if not content:
            raise DeclarationError(
                f"Version declaration {self.path} is empty",
                file_path=str(self.path),
                reason="empty",
            )
        return content

    def read(self) -> str:
        """Return the declared version, normalized (no ``v``, trimmed)."""
        version = normalize(self.read_raw())
        logger.debug("Declared version in %s: %s", self.path, version)
        return version

    def write(self, value: str) -> str:
        """Record ``value`` as the declared version.

        Args:
            value: Text the operator typed; stored trimmed, otherwise as is.

        Returns:
            The normalized version now declared.

        Raises:
            ValueError: ``value`` is blank.
            FileOperationError: The file could not be written.
        """
        literal = value.strip()
        if not literal:
            raise ValueError("Refusing to write an empty version declaration")

        safe_write_file(self.path, literal)
        logger.info("Recorded %s in %s", literal, self.path)
        return normalize(literal)
