"""
Custom exception hierarchy for nvmsync.

This module defines structured exception types used across nvmsync.
All exceptions inherit from :class:`NvmSyncError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class NvmSyncError(Exception):
    """Base exception for all nvmsync errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ConfigError(NvmSyncError):
    """Raised when a configuration file is unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path of the offending configuration file.
        option: Name of the invalid option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class InvalidVersionError(NvmSyncError):
    """Raised when a version string is not a dotted sequence of integers."""

    __slots__ = ("version",)

    def __init__(self, version: str) -> None:
        super().__init__(f"Invalid version string: {version!r}")
        self.version = version


class DeclarationError(NvmSyncError):
    """Raised when the version declaration file is missing or empty.

    Args:
        message: Error description.
        file_path: Path to the declaration file.
        reason: ``"missing"`` or ``"empty"``.
    """

    __slots__ = ("file_path", "reason")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "reason", reason)

        super().__init__(message, details)

        self.file_path = file_path
        self.reason = reason


class FileOperationError(NvmSyncError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ManagerError(NvmSyncError):
    """Base class for failures reported by the external version manager.

    Args:
        message: Error description.
        command: The manager verb that failed (``use``, ``install`` ...).
        version: Version argument of the failed command, if any.
        output: Combined command output, truncated for safety.
    """

    __slots__ = ("command", "version", "output")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        version: Optional[str] = None,
        output: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "command", command)
        _add_if(details, "version", version)

        if output:
            details["output"] = _truncate(output.strip())

        super().__init__(message, details)

        self.command = command
        self.version = version
        self.output = output


class ManagerUnavailableError(ManagerError):
    """Raised when the version manager cannot be launched or queried."""


class SwitchFailedError(ManagerError):
    """Raised when ``use`` fails for a reason other than a missing version."""


class InstallFailedError(ManagerError):
    """Raised when ``install`` fails."""


class NetworkError(NvmSyncError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class CatalogParseError(NvmSyncError):
    """Raised when the release catalog is not valid JSON or has bad records.

    Args:
        message: Error description.
        index: Position of the offending record, if any.
        field: Name of the missing or malformed field, if any.
    """

    __slots__ = ("index", "field")

    def __init__(
        self,
        message: str,
        *,
        index: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "index", index)
        _add_if(details, "field", field)

        super().__init__(message, details)

        self.index = index
        self.field = field


class EmptyCatalogError(NvmSyncError):
    """Raised when there are no releases to suggest from."""


class OperationTimeoutError(NvmSyncError):
    """Raised when a subprocess or network request exceeds its time limit.

    Args:
        message: Error description.
        operation: What timed out (a command line or a URL).
        timeout: The limit that expired, in seconds.
    """

    __slots__ = ("operation", "timeout")

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "operation", operation)
        _add_if(details, "timeout", timeout)

        super().__init__(message, details)

        self.operation = operation
        self.timeout = timeout


class UserAbortedError(NvmSyncError):
    """Raised when the operator declines to continue."""
