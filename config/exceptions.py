"""Custom exception hierarchy for Net Bar.

Nothing in the sampling engine is fatal to the host process: these exceptions
are raised at component seams and caught where a measurement degrades to a
zero rate or a 100% loss reading.
"""

from typing import Optional


class NetBarError(Exception):
    """Base exception for all Net Bar errors.

    All custom exceptions in this application inherit from this class, so
    callers can catch every application-specific error with one clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class StorageError(NetBarError):
    """Persistence errors.

    Raised when traffic totals or settings cannot be written.

    Examples:
        >>> raise StorageError("Failed to save totals", {"path": "/path/to/file"})
    """

    pass


class ConfigurationError(NetBarError):
    """Settings and configuration errors.

    Raised when there are issues with:
    - Invalid sampling intervals
    - Unknown display or unit options

    Examples:
        >>> raise ConfigurationError("Invalid sampling interval", {"value": -1})
    """

    pass


class SubprocessError(NetBarError):
    """Subprocess execution errors.

    Raised when there are issues with:
    - Command not found or not permitted
    - Timeouts
    - Launch failures

    Attributes:
        command: The command that failed.
        returncode: Exit code if available.
        stdout: Standard output if available.
        stderr: Standard error if available.

    Examples:
        >>> raise SubprocessError(
        ...     "Command timed out",
        ...     command=["/sbin/ping", "-c", "5", "1.1.1.1"],
        ... )
    """

    def __init__(
        self,
        message: str,
        command: Optional[list] = None,
        returncode: Optional[int] = None,
        stdout: Optional[str] = None,
        stderr: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        details = details or {}
        if command:
            details["command"] = command
        if returncode is not None:
            details["returncode"] = returncode
        if stdout:
            details["stdout"] = stdout[:500]  # Truncate long output
        if stderr:
            details["stderr"] = stderr[:500]

        super().__init__(message, details)
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
