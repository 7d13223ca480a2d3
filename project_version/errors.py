"""
Exception types for Project Version.

Parsing problems derive from ValueError and git problems from RuntimeError,
so callers that only care about the broad category can catch the builtin.
"""

from typing import List, Optional


class ProjectVersionError(Exception):
    """Base class for every error raised by this package."""


class InvalidVersionArgument(ProjectVersionError, ValueError):
    """A version string was missing/empty, or a field was out of range."""


class VersionFormatError(ProjectVersionError, ValueError):
    """A version string did not match 'major.minor.patch[+revision]'."""


class ExternalToolError(ProjectVersionError, RuntimeError):
    """
    A git command could not be started, timed out, or exited non-zero.

    Attributes:
        command: Full argument list that was executed
        returncode: Process exit code, or None if the process never completed
        stderr: Captured standard error (or the OS error text on launch failure)
    """

    def __init__(self, command: List[str], returncode: Optional[int], stderr: str = ''):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr or 'no error output'
        if returncode is None:
            message = f"Failed to execute {' '.join(self.command)}: {detail}"
        else:
            message = f"{' '.join(self.command)} exited with code {returncode}: {detail}"
        super().__init__(message)


class VersionUnavailableError(ProjectVersionError, RuntimeError):
    """Version could not be derived from git. The original error is kept in `cause`."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
