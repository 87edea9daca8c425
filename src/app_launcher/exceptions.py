"""Custom exceptions for app-launcher.

This module contains all custom exceptions used throughout the package.
Every exception derives from LauncherError so the CLI can report any
failure once, with context, and terminate the invocation.

Fatal Errors (invocation exits with an error status):
    - ConfigParseError: A configuration source could not be read or decoded
    - MalformedEscapeError: A \\uxxxx escape is truncated or not hexadecimal
    - PathResolutionError: A required file or directory is missing or not writable
    - LockError: The PID file lock could not be acquired or released
    - ProcessControlError: Worker already running elsewhere, exec or signal failure

Tolerated Conditions:
    - NotRunningError: No live worker is recorded. STOP and RESTART report it
      and succeed, STATUS exits with the LSB "not running" code.

Usage:
    from app_launcher.exceptions import LauncherError, NotRunningError
"""

from __future__ import annotations

__all__ = [
    "ConfigParseError",
    "LauncherError",
    "LockError",
    "MalformedEscapeError",
    "NotRunningError",
    "PathResolutionError",
    "ProcessControlError",
]


class LauncherError(Exception):
    """Base exception for all launcher failures."""


class ConfigParseError(LauncherError):
    """A configuration source could not be read or decoded.

    Raised before any process action is taken. Parsing is all-or-nothing:
    no partial mapping is returned for a source that fails.
    """


class MalformedEscapeError(ConfigParseError):
    """A \\u escape is not followed by exactly four hexadecimal digits."""

    def __init__(self, message: str = "malformed \\uxxxx encoding") -> None:
        super().__init__(message)


class PathResolutionError(LauncherError):
    """A required file or directory is missing, unreadable or not writable.

    Attributes:
        path: The path that failed to resolve, when known.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class LockError(LauncherError):
    """The PID file lock could not be acquired or released."""


class ProcessControlError(LauncherError):
    """The worker process could not be controlled.

    Covers a worker already running under another pid, failure to replace
    the process image, failure to spawn the detached child, and signal
    delivery failures other than a target that is already gone.
    """


class NotRunningError(LauncherError):
    """No live worker is recorded in the PID file."""

    def __init__(self, message: str = "Not running") -> None:
        super().__init__(message)
