"""Launcher logging configuration.

Owns the launcher logger configuration (handlers, formatters).
Other modules get their own logger reference via:
    _logger = logging.getLogger(f"{APP_NAME}.process")

Python loggers are singletons by name, so child loggers propagate to the
handler configured here. This module owns the configuration; others just
call log_event().

Operator-facing output (INFO/ERROR lines) is printed by the CLI with
click.echo. The logger carries diagnostics: WARNING+ by default, DEBUG with
--verbose, and JSON lines once a detached worker has redirected its output
to the launcher log.
"""

from __future__ import annotations

__all__ = [
    "configure_daemon_logging",
    "configure_logging",
    "log_event",
]

import logging

from app_launcher.constants import APP_NAME
from app_launcher.models import LauncherEvent
from app_launcher.utils.logging import ISO8601Formatter

_logger = logging.getLogger(APP_NAME)
_logger.setLevel(logging.WARNING)
_logger.propagate = False


class _ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        # Use getMessage() to substitute %s placeholders with args
        return f"{record.levelname}: {record.getMessage()}"


def _replace_handler(formatter: logging.Formatter) -> None:
    # Close and clear any existing handlers to avoid resource leaks
    for handler in _logger.handlers:
        handler.close()
    _logger.handlers.clear()

    # No stream argument: the handler resolves sys.stderr when created,
    # which honors redirections done before configuration
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    _logger.addHandler(handler)


def configure_logging(verbose: bool = False) -> None:
    """Configure console logging for one launcher invocation.

    Args:
        verbose: Log DEBUG events instead of WARNING+ only.
    """
    _logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    _replace_handler(_ConsoleFormatter())


def configure_daemon_logging() -> None:
    """Switch to JSON lines after stderr was redirected to the launcher log.

    Keeps the current level and adds INFO so lifecycle events of the
    detached worker are recorded.
    """
    _logger.setLevel(min(_logger.level, logging.INFO))
    _replace_handler(ISO8601Formatter())


def log_event(level: int, event: LauncherEvent) -> None:
    """Log a LauncherEvent at the specified level.

    Serializes the event to a dict (excluding None values) and logs it.
    The ISO8601Formatter adds the timestamp during serialization.

    Args:
        level: Logging level (e.g., logging.INFO, logging.WARNING).
        event: The event to log.
    """
    _logger.log(level, event.model_dump(exclude_none=True))


# Initialize with stderr-only until the CLI configures verbosity
if not _logger.handlers:
    _replace_handler(_ConsoleFormatter())
