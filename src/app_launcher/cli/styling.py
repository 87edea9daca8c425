"""CLI output styling utilities.

Provides the launcher's console output format:
- INFO lines on stdout: green label, cyan message
- ERROR lines on stderr: red label, yellow message
"""

from __future__ import annotations

__all__ = [
    "echo_error",
    "echo_info",
    "style_error",
    "style_info",
]

import click


def style_info(message: str) -> str:
    """Style an informational message.

    Args:
        message: The message text.

    Returns:
        Styled string in format "INFO: message".

    Example:
        >>> click.echo(style_info("Started as 4242"))
        INFO: Started as 4242
    """
    return f"{click.style('INFO', fg='green')}: {click.style(message, fg='cyan')}"


def style_error(message: str) -> str:
    """Style an error message.

    Args:
        message: The message text.

    Returns:
        Styled string in format "ERROR: message".

    Example:
        >>> click.echo(style_error("already running as 4242"), err=True)
        ERROR: already running as 4242
    """
    return f"{click.style('ERROR', fg='red')}: {click.style(message, fg='yellow')}"


def echo_info(message: str) -> None:
    """Print an informational message on stdout."""
    click.echo(style_info(message))


def echo_error(message: str) -> None:
    """Print an error message on stderr."""
    click.echo(style_error(message), err=True)
