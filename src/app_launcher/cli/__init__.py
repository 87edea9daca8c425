"""Command-line interface for app-launcher.

Provides the lifecycle commands (run, start, stop, restart, kill, status)
and the global options locating configuration and runtime files.
"""

from .main import cli, main

__all__ = ["cli", "main"]
