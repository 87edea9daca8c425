"""Worker process supervision.

The supervisor drives the worker lifecycle through:
- pidfile: PID file doubling as an advisory lock and liveness record
- daemon: Detach-and-reexec daemonization
- command: Lifecycle command names
- supervisor: The lifecycle commands themselves

Usage:
    with LockablePidFile(options.pid_file) as pid_file:
        Supervisor().dispatch(Command.STATUS, pid_file, options)
"""

from __future__ import annotations

from .command import Command, parse_command, rewrite_args
from .pidfile import LockablePidFile, ProcessState, process_exists
from .supervisor import ProcessControl, Supervisor

__all__ = [
    "Command",
    "LockablePidFile",
    "ProcessControl",
    "ProcessState",
    "Supervisor",
    "parse_command",
    "process_exists",
    "rewrite_args",
]
