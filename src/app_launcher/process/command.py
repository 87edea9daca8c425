"""Lifecycle commands understood by the launcher."""

from __future__ import annotations

__all__ = [
    "Command",
    "parse_command",
    "rewrite_args",
]

from enum import Enum


class Command(str, Enum):
    """One lifecycle command per launcher invocation."""

    RUN = "run"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    KILL = "kill"
    STATUS = "status"
    HELP = "help"
    UNKNOWN = "unknown"


def parse_command(name: str) -> Command:
    """Map a command line word to a Command, UNKNOWN if unrecognized."""
    try:
        command = Command(name)
    except ValueError:
        return Command.UNKNOWN
    return command


def rewrite_args(argv: list[str]) -> list[str]:
    """Command line for the detached child of a START or RESTART.

    The child must only start the worker: a RESTART invocation re-executed
    as-is would stop the freshly recorded child, so its command word is
    rewritten to START. Only the last command word is rewritten; option
    values appearing before it are left alone. Options following it belong
    to RESTART (such as --timeout) and are dropped, since START takes none.
    """
    args = list(argv)
    for i in range(len(args) - 1, -1, -1):
        if parse_command(args[i]) is Command.RESTART:
            return [*args[:i], Command.START.value]
    return args
