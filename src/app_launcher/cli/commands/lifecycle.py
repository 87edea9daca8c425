"""Lifecycle commands for app-launcher CLI.

Provides one command per lifecycle action:
- run: Start the worker in the foreground
- start: Start the worker as a daemon
- stop: Stop the worker gracefully
- restart: Stop the worker if running, then start it as a daemon
- kill: Stop the worker forcefully
- status: Report whether the worker is running
- help: Show usage
"""

from __future__ import annotations

__all__ = [
    "help_command",
    "kill",
    "restart",
    "run",
    "start",
    "status",
    "stop",
]

import sys
from typing import TYPE_CHECKING

import click

from app_launcher.config import resolve_options
from app_launcher.constants import EXIT_ERROR, LSB_NOT_RUNNING
from app_launcher.exceptions import LauncherError, NotRunningError
from app_launcher.process import Command, LockablePidFile, Supervisor

from ..styling import echo_error, echo_info

if TYPE_CHECKING:
    from ..main import CliState

_timeout_option = click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds to wait for the worker to exit (default: wait forever)",
)


def _execute(ctx: click.Context, command: Command, timeout: float | None = None) -> None:
    """Resolve the options and run one lifecycle command.

    Any launcher failure is reported once as "ERROR: message" and exits 1.
    NotRunningError reaching this point (STATUS only) exits with the LSB
    "not running" status.
    """
    state: CliState = ctx.obj
    try:
        options = resolve_options(state.install_path, state.flags)
        if options.verbose:
            for line in options.describe().splitlines():
                echo_info(line)

        with LockablePidFile(options.pid_file) as pid_file:
            Supervisor(report=echo_info).dispatch(command, pid_file, options, timeout)
    except NotRunningError as e:
        echo_info(str(e))
        sys.exit(LSB_NOT_RUNNING)
    except LauncherError as e:
        echo_error(str(e))
        sys.exit(EXIT_ERROR)


@click.command("run")
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the worker in the foreground.

    The launcher records its own pid and is replaced by the worker.
    """
    _execute(ctx, Command.RUN)


@click.command("start")
@click.pass_context
def start(ctx: click.Context) -> None:
    """Start the worker as a daemon.

    Output of the worker is appended to the launcher log.
    """
    _execute(ctx, Command.START)


@click.command("stop")
@_timeout_option
@click.pass_context
def stop(ctx: click.Context, timeout: float | None) -> None:
    """Stop the worker gracefully (SIGTERM)."""
    _execute(ctx, Command.STOP, timeout)


@click.command("restart")
@_timeout_option
@click.pass_context
def restart(ctx: click.Context, timeout: float | None) -> None:
    """Stop the worker if running, then start it as a daemon."""
    _execute(ctx, Command.RESTART, timeout)


@click.command("kill")
@_timeout_option
@click.pass_context
def kill(ctx: click.Context, timeout: float | None) -> None:
    """Stop the worker forcefully (SIGKILL)."""
    _execute(ctx, Command.KILL, timeout)


@click.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show whether the worker is running.

    Exits with status 3 when it is not.
    """
    _execute(ctx, Command.STATUS)


@click.command("help")
@click.pass_context
def help_command(ctx: click.Context) -> None:
    """Show this message and exit."""
    parent = ctx.parent or ctx
    click.echo(parent.get_help())
