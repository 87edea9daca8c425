"""Detach-and-reexec daemonization.

A START invocation turns itself into a background worker in two halves:

Parent half (the operator's invocation):
    1. Take the PID file lock exclusively
    2. detach(): spawn a child in a new session re-running the same command
       line, with RESTART rewritten to START
    3. Record the child's pid, which releases the lock

Child half (the re-run command line):
    1. is_detached_child(): finds its own pid already recorded
    2. redirect_output(): stdout/stderr to the append-only launcher log
    3. exec_worker(): replace the process image with the worker, keeping the pid

The self-recognition check is load-bearing: nothing else tells the child
apart from an operator's START. It holds because the child's shared-lock
read blocks until the parent has recorded the child's pid and released the
exclusive lock, so the child can never observe the record before its own
pid is in it.
"""

from __future__ import annotations

__all__ = [
    "current_command_line",
    "detach",
    "exec_worker",
    "is_detached_child",
    "redirect_output",
    "redirect_stdin_to_devnull",
]

import logging
import os
import subprocess
import sys
from pathlib import Path

from app_launcher.exceptions import PathResolutionError, ProcessControlError
from app_launcher.log_config import log_event
from app_launcher.models import LauncherEvent, WorkerExecution

from .pidfile import LockablePidFile


def current_command_line() -> list[str]:
    """The interpreter and arguments this invocation was started with."""
    return [sys.executable, *sys.orig_argv[1:]]


def detach(command: list[str], cwd: str) -> int:
    """Spawn command as a detached child process.

    The child runs in a new session with stdin on the null device and
    inherits stdout/stderr until it redirects them to the launcher log.
    It starts in cwd so relative paths on its command line resolve as they
    did for the parent.

    Args:
        command: Argument vector of the child.
        cwd: Working directory of the child.

    Returns:
        The child's pid.

    Raises:
        ProcessControlError: If the child cannot be spawned.
    """
    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            cwd=cwd,
            start_new_session=True,
        )
    except OSError as e:
        log_event(
            logging.DEBUG,
            LauncherEvent(
                event="spawn_failed",
                message=f"Spawning {command[0]} failed",
                error_type=type(e).__name__,
                error_message=str(e),
            ),
        )
        raise ProcessControlError(f"failed to fork the current process: {e}") from e

    log_event(
        logging.DEBUG,
        LauncherEvent(
            event="child_spawned",
            message=f"Spawned detached child {process.pid}: {' '.join(command)}",
            pid=process.pid,
        ),
    )
    return process.pid


def is_detached_child(pid_file: LockablePidFile, own_pid: int) -> bool:
    """Whether this invocation is the child spawned by a START.

    Args:
        pid_file: The PID file handle.
        own_pid: Pid of this process.

    Returns:
        True if the record holds own_pid and it is alive, False if no live
        worker is recorded.

    Raises:
        ProcessControlError: If another live process is recorded.
    """
    if not pid_file.alive():
        return False
    pid = pid_file.read_pid()
    if pid is None:
        return False
    if pid == own_pid:
        return True
    raise ProcessControlError(f"already running as {pid}")


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError):
            pass  # stream already closed or broken, nothing to preserve


def redirect_output(path: Path) -> None:
    """Point stdout and stderr at the end of the launcher log.

    Raises:
        PathResolutionError: If the log cannot be opened for appending.
        ProcessControlError: If the file descriptors cannot be duplicated.
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
    except OSError as e:
        raise PathResolutionError(
            f"failed to open the launcher log {path} for appending: {e.strerror or e}", str(path)
        ) from e

    _flush_std_streams()
    try:
        os.dup2(fd, 1)
        os.dup2(fd, 2)
    except OSError as e:
        raise ProcessControlError(
            f"failed to redirect the standard output and error to the launcher log: {e.strerror or e}"
        ) from e
    finally:
        os.close(fd)


def redirect_stdin_to_devnull() -> None:
    """Replace stdin with the null device.

    Raises:
        ProcessControlError: If the null device cannot be opened or duplicated.
    """
    try:
        fd = os.open(os.devnull, os.O_RDONLY)
    except OSError as e:
        raise ProcessControlError(f"failed to open {os.devnull}: {e.strerror or e}") from e
    try:
        os.dup2(fd, 0)
    except OSError as e:
        raise ProcessControlError(f"failed to redirect the standard input to {os.devnull}: {e.strerror or e}") from e
    finally:
        os.close(fd)


def exec_worker(execution: WorkerExecution) -> None:
    """Replace the current process image with the worker.

    The pid is preserved, which is why it is recorded before this call.
    Only returns by raising.

    Raises:
        ProcessControlError: If the program cannot be executed.
    """
    _flush_std_streams()
    program = execution.args[0]
    try:
        os.execvpe(program, execution.args, execution.env)
    except OSError as e:
        raise ProcessControlError(f"failed to exec {program}: {e.strerror or e}") from e
