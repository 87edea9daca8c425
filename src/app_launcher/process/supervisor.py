"""Worker lifecycle supervisor.

Implements the lifecycle commands on top of the PID file lock:

    run      Start the worker in the foreground (the launcher becomes the worker)
    start    Start the worker detached from the terminal
    stop     Send SIGTERM and wait for the worker to exit
    kill     Send SIGKILL and wait for the worker to exit
    restart  stop (tolerating "not running"), then start
    status   Report the running pid, or raise NotRunningError

The PID file handle is passed into every operation. OS primitives are
grouped in ProcessControl so tests can replace them.
"""

from __future__ import annotations

__all__ = [
    "ProcessControl",
    "Supervisor",
]

import logging
import os
import signal
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from app_launcher.config import LauncherOptions
from app_launcher.constants import POLL_INTERVAL_SECONDS
from app_launcher.exceptions import (
    LauncherError,
    NotRunningError,
    PathResolutionError,
    ProcessControlError,
)
from app_launcher.execution import build_execution
from app_launcher.log_config import configure_daemon_logging, log_event
from app_launcher.models import LauncherEvent, WorkerExecution
from app_launcher.paths import create_app_symlinks, make_dirs
from app_launcher.utils.polling import wait_for_condition

from .command import Command, rewrite_args
from .daemon import (
    current_command_line,
    detach,
    exec_worker,
    is_detached_child,
    redirect_output,
    redirect_stdin_to_devnull,
)
from .pidfile import LockablePidFile


@dataclass
class ProcessControl:
    """OS process-control primitives used by the supervisor."""

    getpid: Callable[[], int] = os.getpid
    send_signal: Callable[[int, int], None] = os.kill
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic
    command_line: Callable[[], list[str]] = current_command_line
    detach: Callable[[list[str], str], int] = detach
    redirect_output: Callable[[Path], None] = redirect_output
    redirect_stdin: Callable[[], None] = redirect_stdin_to_devnull
    exec_worker: Callable[[WorkerExecution], None] = exec_worker


class Supervisor:
    """Runs one lifecycle command per launcher invocation.

    Args:
        control: OS primitives; defaults to the real ones.
        report: Receives operator-facing messages such as "Started as 42".
    """

    def __init__(
        self,
        control: ProcessControl | None = None,
        report: Callable[[str], None] = print,
    ) -> None:
        self._control = control or ProcessControl()
        self._report = report

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(
        self,
        command: Command,
        pid_file: LockablePidFile,
        options: LauncherOptions,
        timeout: float | None = None,
    ) -> None:
        """Execute a lifecycle command.

        Raises:
            NotRunningError: For STATUS when no live worker is recorded.
            LauncherError: For any fatal failure.
        """
        log_event(
            logging.DEBUG,
            LauncherEvent(event="command_started", message=f"Executing {command.value}", command=command.value),
        )
        if command is Command.RUN:
            self.run(pid_file, options)
        elif command is Command.START:
            self.start(pid_file, options)
        elif command is Command.STOP:
            self.stop(pid_file, timeout)
        elif command is Command.KILL:
            self.kill(pid_file, timeout)
        elif command is Command.RESTART:
            self.restart(pid_file, options, timeout)
        elif command is Command.STATUS:
            self.status(pid_file)
        else:
            raise ProcessControlError(f"unrecognized command: {command.value}")

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def run(self, pid_file: LockablePidFile, options: LauncherOptions) -> None:
        """Record our own pid and become the worker in the foreground."""
        own_pid = self._control.getpid()
        self._ensure_not_running_elsewhere(pid_file, own_pid)
        execution = build_execution(options, daemon=False)

        create_app_symlinks(options)
        make_dirs(options.data_dir)
        self._chdir(options.data_dir, "the data dir")

        self._lock_vacant(pid_file, own_pid)
        pid_file.write_pid(own_pid)

        self._control.redirect_stdin()
        self._control.exec_worker(execution)

    def start(self, pid_file: LockablePidFile, options: LauncherOptions) -> None:
        """Start the worker detached, or become it if we are the detached child."""
        own_pid = self._control.getpid()
        child = is_detached_child(pid_file, own_pid)
        execution = build_execution(options, daemon=True)

        create_app_symlinks(options)
        make_dirs(options.launcher_log.parent)
        make_dirs(options.data_dir)
        try:
            cwd = os.getcwd()
        except OSError as e:
            raise PathResolutionError(f"failed to detect the current working dir: {e.strerror or e}") from e
        self._chdir(options.data_dir, "the data dir")

        if not child:
            pid = self._spawn_child(pid_file, own_pid, cwd)
            self._report(f"Started as {pid}")
            return

        self._control.redirect_output(options.launcher_log)
        configure_daemon_logging()
        log_event(
            logging.INFO,
            LauncherEvent(
                event="worker_exec",
                message=f"Starting worker as {own_pid}: {' '.join(execution.args)}",
                command=Command.START.value,
                pid=own_pid,
            ),
        )
        self._control.exec_worker(execution)

    def stop(self, pid_file: LockablePidFile, timeout: float | None = None) -> None:
        """Terminate the worker gracefully; "Not running" is not an error."""
        try:
            self._terminate(pid_file, signal.SIGTERM, "Stopped", timeout)
        except NotRunningError as e:
            self._report(str(e))

    def kill(self, pid_file: LockablePidFile, timeout: float | None = None) -> None:
        """Terminate the worker forcefully; "Not running" is not an error."""
        try:
            self._terminate(pid_file, signal.SIGKILL, "Killed", timeout)
        except NotRunningError as e:
            self._report(str(e))

    def restart(
        self,
        pid_file: LockablePidFile,
        options: LauncherOptions,
        timeout: float | None = None,
    ) -> None:
        """Stop the worker if running, then start it detached."""
        self.stop(pid_file, timeout)
        self.start(pid_file, options)

    def status(self, pid_file: LockablePidFile) -> int:
        """Report the running worker.

        Returns:
            The worker pid.

        Raises:
            NotRunningError: If no live worker is recorded.
        """
        if not pid_file.alive():
            raise NotRunningError()
        pid = pid_file.read_pid()
        if pid is None:
            raise NotRunningError()
        self._report(f"Running as {pid}")
        return pid

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _ensure_not_running_elsewhere(self, pid_file: LockablePidFile, own_pid: int) -> None:
        if pid_file.alive():
            pid = pid_file.read_pid()
            if pid is not None and pid != own_pid:
                raise ProcessControlError(f"already running as {pid}")

    def _lock_vacant(self, pid_file: LockablePidFile, own_pid: int) -> None:
        """Take the exclusive lock and re-check the record under it.

        Two invocations may both pass the unlocked check; only the first to
        take the lock finds the record vacant. The loser fails here instead
        of starting a second worker.
        """
        pid_file.acquire_lock()
        try:
            self._ensure_not_running_elsewhere(pid_file, own_pid)
        except LauncherError:
            pid_file.release_lock()
            raise

    def _spawn_child(self, pid_file: LockablePidFile, own_pid: int, cwd: str) -> int:
        # The exclusive lock is held from before the spawn until the child's
        # pid is recorded; the child blocks on it in is_detached_child()
        self._lock_vacant(pid_file, own_pid)
        try:
            command = rewrite_args(self._control.command_line())
            pid = self._control.detach(command, cwd)
        except LauncherError:
            pid_file.release_lock()
            raise
        pid_file.write_pid(pid)
        return pid

    def _terminate(
        self,
        pid_file: LockablePidFile,
        sig: signal.Signals,
        verb: str,
        timeout: float | None,
    ) -> None:
        if not pid_file.alive():
            raise NotRunningError()
        pid = pid_file.read_pid()
        if pid is None:
            raise NotRunningError()

        try:
            self._control.send_signal(pid, sig)
        except ProcessLookupError:
            pass  # exited on its own; the poll below sees it gone
        except OSError as e:
            log_event(
                logging.DEBUG,
                LauncherEvent(
                    event="signal_failed",
                    message=f"Sending {sig.name} to {pid} failed",
                    pid=pid,
                    signal=sig.name,
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
            raise ProcessControlError(f"signaling pid {pid} failed due to: {e.strerror or e}") from e

        log_event(
            logging.DEBUG,
            LauncherEvent(event="signal_sent", message=f"Sent {sig.name} to {pid}", pid=pid, signal=sig.name),
        )

        exited = wait_for_condition(
            lambda: not pid_file.alive(),
            timeout,
            POLL_INTERVAL_SECONDS,
            sleep=self._control.sleep,
            clock=self._control.clock,
        )
        if not exited:
            raise ProcessControlError(f"pid {pid} did not exit within {timeout:g} seconds after {sig.name}")

        pid_file.clear_pid(expected=pid)
        self._report(f"{verb} {pid}")

    def _chdir(self, path: Path, what: str) -> None:
        try:
            os.chdir(path)
        except OSError as e:
            raise PathResolutionError(
                f"failed to change working dir to {what} {path}: {e.strerror or e}", str(path)
            ) from e

