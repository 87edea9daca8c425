"""PID file doubling as an advisory lock.

The PID file records the pid of the supervised worker. Every read and
write of the record is guarded by an flock(2) advisory lock on the file
itself: shared for reads, exclusive for writes. The lock is cooperative,
process-scoped and not reentrant.

Liveness is derived from the record: a pid is read under the shared lock,
then probed with process_exists() outside the lock. A worker exiting in
between is reported as not alive.
"""

from __future__ import annotations

__all__ = [
    "LockablePidFile",
    "ProcessState",
    "process_exists",
]

import fcntl
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from types import TracebackType

from app_launcher.exceptions import LockError, PathResolutionError
from app_launcher.log_config import log_event
from app_launcher.models import LauncherEvent
from app_launcher.paths import make_dirs

# Upper bound on the record size; a pid never needs more than a few bytes
_MAX_RECORD_BYTES = 4096


class ProcessState(str, Enum):
    """State of the supervised worker as derived from the PID file."""

    NO_RECORD = "no_record"
    RECORDED_BUT_DEAD = "recorded_but_dead"
    RECORDED_AND_ALIVE = "recorded_and_alive"


def process_exists(pid: int) -> bool:
    """Probe whether a process exists by sending it signal 0.

    Any error, including EPERM for a process owned by another user, is
    reported as not existing.
    """
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def _parse_pid(data: bytes) -> int | None:
    text = data.strip()
    # bytes.isdigit() only accepts ASCII digits
    if not text.isdigit():
        return None
    pid = int(text)
    return pid if pid > 0 else None


class LockablePidFile:
    """Handle on a PID file and its advisory lock.

    Opening the handle creates the file (and its directory) when missing.
    The handle is passed explicitly to every lifecycle operation.

    Attributes:
        path: Location of the PID file.

    Example:
        with LockablePidFile(Path("var/run/launcher.pid")) as pid_file:
            if pid_file.alive():
                print(pid_file.read_pid())
    """

    def __init__(
        self,
        path: Path,
        process_exists: Callable[[int], bool] = process_exists,
    ) -> None:
        self.path = Path(path)
        self._process_exists = process_exists
        self._held = False

        make_dirs(self.path.parent)
        try:
            self._fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise PathResolutionError(
                f"failed to open the pid file {self.path}: {e.strerror or e}", str(self.path)
            ) from e

    # -------------------------------------------------------------------------
    # Resource handling
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the file, which also drops any lock still held."""
        if self._fd >= 0:
            os.close(self._fd)
            self._fd = -1
            self._held = False

    def __enter__(self) -> LockablePidFile:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Locking
    # -------------------------------------------------------------------------

    @property
    def held(self) -> bool:
        """Whether this handle currently holds the exclusive lock."""
        return self._held

    def _flock(self, operation: int, action: str) -> None:
        try:
            fcntl.flock(self._fd, operation)
        except OSError as e:
            raise LockError(f"failed to {action} the lock on {self.path}: {e.strerror or e}") from e

    def acquire_lock(self) -> None:
        """Block until the exclusive lock is held.

        Raises:
            LockError: If the lock is already held by this handle or flock fails.
        """
        if self._held:
            raise LockError(f"the lock on {self.path} is already held")
        self._flock(fcntl.LOCK_EX, "acquire")
        self._held = True

    def release_lock(self) -> None:
        """Release the exclusive lock if held."""
        if not self._held:
            return
        self._held = False
        self._flock(fcntl.LOCK_UN, "release")

    @contextmanager
    def _shared(self) -> Iterator[None]:
        """Shared lock for one read, unless the exclusive lock is already held."""
        if self._held:
            yield
            return
        self._flock(fcntl.LOCK_SH, "acquire")
        try:
            yield
        finally:
            self._flock(fcntl.LOCK_UN, "release")

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Exclusive lock for one write, released afterwards.

        An eager hold taken with acquire_lock() is used as-is and ends here.
        """
        if not self._held:
            self.acquire_lock()
        try:
            yield
        finally:
            self.release_lock()

    # -------------------------------------------------------------------------
    # Record
    # -------------------------------------------------------------------------

    def read_pid(self) -> int | None:
        """Read the recorded pid.

        Returns:
            The pid, or None when the record is empty, unparsable or not a
            positive integer.
        """
        with self._shared():
            try:
                data = os.pread(self._fd, _MAX_RECORD_BYTES, 0)
            except OSError as e:
                raise PathResolutionError(
                    f"failed to read the pid file {self.path}: {e.strerror or e}", str(self.path)
                ) from e
        return _parse_pid(data)

    def _truncate(self) -> None:
        os.ftruncate(self._fd, 0)
        os.fsync(self._fd)

    def write_pid(self, pid: int) -> None:
        """Replace the record with pid and release the lock.

        Clearing and writing happen under a single exclusive hold, so a
        reader never observes the cleared record in between.

        Raises:
            ValueError: If pid is not positive.
            LockError: If the lock cannot be taken or released.
            PathResolutionError: If the file cannot be written.
        """
        if pid <= 0:
            raise ValueError(f"pid must be positive, got {pid}")

        with self._exclusive():
            try:
                self._truncate()
                os.pwrite(self._fd, f"{pid}\n".encode("ascii"), 0)
                os.fsync(self._fd)
            except OSError as e:
                raise PathResolutionError(
                    f"failed to write the pid file {self.path}: {e.strerror or e}", str(self.path)
                ) from e

        log_event(
            logging.DEBUG,
            LauncherEvent(event="pid_written", message=f"Recorded pid {pid} in {self.path}", pid=pid, path=str(self.path)),
        )

    def clear_pid(self, expected: int | None = None) -> bool:
        """Empty the record.

        Args:
            expected: Only clear when the record still holds this pid. Guards
                against erasing a worker recorded by a concurrent START.

        Returns:
            True if the record was cleared.
        """
        with self._exclusive():
            if expected is not None and self.read_pid() != expected:
                return False
            try:
                self._truncate()
            except OSError as e:
                raise PathResolutionError(
                    f"failed to clear the pid file {self.path}: {e.strerror or e}", str(self.path)
                ) from e

        log_event(
            logging.DEBUG,
            LauncherEvent(event="pid_cleared", message=f"Cleared {self.path}", pid=expected, path=str(self.path)),
        )
        return True

    # -------------------------------------------------------------------------
    # Liveness
    # -------------------------------------------------------------------------

    def alive(self) -> bool:
        """Whether the recorded pid belongs to a running process."""
        pid = self.read_pid()
        if pid is None:
            return False
        return self._process_exists(pid)

    def state(self) -> ProcessState:
        """Derive the worker state from the record and a liveness probe."""
        pid = self.read_pid()
        if pid is None:
            return ProcessState.NO_RECORD
        if self._process_exists(pid):
            return ProcessState.RECORDED_AND_ALIVE
        return ProcessState.RECORDED_BUT_DEAD
