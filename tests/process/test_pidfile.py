"""Unit tests for the PID file and its advisory lock.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from app_launcher.exceptions import LockError
from app_launcher.process import LockablePidFile, ProcessState, process_exists

# Far above any default pid_max
UNUSED_PID = 2**30


@pytest.fixture
def pid_path(tmp_path: Path) -> Path:
    """Location of a PID file whose directory does not exist yet."""
    return tmp_path / "var" / "run" / "launcher.pid"


@pytest.fixture
def pid_file(pid_path: Path) -> Iterator[LockablePidFile]:
    """Open a PID file handle backed by the real liveness probe."""
    with LockablePidFile(pid_path) as handle:
        yield handle


class TestProcessExists:
    """Tests for the signal 0 liveness probe."""

    def test_own_pid_exists(self) -> None:
        """Given the caller's pid, returns True."""
        # Act & Assert
        assert process_exists(os.getpid()) is True

    def test_unused_pid_does_not_exist(self) -> None:
        """Given a pid with no process, returns False."""
        # Act & Assert
        assert process_exists(UNUSED_PID) is False


class TestOpen:
    """Tests for opening the handle."""

    def test_creates_file_and_directories(self, pid_file: LockablePidFile, pid_path: Path) -> None:
        """Given a missing file and directory, creates both empty."""
        # Assert
        assert pid_path.is_file()
        assert pid_path.read_bytes() == b""

    def test_close_is_idempotent(self, pid_path: Path) -> None:
        """Given a closed handle, closing again does nothing."""
        # Arrange
        handle = LockablePidFile(pid_path)
        handle.close()

        # Act & Assert
        handle.close()


class TestRecord:
    """Tests for reading and writing the pid record."""

    def test_never_written_file_has_no_pid(self, pid_file: LockablePidFile) -> None:
        """Given an empty file, read_pid returns None."""
        # Act & Assert
        assert pid_file.read_pid() is None

    def test_write_then_read(self, pid_file: LockablePidFile, pid_path: Path) -> None:
        """Given a written pid, it is read back and stored as digits plus newline."""
        # Act
        pid_file.write_pid(4242)

        # Assert
        assert pid_file.read_pid() == 4242
        assert pid_path.read_bytes() == b"4242\n"

    def test_write_replaces_longer_record(self, pid_file: LockablePidFile, pid_path: Path) -> None:
        """Given a longer previous record, no stale digits remain."""
        # Arrange
        pid_file.write_pid(123456)

        # Act
        pid_file.write_pid(7)

        # Assert
        assert pid_path.read_bytes() == b"7\n"

    @pytest.mark.parametrize("content", [b"abc\n", b"-5\n", b"0\n", b"12 34\n", b"\xd9\xa3\n"])
    def test_invalid_content_has_no_pid(self, pid_path: Path, content: bytes) -> None:
        """Given content that is not a positive decimal, read_pid returns None."""
        # Arrange
        pid_path.parent.mkdir(parents=True)
        pid_path.write_bytes(content)

        # Act
        with LockablePidFile(pid_path) as pid_file:
            result = pid_file.read_pid()

        # Assert
        assert result is None

    def test_non_positive_pid_is_rejected(self, pid_file: LockablePidFile) -> None:
        """Given a pid of zero, write_pid raises ValueError."""
        # Act & Assert
        with pytest.raises(ValueError):
            pid_file.write_pid(0)

    def test_clear(self, pid_file: LockablePidFile, pid_path: Path) -> None:
        """Given a recorded pid, clear_pid empties the file."""
        # Arrange
        pid_file.write_pid(4242)

        # Act
        cleared = pid_file.clear_pid()

        # Assert
        assert cleared is True
        assert pid_path.read_bytes() == b""

    def test_clear_keeps_other_pid(self, pid_file: LockablePidFile) -> None:
        """Given a different recorded pid, clear_pid(expected) leaves it alone."""
        # Arrange
        pid_file.write_pid(4242)

        # Act
        cleared = pid_file.clear_pid(expected=1111)

        # Assert
        assert cleared is False
        assert pid_file.read_pid() == 4242


class TestLock:
    """Tests for the exclusive lock."""

    def test_write_releases_eager_hold(self, pid_file: LockablePidFile) -> None:
        """Given an eagerly acquired lock, write_pid ends the hold."""
        # Arrange
        pid_file.acquire_lock()

        # Act
        pid_file.write_pid(4242)

        # Assert
        assert pid_file.held is False

    def test_lock_is_not_reentrant(self, pid_file: LockablePidFile) -> None:
        """Given a held lock, acquiring it again raises LockError."""
        # Arrange
        pid_file.acquire_lock()

        # Act & Assert
        with pytest.raises(LockError):
            pid_file.acquire_lock()

    def test_reads_while_holding_lock(self, pid_file: LockablePidFile) -> None:
        """Given the exclusive lock, reads do not block on a shared lock."""
        # Arrange
        pid_file.write_pid(4242)
        pid_file.acquire_lock()

        # Act
        result = pid_file.read_pid()

        # Assert
        assert result == 4242
        assert pid_file.held is True

    def test_exclusive_hold_excludes_other_handles(self, pid_file: LockablePidFile, pid_path: Path) -> None:
        """Given a held lock, another open file description cannot lock the file."""
        # Arrange
        pid_file.acquire_lock()
        fd = os.open(pid_path, os.O_RDONLY)

        # Act & Assert
        try:
            with pytest.raises(BlockingIOError):
                fcntl.flock(fd, fcntl.LOCK_SH | fcntl.LOCK_NB)
            pid_file.release_lock()
            fcntl.flock(fd, fcntl.LOCK_SH | fcntl.LOCK_NB)
        finally:
            os.close(fd)


class TestLiveness:
    """Tests for alive() and state()."""

    def test_own_pid_is_alive(self, pid_file: LockablePidFile) -> None:
        """Given the caller's own pid recorded, alive() is True."""
        # Arrange
        pid_file.write_pid(os.getpid())

        # Act & Assert
        assert pid_file.alive() is True
        assert pid_file.state() is ProcessState.RECORDED_AND_ALIVE

    def test_pid_without_process_is_not_alive(self, pid_path: Path) -> None:
        """Given a recorded pid with no matching process, alive() is False."""
        # Arrange
        with LockablePidFile(pid_path, process_exists=lambda pid: False) as pid_file:
            pid_file.write_pid(4242)

            # Act & Assert
            assert pid_file.alive() is False
            assert pid_file.state() is ProcessState.RECORDED_BUT_DEAD

    def test_empty_record_is_not_alive(self, pid_path: Path) -> None:
        """Given an empty file, no probe is made and alive() is False."""
        # Arrange
        probed: list[int] = []

        def probe(pid: int) -> bool:
            probed.append(pid)
            return True

        with LockablePidFile(pid_path, process_exists=probe) as pid_file:
            # Act & Assert
            assert pid_file.alive() is False
            assert pid_file.state() is ProcessState.NO_RECORD
        assert probed == []
