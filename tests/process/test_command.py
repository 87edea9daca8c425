"""Unit tests for lifecycle command names and argument rewriting."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from app_launcher.cli import cli
from app_launcher.cli.commands import lifecycle
from app_launcher.process import Command, parse_command, rewrite_args


class TestParseCommand:
    """Tests for parse_command()."""

    @pytest.mark.parametrize("command", [c for c in Command if c is not Command.UNKNOWN])
    def test_known_names(self, command: Command) -> None:
        """Given a command word, returns its Command."""
        # Act & Assert
        assert parse_command(command.value) is command

    @pytest.mark.parametrize("name", ["", "begin", "START", "--start"])
    def test_unknown_names(self, name: str) -> None:
        """Given anything else, returns UNKNOWN."""
        # Act & Assert
        assert parse_command(name) is Command.UNKNOWN


class TestRewriteArgs:
    """Tests for the detached child's command line."""

    def test_restart_becomes_start(self) -> None:
        """Given a restart invocation, the child is told to start."""
        # Act
        result = rewrite_args(["/opt/app/bin/launcher", "-v", "restart"])

        # Assert
        assert result == ["/opt/app/bin/launcher", "-v", "start"]

    def test_only_last_restart_is_rewritten(self) -> None:
        """Given 'restart' as an earlier option value, leaves it alone."""
        # Act
        result = rewrite_args(["launcher", "--data-dir", "restart", "restart"])

        # Assert
        assert result == ["launcher", "--data-dir", "restart", "start"]

    def test_restart_options_are_dropped(self) -> None:
        """Given restart options after the command word, the child gets none."""
        # Act
        result = rewrite_args(["launcher", "-Dkey=value", "restart", "--timeout", "5"])

        # Assert
        assert result == ["launcher", "-Dkey=value", "start"]

    def test_start_is_unchanged(self) -> None:
        """Given a start invocation, returns an equal copy."""
        # Arrange
        argv = ["launcher", "start"]

        # Act
        result = rewrite_args(argv)

        # Assert
        assert result == argv
        assert result is not argv

    def test_rewritten_restart_is_accepted_by_cli(
        self,
        install_tree: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Given restart --timeout, the child's command line parses as a start."""
        # Arrange
        dispatched: list[Command] = []

        class RecordingSupervisor:
            def __init__(self, report: object = None) -> None:
                pass

            def dispatch(self, command: Command, *args: object) -> None:
                dispatched.append(command)

        monkeypatch.setattr(lifecycle, "Supervisor", RecordingSupervisor)
        argv = ["launcher", "--install-path", str(install_tree), "restart", "--timeout", "5"]

        # Act
        result = CliRunner().invoke(cli, rewrite_args(argv)[1:])

        # Assert
        assert result.exit_code == 0, result.output
        assert dispatched == [Command.START]
