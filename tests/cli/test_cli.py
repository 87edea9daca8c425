"""Unit tests for CLI commands.

Tests CLI behavior using Click's CliRunner for isolated, fast testing.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from app_launcher import __version__
from app_launcher.cli import cli
from app_launcher.config import LauncherOptions
from app_launcher.constants import LSB_NOT_RUNNING
from app_launcher.process import LockablePidFile


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


class TestVersion:
    """Tests for --version flag."""

    def test_version_flag_shows_version(self, runner: CliRunner) -> None:
        """Given --version flag, returns version string."""
        # Act
        result = runner.invoke(cli, ["--version"])

        # Assert
        assert result.exit_code == 0
        assert f"app-launcher {__version__}" in result.output


class TestHelp:
    """Tests for help output."""

    def test_root_help_shows_commands(self, runner: CliRunner) -> None:
        """Given --help, shows available commands."""
        # Act
        result = runner.invoke(cli, ["--help"])

        # Assert
        assert result.exit_code == 0
        for command in ("run", "start", "stop", "restart", "kill", "status"):
            assert command in result.output
        assert "Exit Status:" in result.output

    def test_help_command_shows_root_help(self, runner: CliRunner) -> None:
        """Given the help command, shows the same usage as --help."""
        # Act
        result = runner.invoke(cli, ["help"])

        # Assert
        assert result.exit_code == 0
        assert "Commands:" in result.output
        assert "Default Locations:" in result.output

    def test_no_command_shows_help(self, runner: CliRunner) -> None:
        """Given no command, shows help."""
        # Act
        result = runner.invoke(cli, [])

        # Assert
        assert result.exit_code == 0
        assert "Commands:" in result.output

    def test_unknown_command_is_usage_error(self, runner: CliRunner) -> None:
        """Given an unknown command, exits with the usage status."""
        # Act
        result = runner.invoke(cli, ["begin"])

        # Assert
        assert result.exit_code == 2

    def test_negative_timeout_is_usage_error(self, runner: CliRunner, install_tree: Path) -> None:
        """Given a negative --timeout, exits with the usage status."""
        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), "stop", "--timeout", "-1"])

        # Assert
        assert result.exit_code == 2


class TestStatus:
    """Tests for the status command."""

    def test_never_written_pid_file_is_not_running(self, runner: CliRunner, install_tree: Path) -> None:
        """Given a PID file that was never written, exits with the LSB not-running code."""
        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), "status"])

        # Assert
        assert result.exit_code == LSB_NOT_RUNNING
        assert "INFO: Not running" in result.output

    def test_running_worker(self, runner: CliRunner, install_tree: Path, options: LauncherOptions) -> None:
        """Given a live pid recorded, reports it and exits 0."""
        # Arrange
        with LockablePidFile(options.pid_file) as pid_file:
            pid_file.write_pid(os.getpid())

        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), "status"])

        # Assert
        assert result.exit_code == 0
        assert f"INFO: Running as {os.getpid()}" in result.output

    def test_install_path_from_environment(self, runner: CliRunner, install_tree: Path) -> None:
        """Given APP_LAUNCHER_HOME, uses it as the install path."""
        # Act
        result = runner.invoke(cli, ["status"], env={"APP_LAUNCHER_HOME": str(install_tree)})

        # Assert
        assert result.exit_code == LSB_NOT_RUNNING

    def test_custom_pid_file(self, runner: CliRunner, install_tree: Path, tmp_path: Path) -> None:
        """Given --pid-file, creates and reads that file."""
        # Arrange
        pid_path = tmp_path / "custom" / "app.pid"

        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), "--pid-file", str(pid_path), "status"])

        # Assert
        assert result.exit_code == LSB_NOT_RUNNING
        assert pid_path.is_file()

    def test_verbose_prints_options(self, runner: CliRunner, install_tree: Path) -> None:
        """Given --verbose, prints the resolved options first."""
        # Act
        result = runner.invoke(cli, ["--verbose", "--install-path", str(install_tree), "status"])

        # Assert
        assert result.exit_code == LSB_NOT_RUNNING
        assert "pid_file" in result.output

    def test_secrets_config_option(self, runner: CliRunner, install_tree: Path) -> None:
        """Given --secrets-config, resolves it and shows it with --verbose."""
        # Arrange
        secrets = install_tree / "secrets.toml"
        secrets.write_text("[secrets]\n")

        # Act
        result = runner.invoke(
            cli, ["-v", "--install-path", str(install_tree), "--secrets-config", str(secrets), "status"]
        )

        # Assert
        assert result.exit_code == LSB_NOT_RUNNING
        assert f"secrets_config_path    = {secrets}" in result.output


class TestStopAndKill:
    """Tests for the stop and kill commands."""

    @pytest.mark.parametrize("command", ["stop", "kill"])
    def test_not_running_is_success(self, runner: CliRunner, install_tree: Path, command: str) -> None:
        """Given no worker, reports "Not running" and exits 0."""
        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), command])

        # Assert
        assert result.exit_code == 0
        assert "INFO: Not running" in result.output

    def test_stop_with_timeout(self, runner: CliRunner, install_tree: Path) -> None:
        """Given --timeout and no worker, still exits 0."""
        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), "stop", "--timeout", "0.5"])

        # Assert
        assert result.exit_code == 0


class TestErrors:
    """Tests for fatal error reporting."""

    def test_missing_launcher_config(self, runner: CliRunner, install_tree: Path) -> None:
        """Given no launcher.properties, prints ERROR and exits 1."""
        # Arrange
        (install_tree / "bin" / "launcher.properties").unlink()

        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), "status"])

        # Assert
        assert result.exit_code == 1
        assert "ERROR: launcher config file is missing" in result.output

    def test_reserved_system_property(self, runner: CliRunner, install_tree: Path) -> None:
        """Given -Dconfig=..., prints ERROR and exits 1."""
        # Act
        result = runner.invoke(cli, ["--install-path", str(install_tree), "-Dconfig=/tmp/c", "status"])

        # Assert
        assert result.exit_code == 1
        assert "use --config" in result.output

