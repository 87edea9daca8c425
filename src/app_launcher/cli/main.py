"""Main CLI entry point for app-launcher.

Defines the CLI group, its global options and registers the lifecycle
commands.

Commands:
    run      - Start the worker in the foreground
    start    - Start the worker as a daemon
    stop     - Stop the worker gracefully (SIGTERM)
    restart  - Stop the worker if running, then start it
    kill     - Stop the worker forcefully (SIGKILL)
    status   - Show whether the worker is running
    help     - Show this help

Subcommand help:
    app-launcher COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["CliState", "cli", "main"]

import sys
from dataclasses import dataclass
from pathlib import Path

import click

from app_launcher import __version__
from app_launcher.config import LauncherFlags
from app_launcher.constants import APP_NAME, HOME_ENV_VAR
from app_launcher.log_config import configure_logging
from app_launcher.paths import find_install_path

from .commands.lifecycle import help_command, kill, restart, run, start, status, stop


@dataclass
class CliState:
    """Global options shared with the subcommands through ctx.obj."""

    install_path: Path
    flags: LauncherFlags


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Default Locations:
  INSTALL_PATH   parent of the directory holding the launcher, or $APP_LAUNCHER_HOME
  ETC_DIR        INSTALL_PATH/etc
  DATA_DIR       node.data-dir from ETC_DIR/node.properties, else INSTALL_PATH
  PID file       DATA_DIR/var/run/launcher.pid
  Launcher log   DATA_DIR/var/log/launcher.log (daemon mode only)
  Server log     DATA_DIR/var/log/server.log (daemon mode only)

Examples:
  app-launcher start
  app-launcher --data-dir /var/lib/app -Dnode.environment=test run
  app-launcher stop --timeout 30

Exit Status:
  0  success
  1  error
  3  status: not running
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", is_flag=True, help="Show version")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option(
    "--install-path",
    envvar=HOME_ENV_VAR,
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Installation directory (default: parent of the launcher's bin dir)",
)
@click.option("--etc-dir", default="", help="Defaults to INSTALL_PATH/etc")
@click.option("--launcher-config", default="", help="Defaults to INSTALL_PATH/bin/launcher.properties")
@click.option("--node-config", default="", help="Defaults to ETC_DIR/node.properties")
@click.option("--jvm-config", default="", help="Defaults to ETC_DIR/jvm.config")
@click.option("--config", "config_path", default="", help="Defaults to ETC_DIR/config.properties")
@click.option("--log-levels-file", default="", help="Defaults to ETC_DIR/log.properties")
@click.option("--secrets-config", default="", help="Defaults to ETC_DIR/secrets.toml")
@click.option("--jvm-dir", default="", help="JVM installation directory (default: $JAVA_HOME)")
@click.option("--data-dir", default="", help="Defaults to INSTALL_PATH")
@click.option("--pid-file", default="", help="Defaults to DATA_DIR/var/run/launcher.pid")
@click.option(
    "--launcher-log-file",
    default="",
    help="Defaults to DATA_DIR/var/log/launcher.log (only in daemon mode)",
)
@click.option(
    "--server-log-file",
    default="",
    help="Defaults to DATA_DIR/var/log/server.log (only in daemon mode)",
)
@click.option("-J", "jvm_options", multiple=True, metavar="OPTION", help="Sets a JVM option. Can be used multiple times")
@click.option(
    "-D",
    "system_properties",
    multiple=True,
    metavar="KEY=VALUE",
    help="Sets a Java system property. Can be used multiple times",
)
@click.pass_context
def cli(
    ctx: click.Context,
    version: bool,
    verbose: bool,
    install_path: Path | None,
    etc_dir: str,
    launcher_config: str,
    node_config: str,
    jvm_config: str,
    config_path: str,
    log_levels_file: str,
    secrets_config: str,
    jvm_dir: str,
    data_dir: str,
    pid_file: str,
    launcher_log_file: str,
    server_log_file: str,
    jvm_options: tuple[str, ...],
    system_properties: tuple[str, ...],
) -> None:
    """app-launcher: Lifecycle supervisor for a long-running worker process."""
    if version:
        click.echo(f"{APP_NAME} {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    configure_logging(verbose)
    ctx.obj = CliState(
        install_path=install_path if install_path is not None else find_install_path(sys.argv[0]),
        flags=LauncherFlags(
            verbose=verbose,
            etc_dir=etc_dir,
            launcher_config=launcher_config,
            node_config=node_config,
            jvm_config=jvm_config,
            config=config_path,
            log_levels_file=log_levels_file,
            secrets_config=secrets_config,
            jvm_dir=jvm_dir,
            data_dir=data_dir,
            pid_file=pid_file,
            launcher_log_file=launcher_log_file,
            server_log_file=server_log_file,
            jvm_options=list(jvm_options),
            system_properties=list(system_properties),
        ),
    )


# Register commands
cli.add_command(run)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(restart)
cli.add_command(kill)
cli.add_command(status)
cli.add_command(help_command)


def main() -> None:
    """CLI entry point."""
    cli()
