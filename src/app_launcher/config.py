"""Launcher configuration for app-launcher.

Resolves every path the launcher works with and merges the configuration
sources that drive the worker launch:

    INSTALL_PATH/bin/launcher.properties   launcher settings (main-class, ...)
    ETC_DIR/node.properties                node settings, copied into system properties
    ETC_DIR/jvm.config                     one JVM argument per logical line
    ETC_DIR/config.properties              passed to the worker, not parsed here
    ETC_DIR/secrets.toml                   secrets configuration, located but not parsed here
    -D key=value                           system property overrides

Each location can be overridden with a command line option. Relative
locations are resolved against the working directory of the invocation.

Example usage:
    flags = LauncherFlags(data_dir="/var/lib/app")
    options = resolve_options(Path("/opt/app"), flags)
"""

from __future__ import annotations

__all__ = [
    "LauncherFlags",
    "LauncherOptions",
    "resolve_options",
]

import logging
import os
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from app_launcher.constants import (
    APP_NAME,
    DEFAULT_CONFIG,
    DEFAULT_ETC_DIR,
    DEFAULT_JVM_CONFIG,
    DEFAULT_LAUNCHER_CONFIG,
    DEFAULT_LAUNCHER_LOG,
    DEFAULT_LOG_LEVELS_FILE,
    DEFAULT_NODE_CONFIG,
    DEFAULT_PID_FILE,
    DEFAULT_SECRETS_CONFIG,
    DEFAULT_SERVER_LOG,
    NODE_DATA_DIR_PROPERTY,
)
from app_launcher.exceptions import ConfigParseError, PathResolutionError
from app_launcher.paths import (
    ensure_directory,
    ensure_file,
    ensure_writable,
    verify_jvm_installation,
)
from app_launcher.properties import load_file, load_lines, parse_overrides

_logger = logging.getLogger(f"{APP_NAME}.config")


class LauncherFlags(BaseModel):
    """Raw command line overrides, before any defaulting.

    Empty strings mean "not given" and fall back to the default location.
    """

    etc_dir: str = ""
    launcher_config: str = ""
    node_config: str = ""
    jvm_config: str = ""
    config: str = ""
    log_levels_file: str = ""
    secrets_config: str = ""
    jvm_dir: str = ""
    data_dir: str = ""
    pid_file: str = ""
    launcher_log_file: str = ""
    server_log_file: str = ""
    jvm_options: list[str] = Field(default_factory=list)
    system_properties: list[str] = Field(default_factory=list)
    verbose: bool = False


class LauncherOptions(BaseModel):
    """Fully resolved launcher configuration.

    Attributes:
        install_path: Root of the application installation.
        etc_dir: Directory holding node, JVM and worker configuration.
        data_dir: Working directory of the worker.
        pid_file: PID file recording the worker pid (and the lock).
        launcher_log: Append-only log receiving daemon stdout/stderr.
        server_log: Worker log file in daemon mode.
        launcher_config: Parsed launcher.properties.
        node_config: Parsed node.properties (empty when absent).
        jvm_config: Logical lines of jvm.config.
        jvm_options: -J options from the command line.
        system_properties: -D overrides with node properties copied over them.
    """

    verbose: bool = False
    install_path: Path
    etc_dir: Path
    config_path: Path
    data_dir: Path
    pid_file: Path
    launcher_config_path: Path
    node_config_path: Path | None = None
    jvm_config_path: Path
    launcher_log: Path
    server_log: Path
    log_levels_file: Path | None = None
    secrets_config_path: Path | None = None
    jvm_dir: Path | None = None

    launcher_config: dict[str, str] = Field(default_factory=dict)
    node_config: dict[str, str] = Field(default_factory=dict)
    jvm_config: list[str] = Field(default_factory=list)
    jvm_options: list[str] = Field(default_factory=list)
    system_properties: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def describe(self) -> str:
        """Render the options one per line, for --verbose output."""
        return "\n".join(f"{name:<22} = {value}" for name, value in self)


def _absolute(value: str) -> Path:
    return Path(os.path.abspath(os.path.expanduser(value)))


def _resolve(
    check: Callable[[Path], Path],
    what: str,
    *candidates: str | Path | None,
) -> Path:
    """Validate the first non-empty candidate location.

    Raises:
        PathResolutionError: If no candidate is given or the check fails.
            The message names what was being resolved.
    """
    for candidate in candidates:
        if candidate:
            try:
                return check(_absolute(str(candidate)))
            except PathResolutionError as e:
                raise PathResolutionError(f"{what}: {e}", e.path) from e
    raise PathResolutionError(f"{what}: no location given")


def _optional_file(explicit: str, default: Path, what: str) -> Path | None:
    """An explicit file must exist; the default one is used only if present."""
    if explicit:
        return _resolve(ensure_file, what, explicit)
    if default.is_file():
        return default
    return None


def resolve_options(install_path: Path, flags: LauncherFlags) -> LauncherOptions:
    """Resolve all launcher paths and merge configuration sources.

    Args:
        install_path: Root of the application installation.
        flags: Command line overrides.

    Returns:
        The resolved, immutable options.

    Raises:
        PathResolutionError: If a required file or directory is missing or a
            writable location is not writable.
        ConfigParseError: If a configuration file cannot be parsed or a -D
            override is invalid.
    """
    install_path = _absolute(str(install_path))

    etc_dir = _resolve(ensure_directory, "etc directory is missing", flags.etc_dir, install_path / DEFAULT_ETC_DIR)

    launcher_config_path = _resolve(
        ensure_file,
        "launcher config file is missing",
        flags.launcher_config,
        install_path / DEFAULT_LAUNCHER_CONFIG,
    )
    launcher_config = load_file(launcher_config_path)

    node_config_path = _optional_file(flags.node_config, etc_dir / DEFAULT_NODE_CONFIG, "node config file is missing")
    node_config = load_file(node_config_path) if node_config_path else {}

    jvm_config_path = _resolve(
        ensure_file, "JVM config file is missing", flags.jvm_config, etc_dir / DEFAULT_JVM_CONFIG
    )
    jvm_config = load_lines(jvm_config_path)

    config_path = _resolve(ensure_file, "config file is missing", flags.config, etc_dir / DEFAULT_CONFIG)

    log_levels_file = _optional_file(
        flags.log_levels_file, etc_dir / DEFAULT_LOG_LEVELS_FILE, "log levels file is missing"
    )
    secrets_config_path = _optional_file(
        flags.secrets_config, etc_dir / DEFAULT_SECRETS_CONFIG, "secrets config file is missing"
    )

    jvm_dir = None
    if flags.jvm_dir or os.environ.get("JAVA_HOME"):
        jvm_dir = _resolve(
            verify_jvm_installation,
            "JVM installation path is invalid",
            flags.jvm_dir,
            os.environ.get("JAVA_HOME"),
        )

    data_dir = _resolve(
        ensure_writable,
        "data dir is invalid",
        flags.data_dir,
        node_config.get(NODE_DATA_DIR_PROPERTY),
        install_path,
    )
    pid_file = _resolve(
        ensure_writable, "pid file is not writable", flags.pid_file, data_dir / DEFAULT_PID_FILE
    )
    launcher_log = _resolve(
        ensure_writable,
        "launcher log is not writable",
        flags.launcher_log_file,
        data_dir / DEFAULT_LAUNCHER_LOG,
    )
    server_log = _resolve(
        ensure_writable,
        "server log is not writable",
        flags.server_log_file,
        data_dir / DEFAULT_SERVER_LOG,
    )

    try:
        system_properties = parse_overrides(flags.system_properties)
    except ConfigParseError as e:
        raise ConfigParseError(f"provided system properties are invalid: {e}") from e

    # Node properties win over -D overrides
    system_properties.update(node_config)

    options = LauncherOptions(
        verbose=flags.verbose,
        install_path=install_path,
        etc_dir=etc_dir,
        config_path=config_path,
        data_dir=data_dir,
        pid_file=pid_file,
        launcher_config_path=launcher_config_path,
        node_config_path=node_config_path,
        jvm_config_path=jvm_config_path,
        launcher_log=launcher_log,
        server_log=server_log,
        log_levels_file=log_levels_file,
        secrets_config_path=secrets_config_path,
        jvm_dir=jvm_dir,
        launcher_config=launcher_config,
        node_config=node_config,
        jvm_config=jvm_config,
        jvm_options=[option.strip() for option in flags.jvm_options],
        system_properties=system_properties,
    )
    _logger.debug("resolved launcher options:\n%s", options.describe())
    return options
