"""Worker launch command construction.

Builds the argument vector and environment that replace the launcher
process image with the JVM worker:

    java -cp INSTALL_PATH/lib/* <jvm.config lines> <-J options>
         -Dkey=value ... <main-class>
"""

from __future__ import annotations

__all__ = ["build_execution"]

import os

from app_launcher.config import LauncherOptions
from app_launcher.constants import MAIN_CLASS_PROPERTY
from app_launcher.exceptions import ConfigParseError
from app_launcher.models import WorkerExecution


def build_execution(options: LauncherOptions, daemon: bool) -> WorkerExecution:
    """Build the worker execution for foreground or daemon mode.

    In daemon mode the worker logs to the server log instead of the console.

    Args:
        options: Resolved launcher options.
        daemon: Whether the worker runs detached.

    Returns:
        The worker argument vector and environment.

    Raises:
        ConfigParseError: If the launcher config has no main-class.
    """
    main_class = options.launcher_config.get(MAIN_CLASS_PROPERTY)
    if not main_class:
        raise ConfigParseError(
            f"launcher config file {options.launcher_config_path} is missing the '{MAIN_CLASS_PROPERTY}' property"
        )

    properties = dict(options.system_properties)
    properties["config"] = str(options.config_path)
    if options.log_levels_file is not None:
        properties["log.levels-file"] = str(options.log_levels_file)
    if daemon:
        properties["log.output-file"] = str(options.server_log)
        properties["log.enable-console"] = "false"

    java = str(options.jvm_dir / "bin" / "java") if options.jvm_dir else "java"
    classpath = str(options.install_path / "lib" / "*")

    args = [java, "-cp", classpath]
    args.extend(options.jvm_config)
    args.extend(options.jvm_options)
    args.extend(f"-D{key}={value}" for key, value in properties.items())
    args.append(main_class)

    env = dict(os.environ)
    if options.jvm_dir is not None:
        env["JAVA_HOME"] = str(options.jvm_dir)

    return WorkerExecution(args=args, env=env)
