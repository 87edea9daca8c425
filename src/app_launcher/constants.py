"""Application-wide constants for app-launcher.

Constants that define launcher behavior.
For per-deployment settings, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "HOME_ENV_VAR",
    # Exit codes
    "EXIT_ERROR",
    "LSB_NOT_RUNNING",
    # Process control
    "POLL_INTERVAL_SECONDS",
    # Default locations
    "DEFAULT_LAUNCHER_CONFIG",
    "DEFAULT_ETC_DIR",
    "DEFAULT_NODE_CONFIG",
    "DEFAULT_JVM_CONFIG",
    "DEFAULT_CONFIG",
    "DEFAULT_LOG_LEVELS_FILE",
    "DEFAULT_SECRETS_CONFIG",
    "DEFAULT_PID_FILE",
    "DEFAULT_LAUNCHER_LOG",
    "DEFAULT_SERVER_LOG",
    # Reserved properties
    "NODE_DATA_DIR_PROPERTY",
    "MAIN_CLASS_PROPERTY",
    "RESERVED_PROPERTY_OPTIONS",
]

# ============================================================================
# Application Identity
# ============================================================================

APP_NAME: str = "app-launcher"

# Environment variable overriding the detected install path
HOME_ENV_VAR: str = "APP_LAUNCHER_HOME"

# ============================================================================
# Exit Codes
# ============================================================================

EXIT_ERROR: int = 1

# LSB init-script code for "program is not running".
# Package managers (rpm uninstall scripts) rely on it.
LSB_NOT_RUNNING: int = 3

# ============================================================================
# Process Control
# ============================================================================

# Interval between liveness checks while waiting for the worker to exit
POLL_INTERVAL_SECONDS: float = 0.1

# ============================================================================
# Default Locations (relative to INSTALL_PATH, ETC_DIR or DATA_DIR)
# ============================================================================

DEFAULT_LAUNCHER_CONFIG: str = "bin/launcher.properties"
DEFAULT_ETC_DIR: str = "etc"
DEFAULT_NODE_CONFIG: str = "node.properties"
DEFAULT_JVM_CONFIG: str = "jvm.config"
DEFAULT_CONFIG: str = "config.properties"
DEFAULT_LOG_LEVELS_FILE: str = "log.properties"
DEFAULT_SECRETS_CONFIG: str = "secrets.toml"
DEFAULT_PID_FILE: str = "var/run/launcher.pid"
DEFAULT_LAUNCHER_LOG: str = "var/log/launcher.log"
DEFAULT_SERVER_LOG: str = "var/log/server.log"

# ============================================================================
# Reserved Properties
# ============================================================================

NODE_DATA_DIR_PROPERTY: str = "node.data-dir"
MAIN_CLASS_PROPERTY: str = "main-class"

# System properties that have a dedicated option and cannot be set with -D
RESERVED_PROPERTY_OPTIONS: dict[str, str] = {
    "config": "--config",
    "log.output-file": "--server-log-file",
    "log.levels-file": "--log-levels-file",
}
