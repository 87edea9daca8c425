"""Filesystem helpers for app-launcher.

Provides the path checks used while resolving options and preparing the
worker's environment:
- make_dirs: Create a directory tree, naming the failing path
- ensure_directory / ensure_file / ensure_writable: Validation checks
- verify_jvm_installation: Check a JVM directory holds bin/java
- find_install_path: Install path derived from the launcher script location
- create_symlink / create_app_symlinks: Compatibility links in the data dir
"""

from __future__ import annotations

__all__ = [
    "create_app_symlinks",
    "create_symlink",
    "ensure_directory",
    "ensure_file",
    "ensure_writable",
    "find_install_path",
    "make_dirs",
    "verify_jvm_installation",
]

import os
from pathlib import Path
from typing import TYPE_CHECKING

from app_launcher.exceptions import PathResolutionError

if TYPE_CHECKING:
    from app_launcher.config import LauncherOptions


def make_dirs(path: Path) -> None:
    """Create a directory and its parents if missing.

    Raises:
        PathResolutionError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PathResolutionError(f"failed to create directory {path}: {e.strerror or e}", str(path)) from e


def ensure_directory(path: Path) -> Path:
    """Return path if it is an existing directory."""
    if not path.is_dir():
        raise PathResolutionError(f"{path} is not a directory", str(path))
    return path


def ensure_file(path: Path) -> Path:
    """Return path if it is an existing regular file."""
    if not path.is_file():
        raise PathResolutionError(f"{path} does not exist or is not a file", str(path))
    return path


def ensure_writable(path: Path) -> Path:
    """Return path if it, or its closest existing ancestor, is writable.

    A path that does not exist yet is accepted when the directories that
    would have to be created can be created.
    """
    candidate = path
    while not candidate.exists():
        if candidate.parent == candidate:
            break
        candidate = candidate.parent
    if not os.access(candidate, os.W_OK):
        raise PathResolutionError(f"{path} is not writable", str(path))
    return path


def verify_jvm_installation(path: Path) -> Path:
    """Return path if it contains an executable bin/java."""
    java = path / "bin" / "java"
    if not (java.is_file() and os.access(java, os.X_OK)):
        raise PathResolutionError(f"{path} does not contain an executable bin/java", str(path))
    return path


def find_install_path(script: str) -> Path:
    """Install path for a launcher script living in INSTALL_PATH/bin."""
    return Path(script).resolve().parent.parent


def create_symlink(source: Path, target: Path) -> None:
    """Link target to source, replacing an existing symlink at target.

    Nothing is linked when source does not exist, and a real file or
    directory at target is left alone.
    """
    try:
        if target.is_symlink():
            target.unlink(missing_ok=True)
        if source.exists() and not target.exists():
            target.symlink_to(source)
    except FileExistsError:
        pass  # linked by a concurrent invocation
    except OSError as e:
        raise PathResolutionError(f"failed to symlink {source} to {target}: {e.strerror or e}", str(target)) from e


def create_app_symlinks(options: LauncherOptions) -> None:
    """Link etc, plugin and secrets-plugin into the data directory.

    Configuration files may reference 'etc/xyz' relative to the working
    directory, which is the data directory while the worker runs.
    """
    make_dirs(options.data_dir)
    if options.etc_dir != options.data_dir / "etc":
        create_symlink(options.etc_dir, options.data_dir / "etc")
    if options.install_path != options.data_dir:
        create_symlink(options.install_path / "plugin", options.data_dir / "plugin")
        create_symlink(options.install_path / "secrets-plugin", options.data_dir / "secrets-plugin")
