"""Shared fixtures for app-launcher tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from app_launcher.config import LauncherFlags, LauncherOptions, resolve_options
from app_launcher.log_config import configure_logging

MAIN_CLASS = "io.example.server.Server"


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Restore console logging after tests that switch to daemon logging."""
    yield
    configure_logging()


@pytest.fixture
def install_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a minimal installation with its data dir under tmp_path/data.

    Layout:
        install/bin/launcher.properties
        install/etc/{node.properties,jvm.config,config.properties}
        install/lib/
    """
    monkeypatch.delenv("JAVA_HOME", raising=False)
    monkeypatch.chdir(tmp_path)

    install = tmp_path / "install"
    (install / "bin").mkdir(parents=True)
    (install / "etc").mkdir()
    (install / "lib").mkdir()
    (install / "bin" / "launcher.properties").write_text(f"main-class={MAIN_CLASS}\n")
    (install / "etc" / "jvm.config").write_text("# JVM flags\n-server\n-Xmx1G\n")
    (install / "etc" / "config.properties").write_text("http-server.http.port=8080\n")
    (install / "etc" / "node.properties").write_text(
        f"node.environment=test\nnode.data-dir={tmp_path / 'data'}\n"
    )
    return install


@pytest.fixture
def options(install_tree: Path) -> LauncherOptions:
    """Options resolved from the default locations of install_tree."""
    return resolve_options(install_tree, LauncherFlags())
