"""Shared pytest fixtures for atdid tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from atdid.config.settings import AtdidSettings
from atdid.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer-level ATDID_* variables out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("ATDID_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _telemetry_off() -> Generator[None]:
    """Reset the telemetry flag that ``-v`` leaves switched on."""
    yield
    disable_telemetry()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Change CWD to an empty temp directory so no atdid.toml is discovered."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(workdir: Path) -> AtdidSettings:
    """Default settings with no config file."""
    return AtdidSettings.from_cli(start=workdir)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test (the CLI reconfigures it)."""
    import logging

    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    atdid = logging.getLogger("atdid")
    atdid_level = atdid.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    atdid.setLevel(atdid_level)
