"""Fixtures for CLI tests."""

from __future__ import annotations

import pytest

_ENV_VARS = (
    "DOCSHELF_BIND",
    "DOCSHELF_ROOT",
    "DOCSHELF_DB",
    "DOCSHELF_LOG_LEVEL",
    "DOCSHELF_DOC_EXTRACTOR",
    "DOCSHELF_LABELS",
)


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    """Run every command from an empty directory with no DOCSHELF_* overrides
    and no global config."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("docshelf.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.chdir(tmp_path)
    # loguru would otherwise keep a handle on CliRunner's captured stderr.
    monkeypatch.setattr("docshelf.cli.ingest.configure_logging", lambda level: None)


@pytest.fixture
def shelf(tmp_path):
    """An initialized docshelf root."""
    from typer.testing import CliRunner

    from docshelf.cli.main import app

    root = tmp_path / "shelf"
    result = CliRunner().invoke(app, ["init", str(root)])
    assert result.exit_code == 0, result.output
    return root


@pytest.fixture
def fake_services(monkeypatch, services):
    monkeypatch.setattr("docshelf.cli.ingest.build_services", lambda cfg: services)
    return services


@pytest.fixture(autouse=True)
def _wide_console(monkeypatch):
    """Keep rich from wrapping long tmp paths in the middle of assertions."""
    from docshelf.cli.common import console

    monkeypatch.setattr(console, "width", 300)
