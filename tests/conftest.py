"""Shared fixtures."""

import pytest

from installer.sandbox import SCRUBBED_VARIABLES


@pytest.fixture
def install_root(tmp_path, monkeypatch):
    """Point CARGOX_INSTALL_DIR at a temporary directory."""
    root = tmp_path / "cargox-root"
    monkeypatch.setenv("CARGOX_INSTALL_DIR", str(root))
    return root


@pytest.fixture
def clean_cargo_env(monkeypatch):
    """Remove ambient cargo/rustup variables for the duration of a test."""
    for var in SCRUBBED_VARIABLES:
        monkeypatch.delenv(var, raising=False)
