"""Shared test fixtures for vaul tests."""

import pytest

from vaul.store import CommandStore


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point config lookups at a throwaway home so tests never touch real data."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    for var in ("VAUL_CONFIG", "VAUL_DATA_DIR", "VAUL_NOTIFY_URL", "VAUL_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "vault"


@pytest.fixture
def store(data_dir):
    return CommandStore(data_dir)
