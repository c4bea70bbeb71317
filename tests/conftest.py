from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def app_home(tmp_path, monkeypatch) -> Path:
    """Point the per-user data directory at a temp dir for every test."""
    home = tmp_path / "home"
    monkeypatch.setenv("STRETCH_SESSION_HOME", str(home))
    return home
