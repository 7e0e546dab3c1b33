# Ensure the repository root is on sys.path so `thermal_printer` can be imported in tests.

import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    # This file lives at: <repo_root>/tests/conftest.py
    here = Path(__file__).resolve()
    repo_root = here.parent.parent
    repo_str = str(repo_root)
    if repo_str not in sys.path:
        sys.path.insert(0, repo_str)


_ensure_repo_root_on_syspath()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep developer config, fonts and log settings out of the tests."""
    for var in (
        "THERMALPRINTER_CONFIG_PATH",
        "THERMALPRINTER_FONT_PATH",
        "THERMALPRINTER_JSON_LOGS",
        "THERMALPRINTER_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
