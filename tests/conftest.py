"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import cfgbind...' works without
an install, and that every test starts from freshly loaded settings.
"""
import sys
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from cfgbind.config.settings import BindingSettings, reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings(tmp_path, monkeypatch):
    """
    Clear the settings singleton around each test and run from an empty
    directory, so neither env changes nor a stray `.env` file leak in.
    """
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    """Default token grammar: --key=value, comma-separated lists."""
    return BindingSettings()
