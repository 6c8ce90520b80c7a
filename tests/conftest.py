"""Pytest fixtures."""

from pathlib import Path

import pytest

from envar.environment import MappingEnvironment
from envar_config.settings import Settings


@pytest.fixture
def env():
    """Isolated environment (never touches os.environ)."""
    return MappingEnvironment()


@pytest.fixture
def settings():
    """Default envar settings."""
    return Settings()


@pytest.fixture
def write_env(tmp_path):
    """Write a .env file into tmp_path/<directory> and return the directory."""

    def _write(directory: str, content: str) -> Path:
        path = tmp_path / directory
        path.mkdir(parents=True, exist_ok=True)
        (path / ".env").write_text(content, encoding="utf-8")
        return path

    return _write
