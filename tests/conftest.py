"""Pytest configuration and fixtures for envsetup tests."""

import logging
from pathlib import Path

import pytest

from envsetup.core.persistence import EnvPaths, EnvStore


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Restore root logger level and handlers changed by _setup_logging()."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def env_paths(project_dir: Path) -> EnvPaths:
    """Default .env.example / .env / .env.old paths inside project_dir."""
    return EnvPaths.for_directory(project_dir)


@pytest.fixture
def store(env_paths: EnvPaths) -> EnvStore:
    """EnvStore without the permission check (tmp files are 0644)."""
    return EnvStore(env_paths, check_permissions=False)


@pytest.fixture
def write_template(env_paths: EnvPaths):
    """Write the template file.

    Usage:
        def test_something(write_template):
            write_template("A=1\\nB=2 # desc\\n")
    """

    def _write(content: str) -> Path:
        env_paths.template.write_text(content, encoding="utf-8")
        return env_paths.template

    return _write


@pytest.fixture
def write_target(env_paths: EnvPaths):
    """Write the existing .env file."""

    def _write(content: str) -> Path:
        env_paths.target.write_text(content, encoding="utf-8")
        return env_paths.target

    return _write
