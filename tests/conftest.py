"""Shared test fixtures."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(tmp_path_factory, monkeypatch):
    """Keep the user's git and reclaim configuration out of the tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    for var in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def base(tmp_path):
    """Resolved scan root for tests that build a tree of repositories."""
    root = tmp_path / "projects"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def make_repo():
    """Factory that creates a git repository with an optional .gitignore."""

    def _make(path: Path, gitignore: str = "") -> Path:
        path.mkdir(parents=True, exist_ok=True)
        subprocess.run(["git", "init", "-q", str(path)], check=True, capture_output=True)
        if gitignore:
            (path / ".gitignore").write_text(gitignore)
        return path.resolve()

    return _make


@pytest.fixture
def write_file():
    """Factory that creates a file of an exact apparent size (sparse when large)."""

    def _write(path: Path, size: int = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.truncate(size)
        return path

    return _write


@pytest.fixture
def deny_listing(monkeypatch):
    """Make ``os.scandir`` fail with EACCES for the given directories."""

    def _deny(*paths: Path) -> None:
        denied = {str(p) for p in paths}
        real_scandir = os.scandir

        def fake_scandir(path="."):
            if os.fspath(path) in denied:
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)

    return _deny
