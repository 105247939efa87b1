"""Pytest configuration and shared fixtures."""

import os
from pathlib import Path

import pytest

from gitlite.core import Repository


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a workspace with an initialized .gitLite directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    Repository.init(root)
    return root


@pytest.fixture
def repo(workspace: Path) -> Repository:
    """Open the repository in the workspace."""
    return Repository(workspace)


@pytest.fixture
def in_tmp_path(tmp_path: Path):
    """Run the test with tmp_path as the working directory."""
    original_cwd = Path.cwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)
