"""Fixtures for integration tests."""

from pathlib import Path
from typing import Protocol

import pytest


class WriteFileFn(Protocol):
    """Protocol for workspace file creation function."""

    def __call__(self, relative_path: str, content: str = "") -> Path:
        """Write a file below the workspace and return its absolute path."""


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create an empty workspace directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def write_file(workspace: Path) -> WriteFileFn:
    """Return a function to create files in the workspace."""

    def _write(relative_path: str, content: str = "") -> Path:
        path = workspace / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path.absolute()

    return _write
