"""Fixtures for integration tests."""

from pathlib import Path
from typing import Protocol

import pytest


class CreateTestFn(Protocol):
    """Protocol for test file creation function."""

    def __call__(
        self,
        category: str,
        name: str,
        script: str = "exit 0\n",
        *,
        check: str | None = None,
    ) -> Path:
        """Create a test script (and optional check file) and return its path."""


@pytest.fixture
def suite_root(tmp_path: Path) -> Path:
    """Root directory of an empty test tree."""
    root = tmp_path / "suite"
    root.mkdir()
    return root


@pytest.fixture
def create_test(suite_root: Path) -> CreateTestFn:
    """Return a function to create shell tests in the tree."""

    def _create(
        category: str,
        name: str,
        script: str = "exit 0\n",
        *,
        check: str | None = None,
    ) -> Path:
        category_dir = suite_root / category
        category_dir.mkdir(exist_ok=True)
        test_file = category_dir / name
        test_file.write_text(script)
        if check is not None:
            (category_dir / f"{test_file.stem}.check").write_text(check)
        return test_file

    return _create
