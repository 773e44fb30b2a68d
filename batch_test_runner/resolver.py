"""Resolution of selection sources into test units."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from batch_test_runner.models.unit import TestUnit

log = logging.getLogger(__name__)

COMPANION_SUFFIXES = frozenset({".check", ".log", ".flags"})


def failure_log_path(unit: TestUnit) -> Path:
    """Location of the log a failed run of ``unit`` leaves behind."""
    return unit.canonical.parent / f"{unit.canonical.stem}-{unit.category}.log"


def check_file_path(unit: TestUnit) -> Path:
    """Location of the expected-output file for ``unit``."""
    return unit.canonical.parent / f"{unit.canonical.stem}.check"


class SelectionResolver(ABC):
    """Turns category names, search patterns and rerun requests into units."""

    @abstractmethod
    def resolve_category(self, name: str) -> Sequence[TestUnit]:
        """Return every unit in the named category."""

    @abstractmethod
    def search(self, pattern: str) -> Sequence[TestUnit]:
        """Return units matching the search pattern."""

    @abstractmethod
    def rerun_candidates(self) -> Sequence[TestUnit]:
        """Return units a previous run recorded as failed."""

    @abstractmethod
    def is_test_path(self, path: Path) -> bool:
        """Check whether ``path`` denotes a runnable test."""

    @abstractmethod
    def category_of(self, path: Path) -> str:
        """Return the category label for a test path."""

    def unit_for(self, path: Path) -> TestUnit:
        return TestUnit.from_path(path, self.category_of(path))


@dataclass(frozen=True, kw_only=True)
class FileSystemResolver(SelectionResolver):
    """Resolver for a ``<root>/<category>/<test>`` directory tree.

    A test is any non-hidden file or directory directly inside a category
    directory, except companion files such as ``.check`` and ``.log``.
    """

    root: Path

    def categories(self) -> Sequence[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir() if p.is_dir() and not _hidden(p)
        )

    def resolve_category(self, name: str) -> Sequence[TestUnit]:
        category_dir = self.root / name
        if not category_dir.is_dir():
            log.debug("No directory for category %s under %s", name, self.root)
            return []
        return [
            TestUnit.from_path(entry, name)
            for entry in sorted(category_dir.iterdir())
            if _is_test_entry(entry)
        ]

    def search(self, pattern: str) -> Sequence[TestUnit]:
        matches = [
            unit
            for category in self.categories()
            for unit in self.resolve_category(category)
            if _matches(unit, pattern)
        ]
        return sorted(matches, key=lambda unit: str(unit.path))

    def rerun_candidates(self) -> Sequence[TestUnit]:
        return [
            unit
            for category in self.categories()
            for unit in self.resolve_category(category)
            if failure_log_path(unit).is_file()
        ]

    def is_test_path(self, path: Path) -> bool:
        if not path.exists() or not _is_test_entry(path):
            return False
        resolved = path.resolve()
        root = self.root.resolve()
        return resolved.parent.parent == root

    def category_of(self, path: Path) -> str:
        return path.resolve().parent.name


def _hidden(path: Path) -> bool:
    return path.name.startswith(".")


def _is_test_entry(path: Path) -> bool:
    return not _hidden(path) and path.suffix not in COMPANION_SUFFIXES


def _matches(unit: TestUnit, pattern: str) -> bool:
    if pattern in f"{unit.category}/{unit.name}":
        return True
    sources = [check_file_path(unit)]
    if unit.canonical.is_dir():
        sources.extend(p for p in unit.canonical.rglob("*") if p.is_file())
    else:
        sources.append(unit.canonical)
    return any(_contains(source, pattern) for source in sources)


def _contains(path: Path, pattern: str) -> bool:
    if not path.is_file():
        return False
    try:
        return pattern in path.read_text(errors="replace")
    except OSError as e:
        log.debug("Cannot read %s while searching: %s", path, e)
        return False
