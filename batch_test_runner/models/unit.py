"""Models for selected test units and their execution groups."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, kw_only=True)
class TestUnit:
    """A single runnable test.

    Identity is the canonical (resolved) path: two units referenced through
    different relative paths, globs or rerun lists compare equal when they
    resolve to the same file.
    """

    __test__ = False

    canonical: Path
    category: str = field(compare=False)
    path: Path = field(compare=False)

    @classmethod
    def from_path(cls, path: Path, category: str) -> "TestUnit":
        """Build a unit, resolving the canonical identity of ``path``."""
        return cls(canonical=path.resolve(), category=category, path=path)

    @property
    def name(self) -> str:
        return self.canonical.name

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True, kw_only=True)
class ExecutionGroup:
    """Units sharing a category, executed together under one worker pool."""

    category: str
    units: Sequence[TestUnit]


@dataclass(frozen=True, kw_only=True)
class Selection:
    """Result of merging all selection sources."""

    groups: Sequence[ExecutionGroup]
    contributors: str = ""

    @property
    def total_selected(self) -> int:
        return sum(len(group.units) for group in self.groups)
