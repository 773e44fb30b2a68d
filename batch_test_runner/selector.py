"""Merge selection sources into ordered, category-grouped test units."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from batch_test_runner.models.unit import ExecutionGroup, Selection, TestUnit
from batch_test_runner.reporting import ReportingSink
from batch_test_runner.resolver import SelectionResolver

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TestSelector:
    """Selects the units for one run from every selection source."""

    __test__ = False

    resolver: SelectionResolver
    sink: ReportingSink
    standard_categories: Sequence[str]
    verbose: bool = False

    def select(
        self,
        explicit_paths: Sequence[Path] = (),
        category_names: Sequence[str] = (),
        grep_pattern: str = "",
        rerun_requested: bool = False,
    ) -> Selection:
        """Resolve, merge, deduplicate and group the selected units.

        Args:
            explicit_paths: Test paths named directly; invalid ones are dropped
            category_names: Categories to run in full
            grep_pattern: Search pattern, empty for none
            rerun_requested: Whether to include previously failed units

        Returns:
            Groups ordered by category priority, with a provenance description

        """
        individual = self._explicit_units(explicit_paths)
        grepped = self._grepped_units(grep_pattern)
        rerun = list(self.resolver.rerun_candidates()) if rerun_requested else []
        misc = [*individual, *grepped, *rerun]

        categories = self._categories(category_names, has_individual=bool(misc))
        category_units = [
            unit
            for category in categories
            for unit in self.resolver.resolve_category(category)
        ]

        units = sorted(
            _distinct([*misc, *category_units]), key=lambda unit: str(unit.canonical)
        )
        contributors = describe_contributors(
            rerun=len(rerun),
            categories=len(categories) if category_units else 0,
            grepped=len(grepped),
            grep_pattern=grep_pattern,
            individual=len(individual),
        )
        log.debug("Selected %d unit(s) drawn from %s", len(units), contributors)

        return Selection(groups=self._group(units), contributors=contributors)

    def _explicit_units(self, paths: Sequence[Path]) -> Sequence[TestUnit]:
        valid: list[Path] = []
        invalid: list[Path] = []
        for path in paths:
            (valid if self.resolver.is_test_path(path) else invalid).append(path)

        if invalid:
            if self.verbose:
                for path in invalid:
                    self.sink.warn(f"Discarding invalid test path {path}")
            else:
                self.sink.warn(f"Discarding {len(invalid)} invalid test paths")

        return [self.resolver.unit_for(path) for path in valid]

    def _grepped_units(self, pattern: str) -> Sequence[TestUnit]:
        if not pattern:
            return []
        units = self.resolver.search(pattern)
        if not units:
            self.sink.warn(f"grep string '{pattern}' matched no tests.")
        return sorted(units, key=lambda unit: str(unit.path))

    def _categories(
        self, names: Sequence[str], *, has_individual: bool
    ) -> Sequence[str]:
        unknown = [name for name in names if name not in self.standard_categories]
        for name in unknown:
            self.sink.warn(f"Ignoring unknown test category '{name}'")

        given = [c for c in self.standard_categories if c in names]
        if given:
            return given
        if names or has_individual:
            return []
        # Nothing was named at all: run every standard category
        return list(self.standard_categories)

    def _group(self, units: Sequence[TestUnit]) -> Sequence[ExecutionGroup]:
        by_category: dict[str, list[TestUnit]] = {}
        for unit in units:
            by_category.setdefault(unit.category, []).append(unit)

        rank = {name: index for index, name in enumerate(self.standard_categories)}
        ordered = sorted(
            by_category, key=lambda category: (rank.get(category, len(rank)), category)
        )
        return [
            ExecutionGroup(category=category, units=tuple(by_category[category]))
            for category in ordered
        ]


def describe_contributors(
    *,
    rerun: int,
    categories: int,
    grepped: int,
    grep_pattern: str,
    individual: int,
) -> str:
    """Describe which selection sources contributed units."""
    parts = [
        "previously failed tests" if rerun else "",
        f"{categories} named test categories" if categories else "",
        f"{grepped} tests matching '{grep_pattern}'" if grepped else "",
        "specified tests" if individual else "",
    ]
    return ", ".join(part for part in parts if part)


def _distinct(units: Iterable[TestUnit]) -> Sequence[TestUnit]:
    """Drop repeated canonical identities, keeping the first occurrence."""
    seen: dict[Path, TestUnit] = {}
    for unit in units:
        seen.setdefault(unit.canonical, unit)
    return list(seen.values())
