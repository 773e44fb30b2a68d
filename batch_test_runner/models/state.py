"""Models for run accumulation and the final summary."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, TypeAlias

from batch_test_runner.models.outcome import Outcome

Verdict: TypeAlias = Literal["no-tests", "aborted", "passed", "failed"]


@dataclass(kw_only=True)
class RunState:
    """Totals for one harness invocation.

    Only the run controller touches this, and only between groups.
    """

    total_selected: int
    expected_failures: int = 0
    passed: Sequence[Outcome] = ()
    failed: Sequence[Outcome] = ()
    elapsed_millis: int = 0
    summarized: bool = False


@dataclass(frozen=True, kw_only=True)
class Summary:
    """Read-only view over a finished or aborted run."""

    passed: int
    failed: int
    skipped: int
    expected_failures: int
    elapsed_millis: int
    success: bool
    verdict: Verdict
    failed_outcomes: Sequence[Outcome] = ()

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped
