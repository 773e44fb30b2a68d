"""Top-level controller for one harness invocation."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from pydantic import Field

from batch_test_runner.config import HarnessConfig
from batch_test_runner.executors.base import UnitExecutor
from batch_test_runner.judgment import accumulate, finalize, is_success, pass_fail_string
from batch_test_runner.models.base import Model
from batch_test_runner.models.outcome import Outcome
from batch_test_runner.models.state import RunState
from batch_test_runner.models.unit import TestUnit
from batch_test_runner.reporting import ReportingSink
from batch_test_runner.scheduler import ExecutionScheduler
from batch_test_runner.selector import TestSelector

log = logging.getLogger(__name__)


class SelectionRequest(Model):
    """Raw selection inputs for one run."""

    paths: Sequence[Path] = Field(default_factory=list)
    categories: Sequence[str] = Field(default_factory=list)
    grep: str = ""
    rerun_failed: bool = False


@dataclass(frozen=True, kw_only=True)
class HarnessRunner:
    """Selects units, runs them group by group and issues the summary."""

    config: HarnessConfig
    selector: TestSelector
    executor: UnitExecutor
    sink: ReportingSink
    on_finish: Callable[[TestUnit, Outcome], Outcome] | None = None

    def run(self, request: SelectionRequest) -> bool:
        """Run the selected tests and return the success verdict."""
        selection = self.selector.select(
            explicit_paths=request.paths,
            category_names=request.categories,
            grep_pattern=request.grep,
            rerun_requested=request.rerun_failed,
        )
        state = RunState(
            total_selected=selection.total_selected,
            expected_failures=self.config.expected_failure_count,
        )

        expecting = ""
        if state.expected_failures:
            expecting = f" (expecting {state.expected_failures} to fail)"
        log.info(
            "Selected %d tests drawn from %s%s",
            state.total_selected,
            selection.contributors or "no sources",
            expecting,
        )

        try:
            start = time.monotonic()
            for group in selection.groups:
                count = len(group.units)
                log.info(
                    "# starting %d test%s in %s",
                    count,
                    "" if count == 1 else "s",
                    group.category,
                )
                outcomes = self.scheduler.run_group(group.units)
                before = len(state.failed)
                state = accumulate(state, outcomes)

                failed = len(state.failed) - before
                if failed:
                    passed = len(outcomes) - failed
                    log.info(
                        "# %s in %s",
                        pass_fail_string(passed, failed, 0),
                        group.category,
                    )

            # A completed loop always counts as progress, however fast
            state.elapsed_millis = max(1, int((time.monotonic() - start) * 1000))
            finalize(state, self.sink)
        finally:
            # No-op unless the loop above was cut short
            finalize(state, self.sink)

        return is_success(state)

    @cached_property
    def scheduler(self) -> ExecutionScheduler:
        return ExecutionScheduler(
            execute=self.run_unit,
            sink=self.sink,
            max_concurrency=self.config.max_concurrency,
            timeout=self.config.overall_timeout,
        )

    @property
    def abandoned_units(self) -> Sequence[TestUnit]:
        """Units whose workers were still running when their group was cut short."""
        return self.scheduler.abandoned

    def run_unit(self, unit: TestUnit) -> Outcome:
        """Execute one unit, honouring rerun-only mode."""
        if self.config.rerun_only and not self.executor.has_failure_log(unit):
            log.debug("No failure log for %s, marking as passed", unit)
            return Outcome.trivial_pass(unit)

        outcome = self.executor.execute(unit)
        if self.on_finish is not None:
            outcome = self.on_finish(unit, outcome)
        return outcome
