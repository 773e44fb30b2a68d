"""Bounded parallel execution of one group of test units."""

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from batch_test_runner.models.outcome import Outcome
from batch_test_runner.models.unit import TestUnit
from batch_test_runner.reporting import ReportingSink

log = logging.getLogger(__name__)

TIMEOUT_WARNING = "Thread pool timeout elapsed before all tests were complete!"
INTERRUPTED_WARNING = "Thread pool was interrupted"


@dataclass(frozen=True, kw_only=True)
class ExecutionScheduler:
    """Runs units concurrently under a fixed-size pool and an overall timeout.

    Cancellation is advisory. When the timeout elapses the pool is shut down
    and tasks that have not started are dropped, but units already executing
    are abandoned rather than stopped: their work may run to completion with
    the result discarded. Abandoned units are recorded in ``abandoned`` so the
    caller can decide how to exit while their workers are still alive.
    """

    execute: Callable[[TestUnit], Outcome]
    sink: ReportingSink
    max_concurrency: int
    timeout: float
    abandoned: list[TestUnit] = field(default_factory=list)

    def run_group(self, units: Sequence[TestUnit]) -> Sequence[Outcome]:
        """Run ``units`` and return the outcomes that completed in time.

        Outcomes are in submission order. On timeout or interruption the
        result is shorter than ``units``; the missing units did not complete.
        """
        cancelled = threading.Event()
        pool = ThreadPoolExecutor(
            max_workers=self.max_concurrency, thread_name_prefix="test-unit"
        )
        futures = [pool.submit(self._run_unit, unit, cancelled) for unit in units]

        try:
            _, not_done = wait(futures, timeout=self.timeout)
        except KeyboardInterrupt:
            log.warning("Interrupted while waiting for tests", exc_info=True)
            self.sink.warn(INTERRUPTED_WARNING)
            return self._salvage(pool, units, futures, cancelled)

        if not_done:
            self.sink.warn(TIMEOUT_WARNING)
            return self._salvage(pool, units, futures, cancelled)

        pool.shutdown(wait=True)
        outcomes = [future.result() for future in futures]
        return [outcome for outcome in outcomes if outcome is not None]

    def _run_unit(
        self, unit: TestUnit, cancelled: threading.Event
    ) -> Outcome | None:
        if cancelled.is_set():
            log.debug("Pool stopped before %s started", unit)
            return None

        try:
            outcome = self.execute(unit)
        except Exception as e:
            log.error("Executor raised for %s", unit.canonical, exc_info=e)
            outcome = Outcome.failure(unit, e)

        try:
            self.sink.report_unit(outcome)
        except Exception as e:
            # The outcome still counts towards the summary
            log.error("Reporting sink failed for %s", unit.canonical, exc_info=e)
        return outcome

    def _salvage(
        self,
        pool: ThreadPoolExecutor,
        units: Sequence[TestUnit],
        futures: Sequence[Future[Outcome | None]],
        cancelled: threading.Event,
    ) -> Sequence[Outcome]:
        """Force-stop the pool and keep whatever has already finished."""
        cancelled.set()
        pool.shutdown(wait=False, cancel_futures=True)

        completed: list[Outcome] = []
        running: list[TestUnit] = []
        for unit, future in zip(units, futures, strict=True):
            if not future.done():
                running.append(unit)
                continue
            if future.cancelled() or future.exception():
                continue
            # None means the cancellation flag stopped the unit before it ran
            if (outcome := future.result()) is not None:
                completed.append(outcome)

        self.abandoned.extend(running)
        log.info(
            "Salvaged %d of %d outcome(s); %d unit(s) abandoned while running",
            len(completed),
            len(futures),
            len(running),
        )
        return completed
