"""Abstract base class for test unit executors."""

from abc import ABC, abstractmethod

from batch_test_runner.models.outcome import Outcome
from batch_test_runner.models.unit import TestUnit


class UnitExecutor(ABC):
    """Runs a single test unit and reports how it went.

    Implementations are called concurrently from worker threads and receive
    no cancellation signal: a unit abandoned by the scheduler keeps running
    until ``execute`` returns, and any cleanup is the executor's own job.
    """

    @abstractmethod
    def execute(self, unit: TestUnit) -> Outcome:
        """Run the unit.

        Args:
            unit: Unit to run

        Returns:
            Outcome of the run. Raising is allowed; the scheduler converts the
            error into a failed outcome for this unit.

        """

    @abstractmethod
    def has_failure_log(self, unit: TestUnit) -> bool:
        """Check whether a previous run left failure evidence for ``unit``."""
