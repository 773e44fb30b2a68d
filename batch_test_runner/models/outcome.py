"""Models for test unit execution outcomes."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from batch_test_runner.models.unit import TestUnit

OutcomeStatus = Literal["ok", "failed", "skipped"]


class Transcript:
    """Ordered record of the actions taken while executing a unit."""

    def __init__(self) -> None:
        self._entries: list[str] = []

    def add(self, action: str) -> "Transcript":
        self._entries.append(action)
        return self

    def append(self, text: str) -> "Transcript":
        """Extend the most recent entry, or start one if there is none."""
        if not self._entries:
            return self.add(text)
        self._entries[-1] += text
        return self

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True, kw_only=True)
class Outcome:
    """Result of running one test unit.

    Produced at most once per unit; units abandoned by a timeout produce none.
    """

    unit: TestUnit
    status: OutcomeStatus
    transcript: Sequence[str] = ()
    duration: float = 0.0
    message: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def failure(cls, unit: TestUnit, error: BaseException) -> "Outcome":
        """Failed outcome for a unit whose executor raised."""
        message = f"Error running {unit.canonical}: {type(error).__name__}: {error}"
        return cls(unit=unit, status="failed", transcript=(message,), message=message)

    @classmethod
    def trivial_pass(cls, unit: TestUnit) -> "Outcome":
        """Ok outcome for a unit that was not executed at all."""
        return cls(unit=unit, status="ok")
