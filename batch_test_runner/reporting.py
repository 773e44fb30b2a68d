"""Reporting of unit outcomes, warnings and the run summary."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from batch_test_runner.judgment import elapsed_string, pass_fail_string, verdict_message
from batch_test_runner.models.outcome import Outcome, OutcomeStatus
from batch_test_runner.models.state import Summary

STATUS_SYMBOLS: Mapping[OutcomeStatus, str] = {
    "ok": "✓",
    "failed": "✗",
    "skipped": "-",
}


class ReportingSink(ABC):
    """Receives outcomes as they arrive, warnings, and the final summary."""

    @abstractmethod
    def report_unit(self, outcome: Outcome) -> None:
        """Report a single unit's outcome. May be called from worker threads."""

    @abstractmethod
    def report_summary(self, summary: Summary) -> None:
        """Report the final summary of a run."""

    @abstractmethod
    def warn(self, message: str) -> None:
        """Report a non-fatal anomaly."""


def render_transcript(outcome: Outcome) -> Sequence[str]:
    """Prefix transcript entries, marking the last one of a failed outcome."""
    entries = list(outcome.transcript)
    if not entries:
        return []
    if outcome.is_ok:
        return [f"% {entry}" for entry in entries]
    return [f"% {entry}" for entry in entries[:-1]] + [f"! {entries[-1]}"]


def format_output(summary: Summary) -> dict[str, Any]:
    """Format a summary for JSON output."""
    return {
        "total": summary.total,
        "passed": summary.passed,
        "failed": summary.failed,
        "skipped": summary.skipped,
        "expected_failures": summary.expected_failures,
        "success": summary.success,
        "verdict": summary.verdict,
        "elapsed_millis": summary.elapsed_millis,
        "failed_tests": [
            {
                "path": str(outcome.unit.path),
                "category": outcome.unit.category,
                "message": outcome.message,
            }
            for outcome in summary.failed_outcomes
        ],
    }


@dataclass(kw_only=True)
class LoggingReporter(ReportingSink):
    """Reporting sink that writes through the standard logging module."""

    log: logging.Logger = field(
        default_factory=lambda: logging.getLogger("batch_test_runner")
    )
    verbose: bool = False
    terse: bool = False
    rerun_command: str = "batch-test-runner"
    warnings: list[str] = field(default_factory=list)

    def report_unit(self, outcome: Outcome) -> None:
        if self.terse and outcome.is_ok:
            return
        symbol = STATUS_SYMBOLS[outcome.status]
        self.log.info(
            "%s %s: %s (%.2fs)",
            symbol,
            outcome.unit.path,
            outcome.status,
            outcome.duration,
        )
        if outcome.message and not outcome.is_ok:
            self.log.info("  Message: %s", outcome.message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        self.log.warning(message)

    def report_summary(self, summary: Summary) -> None:
        if summary.failed_outcomes:
            if self.verbose:
                self.log.info("##### Transcripts from failed tests #####")
                for outcome in summary.failed_outcomes:
                    self.log.info("# %s %s", self.rerun_command, outcome.unit.path)
                    for line in render_transcript(outcome):
                        self.log.info(line)

            paths = " \\\n  ".join(str(o.unit.path) for o in summary.failed_outcomes)
            self.log.info("# Failed test paths (this command will update checkfiles)")
            self.log.info("%s --update-check \\\n  %s", self.rerun_command, paths)

        message = pass_fail_string(summary.passed, summary.failed, summary.skipped)
        if summary.elapsed_millis > 0:
            message += f" (elapsed time: {elapsed_string(summary.elapsed_millis)})"
        self.log.info(message)
        self.log.info(verdict_message(summary.verdict))
