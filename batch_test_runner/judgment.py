"""Aggregation of outcomes into run totals and the pass/fail verdict."""

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from batch_test_runner.models.outcome import Outcome
from batch_test_runner.models.state import RunState, Summary, Verdict

if TYPE_CHECKING:
    from batch_test_runner.reporting import ReportingSink

log = logging.getLogger(__name__)

VERDICT_MESSAGES: dict[Verdict, str] = {
    "no-tests": "No tests to run.",
    "aborted": "Test Run ABORTED",
    "passed": "Test Run PASSED",
    "failed": "Test Run FAILED",
}


def accumulate(state: RunState, outcomes: Iterable[Outcome]) -> RunState:
    """Fold one group's outcomes into the run totals.

    Units missing from ``outcomes`` are left out of both totals and end up in
    the skipped remainder.
    """
    passed: list[Outcome] = []
    failed: list[Outcome] = []
    for outcome in outcomes:
        (passed if outcome.is_ok else failed).append(outcome)

    return replace(
        state,
        passed=(*state.passed, *passed),
        failed=(*state.failed, *failed),
    )


def is_success(state: RunState) -> bool:
    """The run passes only when the failure count equals the expected count.

    Fewer failures than expected is a failure too: the expected-failure
    baseline no longer matches.
    """
    return len(state.failed) == state.expected_failures


def classify(state: RunState) -> Verdict:
    if state.total_selected == 0:
        return "no-tests"
    if state.elapsed_millis == 0:
        return "aborted"
    if is_success(state):
        return "passed"
    return "failed"


def judge(state: RunState) -> Summary:
    """Compute the summary of a finished or aborted run."""
    passed = len(state.passed)
    failed = len(state.failed)
    return Summary(
        passed=passed,
        failed=failed,
        skipped=state.total_selected - (passed + failed),
        expected_failures=state.expected_failures,
        elapsed_millis=state.elapsed_millis,
        success=is_success(state),
        verdict=classify(state),
        failed_outcomes=tuple(state.failed),
    )


def finalize(state: RunState, sink: "ReportingSink") -> Summary | None:
    """Issue the summary report for ``state`` once.

    Returns:
        The summary, or None if this state was already summarized

    """
    if state.summarized:
        log.debug("Summary already issued, skipping")
        return None
    state.summarized = True

    summary = judge(state)
    sink.report_summary(summary)
    return summary


def pass_fail_string(passed: int, failed: int, skipped: int) -> str:
    """Format counts as e.g. ``3/5 passed, 1 failed, 1 skipped``."""
    total = passed + failed + skipped
    parts = [f"{passed}/{total} passed"]
    if failed:
        parts.append(f"{failed} failed")
    if skipped:
        parts.append(f"{skipped} skipped")
    return ", ".join(parts)


def elapsed_string(millis: int) -> str:
    """Format a duration as ``HH:MM:SS``."""
    seconds = millis // 1000
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def verdict_message(verdict: Verdict) -> str:
    return VERDICT_MESSAGES[verdict]
