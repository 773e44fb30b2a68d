"""Tests for test unit identity and outcome models."""

from pathlib import Path

import pytest

from batch_test_runner.models.outcome import Outcome, Transcript
from batch_test_runner.models.unit import ExecutionGroup, Selection, TestUnit
from batch_test_runner.testing.factories import TestUnitFactory


def test_units_with_same_canonical_path_are_equal(tmp_path: Path) -> None:
    """Units compare by resolved path regardless of how they were referenced."""
    target = tmp_path / "run" / "hello.sh"
    target.parent.mkdir()
    target.touch()

    direct = TestUnit.from_path(target, "run")
    indirect = TestUnit.from_path(tmp_path / "run" / ".." / "run" / "hello.sh", "run")

    assert direct == indirect
    assert hash(direct) == hash(indirect)
    assert len({direct, indirect}) == 1
    assert indirect.path != direct.path


def test_units_with_different_paths_differ() -> None:
    """Distinct canonical paths are distinct units."""
    assert TestUnitFactory.build() != TestUnitFactory.build()


def test_selection_counts_units_across_groups() -> None:
    """total_selected sums every group's units."""
    selection = Selection(
        groups=[
            ExecutionGroup(category="pos", units=TestUnitFactory.batch(2)),
            ExecutionGroup(category="run", units=TestUnitFactory.batch(3)),
        ]
    )

    assert selection.total_selected == 5


def test_empty_selection() -> None:
    """An empty selection has nothing to run."""
    assert Selection(groups=[]).total_selected == 0


class TestTranscript:
    """Tests for Transcript."""

    def test_add_records_entries_in_order(self) -> None:
        """Entries keep insertion order."""
        transcript = Transcript().add("compile a.sh").add("run a.sh")

        assert transcript.entries == ("compile a.sh", "run a.sh")
        assert len(transcript) == 2

    def test_append_extends_last_entry(self) -> None:
        """append adds text to the most recent entry."""
        transcript = Transcript().add("run a.sh").append(" # exited with status 1")

        assert transcript.entries == ("run a.sh # exited with status 1",)

    def test_append_on_empty_transcript_starts_entry(self) -> None:
        """append with no entries behaves like add."""
        assert Transcript().append("first").entries == ("first",)


class TestOutcome:
    """Tests for Outcome constructors."""

    def test_failure_names_unit_and_cause(self) -> None:
        """Wrapped executor errors carry unit identity and cause."""
        unit = TestUnitFactory.build()

        outcome = Outcome.failure(unit, RuntimeError("boom"))

        assert outcome.status == "failed"
        assert not outcome.is_ok
        assert outcome.unit is unit
        assert outcome.message is not None
        assert str(unit.canonical) in outcome.message
        assert "RuntimeError: boom" in outcome.message
        assert outcome.transcript == (outcome.message,)

    def test_trivial_pass(self) -> None:
        """trivial_pass produces an Ok outcome with an empty transcript."""
        unit = TestUnitFactory.build()

        outcome = Outcome.trivial_pass(unit)

        assert outcome.is_ok
        assert outcome.transcript == ()

    @pytest.mark.parametrize(
        ("status", "expected"),
        [("ok", True), ("failed", False), ("skipped", False)],
    )
    def test_is_ok(self, status: str, expected: bool) -> None:
        """Only the ok tag counts as passing."""
        outcome = Outcome(unit=TestUnitFactory.build(), status=status)  # type: ignore[arg-type]

        assert outcome.is_ok is expected
