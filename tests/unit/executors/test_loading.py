"""Tests for executor loading module."""

from unittest.mock import Mock, patch

import pytest

from batch_test_runner.executors.command import command_manifest
from batch_test_runner.executors.loading import (
    ExecutorNotFoundError,
    InvalidExecutorError,
    available_executors,
    load_executor_manifest,
)


def entry(name: str, loaded: object) -> Mock:
    mock = Mock(value=f"somewhere:{name}")
    mock.name = name
    mock.load.return_value = loaded
    return mock


def test_load_executor_manifest_returns_manifest() -> None:
    """Loads executor manifest by key."""
    manifest = load_executor_manifest("command")

    assert manifest is command_manifest


def test_available_executors_lists_installed_keys() -> None:
    """The bundled command executor is discoverable."""
    assert "command" in available_executors()


def test_available_executors_are_sorted_and_distinct() -> None:
    """Keys registered twice are listed once, in order."""
    entries = [entry("zeta", None), entry("alpha", None), entry("zeta", None)]

    with patch(
        "batch_test_runner.executors.loading.entry_points", return_value=entries
    ):
        assert available_executors() == ["alpha", "zeta"]


def test_unknown_executor_names_known_keys() -> None:
    """Raises ExecutorNotFoundError listing what is installed."""
    with pytest.raises(ExecutorNotFoundError) as exc_info:
        load_executor_manifest("unknown-executor")

    message = str(exc_info.value)
    assert "unknown-executor" in message
    assert "command" in message


def test_unknown_executor_with_nothing_installed() -> None:
    """The error says so when no executor is installed at all."""
    with (
        patch("batch_test_runner.executors.loading.entry_points", return_value=[]),
        pytest.raises(ExecutorNotFoundError, match="none installed"),
    ):
        load_executor_manifest("command")


def test_entry_point_that_is_not_a_manifest_is_rejected() -> None:
    """An entry point loading some other object raises InvalidExecutorError."""
    with (
        patch(
            "batch_test_runner.executors.loading.entry_points",
            return_value=[entry("broken", object())],
        ),
        pytest.raises(InvalidExecutorError, match="not an executor manifest"),
    ):
        load_executor_manifest("broken")


def test_duplicate_registration_uses_first_entry() -> None:
    """The first registration of a key wins."""
    first = entry("command", command_manifest)
    second = entry("command", object())

    with patch(
        "batch_test_runner.executors.loading.entry_points",
        return_value=[first, second],
    ):
        assert load_executor_manifest("command") is command_manifest

    second.load.assert_not_called()
