"""Discovery of installed executors through the entry point group."""

import logging
from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from batch_test_runner.executors.manifest import ExecutorManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "batch_test_runner.executors"


class ExecutorNotFoundError(Exception):
    """Raised when no installed executor is registered under a key."""


class InvalidExecutorError(Exception):
    """Raised when an executor entry point does not resolve to a manifest."""


def available_executors() -> Sequence[str]:
    """Return the sorted keys of every installed executor."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_executor_manifest(key: str) -> ExecutorManifest[Any]:
    """Resolve the manifest registered under ``key``.

    Raises:
        ExecutorNotFoundError: If nothing is registered under ``key``
        InvalidExecutorError: If the entry point loads something else

    """
    matches = list(entry_points(group=ENTRY_POINT_GROUP, name=key))
    if not matches:
        known = ", ".join(available_executors()) or "none installed"
        raise ExecutorNotFoundError(f"Unknown executor '{key}' (known: {known})")
    if len(matches) > 1:
        log.warning(
            "Executor '%s' is registered %d times, using %s",
            key,
            len(matches),
            matches[0].value,
        )

    entry = matches[0]
    manifest = entry.load()
    if not isinstance(manifest, ExecutorManifest):
        raise InvalidExecutorError(
            f"Executor '{key}' points at {entry.value}, "
            f"which is a {type(manifest).__name__}, not an executor manifest"
        )

    log.debug("Loaded executor '%s' from %s", key, entry.value)
    return manifest
