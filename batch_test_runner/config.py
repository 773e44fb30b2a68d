"""Configuration for a harness run."""

import os
from collections.abc import Sequence
from pathlib import Path

from pydantic import Field, NonNegativeInt, PositiveFloat, PositiveInt

from batch_test_runner.models.base import Model

DEFAULT_CATEGORIES = ("pos", "neg", "run", "regression", "integration")

# Overall wall-clock budget for one execution group, in seconds
DEFAULT_TIMEOUT = 4 * 60 * 60


class HarnessConfig(Model):
    """Values consumed by the selection, scheduling and judgment steps."""

    test_root: Path = Field(default=Path("tests/files"), description="Test tree root")
    standard_categories: Sequence[str] = Field(
        default=DEFAULT_CATEGORIES,
        description="Known categories, in execution priority order",
    )
    max_concurrency: PositiveInt = Field(
        default_factory=lambda: os.cpu_count() or 1,
        description="Worker pool size per group",
    )
    overall_timeout: PositiveFloat = Field(
        default=DEFAULT_TIMEOUT, description="Seconds to wait for each group"
    )
    expected_failure_count: NonNegativeInt = Field(
        default=0, description="Failures that must occur for the run to pass"
    )
    rerun_only: bool = Field(
        default=False,
        description="Only execute units that have persisted failure evidence",
    )
    verbose: bool = False
    terse: bool = False
