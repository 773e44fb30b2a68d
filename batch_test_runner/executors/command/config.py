"""Configuration for the command executor."""

from collections.abc import Sequence

from pydantic import BaseModel, Field, PositiveFloat


class CommandExecutorConfig(BaseModel):
    """Configuration for the command executor."""

    command: Sequence[str] = Field(
        default=("sh",), description="Command prefix; the test path is appended"
    )
    unit_timeout: PositiveFloat | None = Field(
        default=None, description="Seconds before a single unit is killed"
    )
    # Rewrite mismatching .check files instead of failing
    update_check: bool = False
    env: dict[str, str] = Field(default_factory=dict)
