"""Base model for configuration and request data."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model rejecting unknown keys, so config typos fail loudly."""

    model_config = ConfigDict(frozen=True, extra="forbid")
