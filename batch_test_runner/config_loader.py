"""Load harness configuration from YAML files."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from batch_test_runner.config import HarnessConfig


def load_config(path: Path) -> HarnessConfig:
    """Load and validate a harness config file.

    Args:
        path: Path to a YAML file whose keys match HarnessConfig fields

    Returns:
        Validated configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, is not valid YAML, or fails validation

    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty config file: {path}")

    try:
        return HarnessConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid harness config schema in {path}: {e}") from e
