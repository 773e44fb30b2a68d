"""Executor manifest definition for the plugin system."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from batch_test_runner.executors.base import UnitExecutor

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class ExecutorManifest(Generic[ConfigT]):
    """Manifest describing an executor plugin.

    The manifest holds the configuration class and the factory building the
    executor from it, so executors are only imported once selected by key.
    """

    config_cls: type[ConfigT]
    executor_factory: Callable[[ConfigT], UnitExecutor]
