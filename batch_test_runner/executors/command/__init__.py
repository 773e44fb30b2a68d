"""Command executor module."""

from batch_test_runner.executors.command.config import CommandExecutorConfig
from batch_test_runner.executors.command.executor import CommandExecutor
from batch_test_runner.executors.command.manifest import command_manifest

__all__ = ["CommandExecutor", "CommandExecutorConfig", "command_manifest"]
