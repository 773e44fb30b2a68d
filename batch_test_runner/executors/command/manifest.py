"""Command executor manifest."""

from batch_test_runner.executors.manifest import ExecutorManifest
from batch_test_runner.executors.command.config import CommandExecutorConfig
from batch_test_runner.executors.command.executor import CommandExecutor

command_manifest = ExecutorManifest(
    config_cls=CommandExecutorConfig,
    executor_factory=CommandExecutor.from_config,
)
