"""Executor that runs each test unit as an external command."""

import logging
import os
import shlex
import subprocess
import time
from collections.abc import Mapping
from dataclasses import dataclass, field

from batch_test_runner.executors.base import UnitExecutor
from batch_test_runner.executors.command.config import CommandExecutorConfig
from batch_test_runner.models.outcome import Outcome, Transcript
from batch_test_runner.models.unit import TestUnit
from batch_test_runner.resolver import check_file_path, failure_log_path

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CommandExecutor(UnitExecutor):
    """Runs ``command + [test path]`` and compares output with a check file.

    A unit passes when the command exits with status 0 and, if a ``.check``
    file sits beside the test, its combined output matches that file. Failed
    runs leave a ``<name>-<category>.log`` file beside the test; passing runs
    remove it.
    """

    config: CommandExecutorConfig
    base_env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))

    @classmethod
    def from_config(cls, config: CommandExecutorConfig) -> "CommandExecutor":
        return cls(config=config)

    def has_failure_log(self, unit: TestUnit) -> bool:
        return failure_log_path(unit).is_file()

    def execute(self, unit: TestUnit) -> Outcome:
        transcript = Transcript()
        argv = [*self.config.command, str(unit.canonical)]
        transcript.add(shlex.join(argv))

        start = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                cwd=unit.canonical.parent,
                env={**self.base_env, **self.config.env},
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.config.unit_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            duration = time.monotonic() - start
            message = f"timed out after {self.config.unit_timeout} seconds"
            transcript.append(f"  # {message}")
            return self._failed(unit, transcript, duration, message, output="")
        duration = time.monotonic() - start

        output = completed.stdout or ""
        if completed.returncode != 0:
            message = f"exited with status {completed.returncode}"
            transcript.append(f"  # {message}")
            return self._failed(unit, transcript, duration, message, output)

        check_file = check_file_path(unit)
        if check_file.is_file():
            expected = check_file.read_text()
            if _normalize(output) != _normalize(expected):
                if not self.config.update_check:
                    transcript.add(f"diff {check_file.name} <output>")
                    message = f"output differs from {check_file.name}"
                    return self._failed(unit, transcript, duration, message, output)

                log.info("Updating check file %s", check_file)
                check_file.write_text(output)
                transcript.add(f"updated {check_file.name}")

        failure_log_path(unit).unlink(missing_ok=True)
        return Outcome(
            unit=unit,
            status="ok",
            transcript=transcript.entries,
            duration=duration,
        )

    def _failed(
        self,
        unit: TestUnit,
        transcript: Transcript,
        duration: float,
        message: str,
        output: str,
    ) -> Outcome:
        log_file = failure_log_path(unit)
        log_file.write_text(output)
        log.debug("Wrote failure log %s", log_file)
        return Outcome(
            unit=unit,
            status="failed",
            transcript=transcript.entries,
            duration=duration,
            message=message,
        )


def _normalize(text: str) -> str:
    return "\n".join(line.rstrip() for line in text.strip().splitlines())
