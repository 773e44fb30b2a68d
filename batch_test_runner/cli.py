"""CLI entry point for the batch test runner."""

import argparse
import json
import logging
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from batch_test_runner.config import HarnessConfig
from batch_test_runner.config_loader import load_config
from batch_test_runner.executors.loading import (
    available_executors,
    load_executor_manifest,
)
from batch_test_runner.models.state import Summary
from batch_test_runner.models.unit import TestUnit
from batch_test_runner.reporting import LoggingReporter, format_output
from batch_test_runner.resolver import FileSystemResolver
from batch_test_runner.runner import HarnessRunner, SelectionRequest
from batch_test_runner.selector import TestSelector

EXPECTED_FAILURES_ENV = "BATCH_TEST_EXPECTED_FAILURES"


@dataclass(kw_only=True)
class CapturingReporter(LoggingReporter):
    """Logging reporter that also keeps the summary for JSON output."""

    summary: Summary | None = None

    def report_summary(self, summary: Summary) -> None:
        self.summary = summary
        super().report_summary(summary)


def build_config(args: argparse.Namespace) -> HarnessConfig:
    """Merge the optional config file with command line overrides."""
    config = load_config(args.config) if args.config else HarnessConfig()

    overrides: dict[str, Any] = {}
    if args.root is not None:
        overrides["test_root"] = args.root
    if args.jobs is not None:
        overrides["max_concurrency"] = args.jobs
    if args.timeout is not None:
        overrides["overall_timeout"] = args.timeout
    if args.expected_failures is not None:
        overrides["expected_failure_count"] = args.expected_failures
    elif env_value := os.environ.get(EXPECTED_FAILURES_ENV):
        overrides["expected_failure_count"] = int(env_value)
    if args.rerun_only:
        overrides["rerun_only"] = True
    if args.verbose:
        overrides["verbose"] = True
    if args.terse:
        overrides["terse"] = True

    return HarnessConfig.model_validate({**config.model_dump(), **overrides})


def run(
    config: HarnessConfig,
    request: SelectionRequest,
    executor_key: str,
    executor_config_json: str,
    *,
    json_output: bool = False,
    update_check: bool = False,
    exit_on_abandon: bool = False,
) -> int:
    """Run the selected tests and return the exit code.

    With ``exit_on_abandon`` the process ends immediately when a timeout left
    units running, instead of waiting for their worker threads at exit.
    """
    log = logging.getLogger("batch_test_runner")

    log.info("Loading executor: %s", executor_key)
    manifest = load_executor_manifest(executor_key)
    executor_config = json.loads(executor_config_json)
    if update_check:
        executor_config["update_check"] = True
    executor = manifest.executor_factory(manifest.config_cls(**executor_config))

    sink = CapturingReporter(log=log, verbose=config.verbose, terse=config.terse)
    selector = TestSelector(
        resolver=FileSystemResolver(root=config.test_root),
        sink=sink,
        standard_categories=config.standard_categories,
        verbose=config.verbose,
    )
    runner = HarnessRunner(
        config=config, selector=selector, executor=executor, sink=sink
    )

    success = runner.run(request)

    if json_output and sink.summary is not None:
        print(json.dumps(format_output(sink.summary), indent=2))

    exit_code = 0 if success else 1
    if exit_on_abandon and runner.abandoned_units:
        exit_now(exit_code, runner.abandoned_units)
    return exit_code


def exit_now(exit_code: int, abandoned: Sequence[TestUnit]) -> None:
    """Flush output and exit without joining the abandoned worker threads."""
    log = logging.getLogger("batch_test_runner")
    log.warning(
        "Exiting with %d abandoned test(s) still running: %s",
        len(abandoned),
        ", ".join(str(unit) for unit in abandoned),
    )
    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(exit_code)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a batch of tests in parallel, one category at a time"
    )
    parser.add_argument("paths", nargs="*", type=Path, help="Individual test paths")
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        dest="categories",
        help="Run every test in this category (repeatable)",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Run every standard category",
    )
    parser.add_argument("--grep", default="", help="Run tests mentioning this string")
    parser.add_argument(
        "--failed",
        action="store_true",
        help="Run tests that failed on the previous run",
    )
    parser.add_argument(
        "--rerun-only",
        action="store_true",
        help="Only execute tests with a failure log; mark the rest as passed",
    )
    parser.add_argument("--jobs", type=int, help="Worker pool size")
    parser.add_argument("--timeout", type=float, help="Seconds to wait per category")
    parser.add_argument(
        "--expected-failures",
        type=int,
        help=f"Exact failure count for a passing run (env: {EXPECTED_FAILURES_ENV})",
    )
    parser.add_argument(
        "--executor",
        default="command",
        help=f"Executor key (installed: {', '.join(available_executors())})",
    )
    parser.add_argument(
        "--executor-config",
        default="{}",
        help="JSON configuration for the executor",
    )
    parser.add_argument("--config", type=Path, help="YAML harness config file")
    parser.add_argument("--root", type=Path, help="Root of the test tree")
    parser.add_argument(
        "--update-check",
        action="store_true",
        help="Rewrite check files with the actual output",
    )
    parser.add_argument("--json", action="store_true", help="Print a JSON summary")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true")
    verbosity.add_argument("--terse", action="store_true")
    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = build_config(args)
    categories = list(config.standard_categories) if args.all else args.categories
    request = SelectionRequest(
        paths=args.paths,
        categories=categories,
        grep=args.grep,
        rerun_failed=args.failed,
    )

    exit_code = run(
        config,
        request,
        executor_key=args.executor,
        executor_config_json=args.executor_config,
        json_output=args.json,
        update_check=args.update_check,
        exit_on_abandon=True,
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
