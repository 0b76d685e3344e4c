"""CLI entry point for correlating a TRX report with the workspace sources."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, get_args

from trx_correlate.config_loader import find_config_file, load_config
from trx_correlate.correlator import TestCorrelator
from trx_correlate.history import append_run, build_run_record
from trx_correlate.models.config import CorrelatorConfig
from trx_correlate.models.history import RunType
from trx_correlate.models.result import TestFileResult
from trx_correlate.workspace import (
    detect_project_root,
    find_report_files,
    summarize_categories,
)

STATE_SYMBOLS = {
    "pass": "✅",
    "fail": "❌",
}

ERROR_PREVIEW_LENGTH = 100


def short_error(message: str | None) -> str:
    """First line of an error message, truncated for display."""
    lines = message.strip().splitlines() if message else []
    if not lines:
        return "Test failed"
    first_line = lines[0]
    if len(first_line) > ERROR_PREVIEW_LENGTH:
        return first_line[:ERROR_PREVIEW_LENGTH] + "..."
    return first_line


def log_results_summary(log: logging.Logger, results: Sequence[TestFileResult]) -> None:
    """Log a formatted summary of per-file results and failed methods."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for summary in summarize_categories(results):
        symbol = STATE_SYMBOLS["fail" if summary.has_failures else "pass"]
        log.info(
            "%s %s (%d)",
            symbol,
            summary.category,
            summary.passed + summary.failed,
        )

    for result in results:
        log.info(
            "%s %s: %d passed, %d failed",
            STATE_SYMBOLS[result.state],
            Path(result.file_path).name,
            result.counts.passed,
            result.counts.failed,
        )
        for method in result.failed_methods:
            log.info("  %s: %s", method.method_name, short_error(method.error_message))


async def load_effective_config(
    workspace: Path, config_path: Path | None
) -> CorrelatorConfig:
    """Load the explicit config file, a discovered one, or the defaults."""
    if config_path is None:
        config_path = find_config_file(workspace)
    if config_path is None:
        return CorrelatorConfig()
    return await load_config(config_path)


async def run(
    workspace: Path,
    report_path: Path | None = None,
    config_path: Path | None = None,
    resolve_references: bool = False,
    run_type: RunType = "all-tests",
    target: str | None = None,
    record_history: bool = True,
) -> int:
    """Ingest a report, print the correlated results and return an exit code."""
    log = logging.getLogger("trx_correlate")

    config = await load_effective_config(workspace, config_path)
    project_root = await detect_project_root(workspace, config)
    log.info("Project root: %s", project_root)

    if report_path is None:
        reports = await find_report_files(project_root, config)
        if not reports:
            log.error("No .trx report found under %s", project_root)
            print(json.dumps({"total": 0, "files": []}))
            return 2
        report_path = reports[0]

    async with TestCorrelator.session(project_root, config) as correlator:
        if not await correlator.ingest_file(report_path):
            print(json.dumps({"total": 0, "files": []}))
            return 2

        results = correlator.results()
        log_results_summary(log, results)

        references: dict[tuple[str, str], Sequence[str]] = {}
        if resolve_references:
            references = await resolve_failed_references(correlator, results)

        lines = await locate_failed_methods(correlator, results)

        print(json.dumps(format_output(results, references, lines), indent=2))

        if record_history and results:
            record = build_run_record(
                results,
                project_root,
                run_type=run_type,
                target=target,
                report_path=report_path,
                command_executed=" ".join(sys.argv) or None,
            )
            await append_run(project_root / config.history_file, record)

    return 1 if any(result.state == "fail" for result in results) else 0


async def resolve_failed_references(
    correlator: TestCorrelator, results: Sequence[TestFileResult]
) -> dict[tuple[str, str], Sequence[str]]:
    """Resolve referenced files for every failed method concurrently."""
    failed = [
        (result.file_path, method)
        for result in results
        for method in result.failed_methods
    ]
    resolved = await asyncio.gather(
        *(correlator.referenced_files(method, path) for path, method in failed)
    )
    return {
        (path, method.method_name): files
        for (path, method), files in zip(failed, resolved, strict=True)
    }


async def locate_failed_methods(
    correlator: TestCorrelator, results: Sequence[TestFileResult]
) -> dict[tuple[str, str], int | None]:
    """Declaration line of every failed method, keyed by file and method."""
    failed = [
        (result.file_path, method.method_name)
        for result in results
        for method in result.failed_methods
    ]
    found = await asyncio.gather(
        *(correlator.method_line(name, path) for path, name in failed)
    )
    return dict(zip(failed, found, strict=True))

def format_output(
    results: Sequence[TestFileResult],
    references: Mapping[tuple[str, str], Sequence[str]] | None = None,
    lines: Mapping[tuple[str, str], int | None] | None = None,
) -> dict[str, Any]:
    """Format file results for JSON output.

    Failed methods carry a ``line`` when their declaration was found and
    ``referenced_files`` when references were resolved for them.
    """
    references = references or {}
    lines = lines or {}
    files: list[dict[str, Any]] = []
    for result in results:
        failed_methods: list[dict[str, Any]] = []
        for method in result.failed_methods:
            entry: dict[str, Any] = {
                "method": method.method_name,
                "error_message": method.error_message,
            }
            key = (result.file_path, method.method_name)
            if lines.get(key) is not None:
                entry["line"] = lines[key]
            if key in references:
                entry["referenced_files"] = list(references[key])
            failed_methods.append(entry)

        files.append(
            {
                "file_path": result.file_path,
                "state": result.state,
                "passed": result.counts.passed,
                "failed": result.counts.failed,
                "failed_methods": failed_methods,
            }
        )

    return {
        "total": sum(result.counts.total for result in results),
        "passed": sum(result.counts.passed for result in results),
        "failed": sum(result.counts.failed for result in results),
        "files": files,
    }


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Correlate TRX test results with the source files they exercise"
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        default=Path.cwd(),
        help="Workspace directory to search (default: current directory)",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="TRX report to ingest (default: newest report in the results directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: .trx-correlate.yaml if present)",
    )
    parser.add_argument(
        "--references",
        action="store_true",
        help="Resolve the production files referenced by each failed test",
    )
    parser.add_argument(
        "--run-type",
        choices=get_args(RunType.__value__),
        default="all-tests",
        help="Scope of the test run, recorded in the history",
    )
    parser.add_argument(
        "--target",
        default=None,
        help="File, folder or method the run was scoped to",
    )
    parser.add_argument(
        "--no-history",
        action="store_true",
        help="Do not append this run to the history file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log heuristic decisions at debug level",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            workspace=args.workspace.absolute(),
            report_path=args.report,
            config_path=args.config,
            resolve_references=args.references,
            run_type=args.run_type,
            target=args.target,
            record_history=not args.no_history,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
