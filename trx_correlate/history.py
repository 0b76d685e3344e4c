"""Append ingested runs to a JSON history file in the project root."""

import asyncio
import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from trx_correlate.models.history import (
    HistoryDatabase,
    MethodRecord,
    RunRecord,
    RunSummary,
    RunType,
)
from trx_correlate.models.result import TestFileResult

log = logging.getLogger(__name__)


def build_run_record(
    results: Sequence[TestFileResult],
    project_root: Path,
    run_type: RunType = "all-tests",
    target: str | None = None,
    report_path: Path | None = None,
    command_executed: str | None = None,
) -> RunRecord:
    """Summarize a run's file results into a history record."""
    methods = [
        MethodRecord(
            method_name=method.method_name,
            class_name=Path(result.file_path).stem,
            file_path=result.file_path,
            outcome=method.outcome,
            error_message=method.error_message,
        )
        for result in results
        for method in result.methods
    ]
    passed = sum(result.counts.passed for result in results)
    failed = sum(result.counts.failed for result in results)
    total = sum(result.counts.total for result in results)

    return RunRecord(
        timestamp=datetime.now(timezone.utc).isoformat(),
        run_id=f"run_{uuid.uuid4().hex}",
        run_type=run_type,
        summary=RunSummary(
            total=total,
            passed=passed,
            failed=failed,
            run_type=run_type,
            target=target,
        ),
        methods=methods,
        files_involved=[result.file_path for result in results],
        project_root=str(project_root),
        success=failed == 0,
        message=format_run_message(run_type, passed, failed, target),
        report_path=str(report_path) if report_path else None,
        command_executed=command_executed,
    )


def format_run_message(
    run_type: RunType, passed: int, failed: int, target: str | None
) -> str:
    """One-line description of a run."""
    match run_type:
        case "all-tests":
            return f"Ran all tests: {passed} passed, {failed} failed"
        case "file-tests" | "folder-tests":
            return f"Ran tests in {target}: {passed} passed, {failed} failed"
        case "single-method":
            return f"Ran single test {target}: {'PASSED' if failed == 0 else 'FAILED'}"


async def load_history(history_path: Path) -> HistoryDatabase:
    """Read the history file, starting fresh if it is missing or invalid."""
    now = datetime.now(timezone.utc).isoformat()
    if not history_path.is_file():
        return HistoryDatabase(created=now, last_updated=now)

    try:
        content = await asyncio.to_thread(history_path.read_text, encoding="utf-8")
        return HistoryDatabase.model_validate_json(content)
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        log.warning("Could not read history %s, starting a new one: %s", history_path, e)
        return HistoryDatabase(created=now, last_updated=now)


async def append_run(history_path: Path, record: RunRecord) -> HistoryDatabase | None:
    """Add a run to the history file.

    Returns:
        The updated history, or None if it could not be written

    """
    history = await load_history(history_path)
    runs = [*history.runs, record]
    updated = history.model_copy(
        update={
            "runs": runs,
            "total_runs": len(runs),
            "last_updated": record.timestamp,
        }
    )

    try:
        await asyncio.to_thread(
            history_path.write_text, updated.model_dump_json(indent=2), encoding="utf-8"
        )
    except OSError as e:
        log.error("Failed to save test results to %s: %s", history_path, e)
        return None

    log.info(
        "Saved run %s to %s (%d run(s) stored)",
        record.run_id,
        history_path,
        updated.total_runs,
    )
    return updated
