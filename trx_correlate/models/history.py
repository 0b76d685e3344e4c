"""Models for the persisted test run history."""

from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from trx_correlate.models.base import Model
from trx_correlate.models.result import Outcome

type RunType = Literal["all-tests", "file-tests", "folder-tests", "single-method"]


class MethodRecord(Model):
    """One test method outcome within a recorded run."""

    method_name: str
    class_name: str = Field(..., description="Test file name without extension")
    file_path: str
    outcome: Outcome
    error_message: str | None = None


class RunSummary(Model):
    """Totals for a recorded run."""

    total: int = Field(..., ge=0)
    passed: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    run_type: RunType
    target: str | None = Field(
        default=None, description="File, folder or method the run was scoped to"
    )


class RunRecord(Model):
    """A single ingested test run."""

    timestamp: str
    run_id: str
    run_type: RunType
    summary: RunSummary
    methods: Sequence[MethodRecord] = Field(default_factory=list)
    files_involved: Sequence[str] = Field(default_factory=list)
    project_root: str
    success: bool
    message: str
    report_path: str | None = None
    command_executed: str | None = None


class HistoryDatabase(Model):
    """All recorded runs of a project, oldest first."""

    version: str = "1.0"
    created: str
    last_updated: str
    total_runs: int = Field(default=0, ge=0)
    runs: Sequence[RunRecord] = Field(default_factory=list)
