"""Locate the project root and its reports, and group test files."""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from trx_correlate.file_finder import WorkspaceFileFinder
from trx_correlate.models.config import CorrelatorConfig
from trx_correlate.models.result import TestFileResult

log = logging.getLogger(__name__)

type Category = Literal["Controllers", "Services"]

CATEGORIES: Sequence[Category] = ("Controllers", "Services")


@dataclass(frozen=True, kw_only=True)
class CategorySummary:
    """Roll-up of the results of one category of test files."""

    category: Category
    file_count: int
    passed: int
    failed: int
    has_failures: bool


async def detect_project_root(workspace: Path, config: CorrelatorConfig) -> Path:
    """Determine the root directory of the project under test.

    Order: the configured ``project_root_path``, the directory of the first
    solution file, the parent of the directory shared by all test files,
    then the workspace itself.
    """
    if config.project_root_path:
        configured = workspace / config.project_root_path
        if configured.is_dir():
            return configured
        log.warning(
            "Configured project root %r does not exist, falling back to detection",
            config.project_root_path,
        )

    finder = WorkspaceFileFinder(root=workspace, excluded_dirs=config.excluded_dirs)

    if solutions := await finder.find_files("*.sln", limit=1):
        solution_dir = Path(solutions[0]).parent
        log.info("Found solution file %s", solutions[0])
        return solution_dir

    if test_files := await finder.find_files(config.test_file_glob):
        common = find_common_parent([os.path.dirname(f) for f in test_files])
        potential_root = Path(common).parent
        if potential_root.is_dir():
            log.info("Inferred project root from test files: %s", potential_root)
            return potential_root

    log.info("Using workspace as project root: %s", workspace)
    return workspace


def find_common_parent(directories: Sequence[str]) -> str:
    """Longest leading path shared by all directories."""
    if not directories:
        return ""
    if len(directories) == 1:
        return directories[0]

    split = [directory.split(os.sep) for directory in directories]
    common: list[str] = []
    for segments in zip(*split):
        if any(segment != segments[0] for segment in segments):
            break
        common.append(segments[0])
    return os.sep.join(common)


async def find_report_files(project_root: Path, config: CorrelatorConfig) -> list[Path]:
    """Report files under any results directory, newest first."""
    finder = WorkspaceFileFinder(root=project_root, excluded_dirs=config.excluded_dirs)
    reports = [
        Path(path)
        for path in await finder.find_files("*.trx")
        if Path(path).parent.name == config.results_dir
    ]
    return sorted(reports, key=lambda path: path.stat().st_mtime, reverse=True)


def categorize_test_file(file_path: str) -> Category:
    """Assign a test file to Controllers or Services.

    Directory names decide first, then the file name; anything else counts
    as a controller test.
    """
    parts = Path(file_path).parts[:-1]
    if "Controllers" in parts:
        return "Controllers"
    if "Services" in parts or "Service" in parts:
        return "Services"

    stem = Path(file_path).stem.removesuffix("Tests")
    if "Controller" in stem:
        return "Controllers"
    if "Service" in stem:
        return "Services"
    return "Controllers"


def summarize_categories(results: Sequence[TestFileResult]) -> list[CategorySummary]:
    """Per-category totals for categories that have results."""
    summaries: list[CategorySummary] = []
    for category in CATEGORIES:
        members = [r for r in results if categorize_test_file(r.file_path) == category]
        if not members:
            continue
        summaries.append(
            CategorySummary(
                category=category,
                file_count=len(members),
                passed=sum(r.counts.passed for r in members),
                failed=sum(r.counts.failed for r in members),
                has_failures=any(r.state == "fail" for r in members),
            )
        )
    return summaries
