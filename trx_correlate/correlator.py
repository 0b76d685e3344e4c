"""Facade tying report ingestion, the result store and reference resolution."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from trx_correlate.aggregator import aggregate_outcomes, class_file_resolver
from trx_correlate.analysis.loading import load_inferrer
from trx_correlate.analysis.method_locator import locate_method_offset
from trx_correlate.file_finder import FileFinder, WorkspaceFileFinder
from trx_correlate.models.config import CorrelatorConfig
from trx_correlate.models.result import TestFileResult, TestMethodResult
from trx_correlate.report_parser import ReportFormatError, parse_report
from trx_correlate.resolver import MethodReferenceResolver
from trx_correlate.store import ResultStore

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TestCorrelator:
    """Owns one session's results and answers queries about them.

    Lookups for unknown files return None or empty lists rather than
    raising.
    """

    __test__ = False

    config: CorrelatorConfig
    finder: FileFinder
    resolver: MethodReferenceResolver
    store: ResultStore = field(default_factory=ResultStore)

    @classmethod
    def for_workspace(
        cls, workspace: Path, config: CorrelatorConfig | None = None
    ) -> "TestCorrelator":
        """Create a correlator searching the given workspace directory."""
        config = config or CorrelatorConfig()
        finder = WorkspaceFileFinder(
            root=workspace.absolute(), excluded_dirs=config.search_excluded_dirs
        )
        resolver = MethodReferenceResolver(
            finder=finder, inferrer=load_inferrer(config.inferrer), config=config
        )
        return cls(config=config, finder=finder, resolver=resolver)

    @classmethod
    @asynccontextmanager
    async def session(
        cls, workspace: Path, config: CorrelatorConfig | None = None
    ) -> AsyncGenerator["TestCorrelator", None]:
        """Correlator whose stored results are discarded when the session ends."""
        correlator = cls.for_workspace(workspace, config)
        try:
            yield correlator
        finally:
            correlator.store.clear()

    async def ingest_file(self, report_path: Path) -> bool:
        """Read a report file and ingest it.

        Returns:
            True if the store was replaced, False if the report was
            missing, unreadable or malformed

        """
        log.info("Reading report: %s", report_path)
        try:
            content = await asyncio.to_thread(report_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Cannot read report %s: %s", report_path, e)
            return False
        return await self.ingest(content)

    async def ingest(self, report_content: str) -> bool:
        """Parse a report and replace the stored results with it.

        A malformed report leaves the previous results untouched.

        Returns:
            True if the store was replaced

        """
        try:
            outcomes = parse_report(report_content)
        except ReportFormatError as e:
            log.warning("Report was parsed, but seems empty or malformed: %s", e)
            return False

        resolve = class_file_resolver(self.finder, self.config.source_extension)
        self.replace_all(await aggregate_outcomes(outcomes, resolve))
        return True

    def replace_all(
        self, results: Mapping[str, TestFileResult] | Sequence[TestFileResult]
    ) -> None:
        """Replace every stored result, keyed by file path."""
        if isinstance(results, Mapping):
            self.store.replace(results)
        else:
            self.store.replace({result.file_path: result for result in results})
        log.info("Stored results for %d test file(s)", len(self.store))

    def results(self) -> list[TestFileResult]:
        return self.store.values()

    def result_for(self, file_path: str | Path) -> TestFileResult | None:
        return self.store.get(file_path)

    def failed_methods(self, file_path: str | Path) -> list[TestMethodResult]:
        if (result := self.store.get(file_path)) is None:
            return []
        return result.failed_methods

    async def referenced_files(
        self, method: TestMethodResult, owner_file_path: str | Path
    ) -> Sequence[str]:
        """Production files a method depends on, resolved once and cached.

        An empty cached list is treated as unresolved, so a method with no
        referenced files is analyzed again on each call.
        """
        if method.referenced_files:
            return method.referenced_files

        files = await self.resolver.resolve(method.method_name, str(owner_file_path))
        method.fill_referenced_files(files)
        return method.referenced_files

    async def method_line(
        self, method_name: str, owner_file_path: str | Path
    ) -> int | None:
        """One-based line of a method declaration in its test file.

        Returns:
            The line number, or None if the file cannot be read or the
            method is not found in it

        """
        path = Path(owner_file_path)
        try:
            source_text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Cannot read test file %s: %s", path, e)
            return None

        offset = locate_method_offset(source_text, method_name)
        if offset < 0:
            log.debug("Method %s not found in %s", method_name, path)
            return None
        return source_text.count("\n", 0, offset) + 1
