"""Tests for the correlator facade."""

import logging
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from trx_correlate.correlator import TestCorrelator
from trx_correlate.models.config import CorrelatorConfig
from trx_correlate.resolver import MethodReferenceResolver
from trx_correlate.testing.factories import (
    TestFileResultFactory,
    TestMethodResultFactory,
)
from trx_correlate.testing.finders import InMemoryFileFinder
from trx_correlate.testing.reports import simple_report

ORDER_TESTS = "/repo/Shop.Tests/OrderServiceTests.cs"


def make_correlator(
    *paths: str, resolver: MethodReferenceResolver | None = None
) -> TestCorrelator:
    """Create a correlator over an in-memory file list."""
    finder = InMemoryFileFinder(paths=list(paths))
    return TestCorrelator(
        config=CorrelatorConfig(),
        finder=finder,
        resolver=resolver or Mock(spec=MethodReferenceResolver),
    )


class TestIngest:
    """Tests for TestCorrelator.ingest."""

    async def test_stores_results_by_file(self) -> None:
        """A valid report replaces the store with per-file results."""
        correlator = make_correlator(ORDER_TESTS)
        report = simple_report(
            "Shop.Tests.OrderServiceTests",
            [("A_Works", "Passed", None), ("B_Fails", "Failed", "boom")],
        )

        assert await correlator.ingest(report) is True

        result = correlator.result_for(ORDER_TESTS)
        assert result is not None
        assert result.state == "fail"
        assert [m.method_name for m in correlator.failed_methods(ORDER_TESTS)] == [
            "B_Fails"
        ]

    async def test_malformed_report_keeps_previous_results(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A rejected report leaves the store untouched."""
        correlator = make_correlator(ORDER_TESTS)
        await correlator.ingest(
            simple_report("Shop.Tests.OrderServiceTests", [("A_Works", "Passed", None)])
        )

        with caplog.at_level(logging.WARNING):
            assert await correlator.ingest("<TestRun />") is False

        assert correlator.result_for(ORDER_TESTS) is not None
        assert "seems empty or malformed" in caplog.text

    async def test_new_report_replaces_old_results(self) -> None:
        """Files absent from the newer report are no longer stored."""
        other = "/repo/Shop.Tests/CartControllerTests.cs"
        correlator = make_correlator(ORDER_TESTS, other)
        await correlator.ingest(
            simple_report("Shop.Tests.OrderServiceTests", [("A_Works", "Passed", None)])
        )

        await correlator.ingest(
            simple_report("Shop.Tests.CartControllerTests", [("B_Works", "Passed", None)])
        )

        assert correlator.result_for(ORDER_TESTS) is None
        assert [r.file_path for r in correlator.results()] == [other]

    async def test_ingest_file_missing(self, tmp_path: Path) -> None:
        """An unreadable report file is rejected."""
        correlator = make_correlator()

        assert await correlator.ingest_file(tmp_path / "missing.trx") is False
        assert correlator.results() == []


class TestQueries:
    """Tests for result lookups."""

    def test_unknown_file_lookups(self) -> None:
        """Unknown files yield None and an empty method list."""
        correlator = make_correlator()

        assert correlator.result_for("/nowhere.cs") is None
        assert correlator.failed_methods("/nowhere.cs") == []

    def test_replace_all_accepts_sequence(self) -> None:
        """Results given as a sequence are keyed by their file path."""
        correlator = make_correlator()
        result = TestFileResultFactory.build(file_path=ORDER_TESTS)

        correlator.replace_all([result])

        assert correlator.result_for(Path(ORDER_TESTS)) is result


class TestReferencedFiles:
    """Tests for TestCorrelator.referenced_files."""

    async def test_resolves_and_caches(self) -> None:
        """The first call resolves, later calls reuse the stored list."""
        resolver = Mock(spec=MethodReferenceResolver)
        resolver.resolve = AsyncMock(return_value=["/repo/Shop/OrderService.cs"])
        correlator = make_correlator(resolver=resolver)
        method = TestMethodResultFactory.build(method_name="B_Fails", outcome="Failed")

        first = await correlator.referenced_files(method, ORDER_TESTS)
        second = await correlator.referenced_files(method, ORDER_TESTS)

        assert first == second == ["/repo/Shop/OrderService.cs"]
        assert method.referenced_files == ["/repo/Shop/OrderService.cs"]
        resolver.resolve.assert_awaited_once_with("B_Fails", ORDER_TESTS)

    async def test_empty_result_is_resolved_again(self) -> None:
        """An empty cached list does not stop a later resolution."""
        resolver = Mock(spec=MethodReferenceResolver)
        resolver.resolve = AsyncMock(return_value=[])
        correlator = make_correlator(resolver=resolver)
        method = TestMethodResultFactory.build(outcome="Failed")

        await correlator.referenced_files(method, ORDER_TESTS)
        await correlator.referenced_files(method, ORDER_TESTS)

        assert resolver.resolve.await_count == 2


class TestSession:
    """Tests for TestCorrelator.session."""

    async def test_store_cleared_on_exit(self, tmp_path: Path) -> None:
        """Results do not outlive the session."""
        async with TestCorrelator.session(tmp_path) as correlator:
            correlator.replace_all([TestFileResultFactory.build(file_path=ORDER_TESTS)])
            assert len(correlator.results()) == 1

        assert correlator.results() == []

    async def test_for_workspace_searches_absolute_root(self, tmp_path: Path) -> None:
        """The workspace finder prunes build output and excluded directories."""
        correlator = TestCorrelator.for_workspace(tmp_path)

        assert correlator.finder.root.is_absolute()
        assert set(correlator.finder.excluded_dirs) == {"node_modules", "bin", "obj"}


class TestMethodLine:
    """Tests for TestCorrelator.method_line."""

    async def test_returns_declaration_line(self, tmp_path: Path) -> None:
        """An attributed method is located at its attribute, counting from one."""
        source = tmp_path / "OrderServiceTests.cs"
        source.write_text(
            "public class OrderServiceTests\n"
            "{\n"
            "    [Fact]\n"
            "    public void B_Fails()\n"
            "    {\n"
            "    }\n"
            "}\n"
        )
        correlator = make_correlator()

        assert await correlator.method_line("B_Fails", source) == 3

    async def test_unknown_method(self, tmp_path: Path) -> None:
        """A method missing from the file has no line."""
        source = tmp_path / "OrderServiceTests.cs"
        source.write_text("public class OrderServiceTests {}\n")
        correlator = make_correlator()

        assert await correlator.method_line("B_Fails", source) is None

    async def test_unreadable_file(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A missing test file is logged and has no line."""
        correlator = make_correlator()

        with caplog.at_level(logging.WARNING):
            line = await correlator.method_line("B_Fails", tmp_path / "Gone.cs")

        assert line is None
        assert "Cannot read test file" in caplog.text
