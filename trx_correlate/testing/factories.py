"""Test factories for generating result data."""

from polyfactory import Use
from polyfactory.factories import DataclassFactory

from trx_correlate.models.result import (
    ParsedOutcome,
    ResultCounts,
    TestFileResult,
    TestMethodResult,
)


class ParsedOutcomeFactory(DataclassFactory[ParsedOutcome]):
    """Factory for ParsedOutcome."""

    __model__ = ParsedOutcome

    class_name = "Shop.Tests.OrderServiceTests"
    outcome = "Passed"
    error_detail = None


class TestMethodResultFactory(DataclassFactory[TestMethodResult]):
    """Factory for TestMethodResult."""

    __test__ = False

    __model__ = TestMethodResult

    outcome = "Passed"
    error_message = None
    referenced_files = Use(list)


class TestFileResultFactory(DataclassFactory[TestFileResult]):
    """Factory for TestFileResult with no methods recorded yet."""

    __test__ = False

    __model__ = TestFileResult

    state = "pass"
    counts = Use(ResultCounts)
    methods = Use(list)
