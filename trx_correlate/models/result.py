"""Models for parsed test outcomes and per-file aggregates."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

type Outcome = Literal["Passed", "Failed"]
type FileState = Literal["pass", "fail"]


@dataclass(frozen=True, kw_only=True)
class ParsedOutcome:
    """A single result entry bound to its test definition.

    Produced by the report parser; ``class_name`` is namespace-qualified
    with any assembly qualification already removed.
    """

    class_name: str
    method_name: str
    outcome: Outcome
    error_detail: str | None = None

    @property
    def short_class_name(self) -> str:
        """Class name without its namespace."""
        return self.class_name.rsplit(".", 1)[-1]


@dataclass(kw_only=True)
class TestMethodResult:
    """Outcome of one executed test method.

    ``referenced_files`` stays empty until the reference resolver fills it
    through :meth:`fill_referenced_files`.
    """

    __test__ = False

    method_name: str
    outcome: Outcome
    error_message: str | None = None
    referenced_files: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.outcome == "Failed"

    def fill_referenced_files(self, files: Sequence[str]) -> None:
        """Store resolved referenced files on the record."""
        self.referenced_files = list(files)


@dataclass(kw_only=True)
class ResultCounts:
    """Passed/failed tallies for one test file."""

    passed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed


@dataclass(kw_only=True)
class TestFileResult:
    """Aggregated results for one test source file."""

    __test__ = False

    file_path: str
    state: FileState = "pass"
    counts: ResultCounts = field(default_factory=ResultCounts)
    methods: list[TestMethodResult] = field(default_factory=list)

    def add_method(self, method: TestMethodResult) -> None:
        """Append a method result and update counts and state.

        The state only ever moves from ``pass`` to ``fail``.
        """
        self.methods.append(method)
        if method.failed:
            self.counts.failed += 1
            self.state = "fail"
        else:
            self.counts.passed += 1

    @property
    def failed_methods(self) -> list[TestMethodResult]:
        return [method for method in self.methods if method.failed]
