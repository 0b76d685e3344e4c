"""In-memory store of the latest run's results."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from trx_correlate.models.result import TestFileResult


@dataclass
class ResultStore:
    """Test file results keyed by absolute path.

    The whole mapping is swapped in one assignment, so readers see either
    the previous run or the new one, never a mix.
    """

    _results: Mapping[str, TestFileResult] = field(default_factory=dict)

    def replace(self, results: Mapping[str, TestFileResult]) -> None:
        """Replace every stored result with a new run's results."""
        self._results = dict(results)

    def clear(self) -> None:
        self._results = {}

    def get(self, file_path: str | Path) -> TestFileResult | None:
        return self._results.get(str(file_path))

    def values(self) -> list[TestFileResult]:
        return list(self._results.values())

    def __contains__(self, file_path: object) -> bool:
        return str(file_path) in self._results

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)
