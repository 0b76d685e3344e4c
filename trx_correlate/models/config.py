"""Configuration model for the correlation heuristics."""

from collections.abc import Sequence

from pydantic import Field

from trx_correlate.models.base import Model

DEFAULT_STOP_WORDS = ("Test", "Should", "When", "Then", "Given", "Async")


class CorrelatorConfig(Model):
    """Tunables for report ingestion and reference resolution.

    Defaults reproduce the behaviour expected for an xUnit/.NET solution.
    """

    source_extension: str = Field(
        default=".cs", description="Extension of source files, including the dot"
    )
    excluded_dirs: Sequence[str] = Field(
        default=("node_modules",),
        description="Directory names pruned from every filesystem search",
    )
    build_output_dirs: Sequence[str] = Field(
        default=("bin", "obj"),
        description="Build output directory names never treated as sources",
    )
    test_path_markers: Sequence[str] = Field(
        default=("Test",),
        description="Substrings identifying a path as test code",
    )
    stop_words: Sequence[str] = Field(
        default=DEFAULT_STOP_WORDS,
        description="Method-name words ignored by the keyword fallback search",
    )
    min_keyword_length: int = Field(
        default=4, ge=1, description="Shortest word used by the keyword fallback"
    )
    results_dir: str = Field(
        default="TestResults", description="Directory name holding .trx reports"
    )
    test_file_glob: str = Field(
        default="*Tests.cs", description="Filename pattern of test source files"
    )
    project_root_path: str | None = Field(
        default=None,
        description="Project root relative to the workspace (None auto-detects)",
    )
    inferrer: str = Field(
        default="regex", description="Entry point key of the symbol inferrer"
    )
    history_file: str = Field(
        default="test-history.json",
        description="Run history file, relative to the project root",
    )

    @property
    def search_excluded_dirs(self) -> Sequence[str]:
        """Directory names pruned while searching for source files."""
        return (*self.excluded_dirs, *self.build_output_dirs)
