"""Filesystem search used to locate test classes and production sources."""

import asyncio
import fnmatch
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class FileFinder(ABC):
    """Searches a directory tree for files by name pattern."""

    root: Path

    @abstractmethod
    async def find_files(
        self, pattern: str, *, limit: int | None = None
    ) -> Sequence[str]:
        """Find files whose name matches a glob pattern anywhere under root.

        Args:
            pattern: Filename glob (e.g., "OrderService.cs", "*Pricing*.cs")
            limit: Stop after this many matches (None means no limit)

        Returns:
            Absolute paths of matching files in a stable order

        """

    def relative(self, path: str) -> str:
        """Path relative to the search root, or the path itself if outside."""
        try:
            return str(Path(path).relative_to(self.root.absolute()))
        except ValueError:
            return path


@dataclass(frozen=True, kw_only=True)
class WorkspaceFileFinder(FileFinder):
    """Walks the workspace on a worker thread, pruning excluded directories."""

    excluded_dirs: Sequence[str] = field(default_factory=tuple)

    async def find_files(
        self, pattern: str, *, limit: int | None = None
    ) -> Sequence[str]:
        return await asyncio.to_thread(self._walk, pattern, limit)

    def _walk(self, pattern: str, limit: int | None) -> Sequence[str]:
        excluded = set(self.excluded_dirs)
        matches: list[str] = []

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_log_walk_error):
            dirnames[:] = sorted(d for d in dirnames if d not in excluded)
            for filename in sorted(filenames):
                if fnmatch.fnmatchcase(filename, pattern):
                    matches.append(str(Path(dirpath, filename).absolute()))
                    if limit is not None and len(matches) >= limit:
                        return matches

        log.debug("Found %d file(s) matching %s", len(matches), pattern)
        return matches


def _log_walk_error(error: OSError) -> None:
    log.warning("Cannot read directory %s: %s", error.filename, error.strerror)
