"""Resolve the production source files a test method exercises.

Resolution is heuristic: the types of the symbols a method touches are
inferred from the test class text, then looked up as ``<Type><ext>`` files.
When no type yields a file, words of the method name are used as filename
keywords instead.
"""

import asyncio
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePath

from trx_correlate.analysis.base import ClassDependencyModel, SymbolInferrer
from trx_correlate.analysis.method_locator import find_method_body, find_used_variables
from trx_correlate.file_finder import FileFinder
from trx_correlate.models.config import CorrelatorConfig

log = logging.getLogger(__name__)

_INTERFACE_PREFIX = re.compile(r"^I(?=[A-Z])")
_GENERIC_SUFFIX = re.compile(r"<.*>")
_CAMEL_BOUNDARY = re.compile(r"(?=[A-Z])")
_SHORT_FRAGMENT_LENGTH = 3


def collect_candidate_types(
    used_variables: Iterable[str], model: ClassDependencyModel
) -> list[str]:
    """Types behind the used variables, followed by every mocked type.

    All mocked types are included whether or not the method touches the
    mock, since mocks stand for dependencies of the class under test.
    """
    types: dict[str, None] = {}
    for variable in used_variables:
        if type_name := model.type_of(variable):
            types.setdefault(type_name, None)
            log.debug("%s -> %s", variable, type_name)
    for type_name in model.mock_types.values():
        types.setdefault(type_name, None)
    return list(types)


def type_file_stems(type_name: str) -> list[str]:
    """File stems that may define a type.

    ``IRepository<User>`` yields ``IRepository`` and ``Repository``.
    """
    stems = [
        _GENERIC_SUFFIX.sub("", type_name),
        _GENERIC_SUFFIX.sub("", _INTERFACE_PREFIX.sub("", type_name)),
    ]
    return list(dict.fromkeys(stem for stem in stems if stem))


def split_method_words(method_name: str) -> list[str]:
    """Split a method name into words on underscores and capital letters.

    Fragments of three characters or fewer are dropped. The one exception
    is a segment made of a short fragment followed by a single longer one,
    which is kept whole: ``NotFound`` survives, while ``GetUserById``
    yields only ``User``.
    """
    words: list[str] = []
    for segment in method_name.split("_"):
        fragments = [f for f in _CAMEL_BOUNDARY.split(segment) if f]
        if (
            len(fragments) == 2
            and len(fragments[0]) <= _SHORT_FRAGMENT_LENGTH < len(fragments[1])
        ):
            words.append(segment)
            continue
        words.extend(f for f in fragments if len(f) > _SHORT_FRAGMENT_LENGTH)
    return words


def fallback_keywords(method_name: str, config: CorrelatorConfig) -> list[str]:
    """Words of a method name used for the filename keyword search.

    A word is dropped when it, or any camel-case fragment of it, is a stop
    word.
    """
    stop_words = set(config.stop_words)
    keywords = [
        word
        for word in split_method_words(method_name)
        if len(word) >= config.min_keyword_length
        and stop_words.isdisjoint(_CAMEL_BOUNDARY.split(word))
    ]
    return list(dict.fromkeys(keywords))


def is_production_path(relative_path: str, config: CorrelatorConfig) -> bool:
    """Whether a path may be a production source file.

    Rejects paths containing a test marker and paths under a build output
    directory.
    """
    if any(marker in relative_path for marker in config.test_path_markers):
        return False
    parts = PurePath(relative_path).parts
    return not any(part in config.build_output_dirs for part in parts)


@dataclass(frozen=True, kw_only=True)
class MethodReferenceResolver:
    """Infers the production files a test method depends on."""

    finder: FileFinder
    inferrer: SymbolInferrer
    config: CorrelatorConfig

    async def resolve(self, method_name: str, test_file_path: str) -> Sequence[str]:
        """Find the production files referenced by a test method.

        Never raises: unreadable files and unexpected errors are logged and
        resolve to an empty list.

        Args:
            method_name: Unqualified test method name
            test_file_path: Absolute path of the test file defining it

        Returns:
            Absolute paths in discovery order, without duplicates

        """
        log.info("Analyzing references for %s in %s", method_name, test_file_path)
        try:
            source_text = await asyncio.to_thread(
                Path(test_file_path).read_text, encoding="utf-8"
            )
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Cannot read test file %s: %s", test_file_path, e)
            return []

        try:
            files = await self._resolve_in_text(method_name, source_text)
        except Exception:
            log.exception("Failed to resolve references for %s", method_name)
            return []

        log.info("Found %d referenced file(s) for %s", len(files), method_name)
        return files

    async def _resolve_in_text(self, method_name: str, source_text: str) -> list[str]:
        model = self.inferrer.infer_symbol_types(source_text)

        method_body = find_method_body(source_text, method_name)
        if method_body is None:
            log.info("Could not find method %s in test file", method_name)
            return []

        used_variables = find_used_variables(method_body)
        candidate_types = collect_candidate_types(used_variables, model)
        log.debug("Candidate types for %s: %s", method_name, candidate_types)

        files: list[str] = []
        for type_name in candidate_types:
            for stem in type_file_stems(type_name):
                await self._collect(f"{stem}{self.config.source_extension}", files)

        if not files:
            keywords = fallback_keywords(method_name, self.config)
            log.info("No files found by type, searching keywords: %s", keywords)
            for word in keywords:
                await self._collect(f"*{word}*{self.config.source_extension}", files)

        return files

    async def _collect(self, pattern: str, files: list[str]) -> None:
        """Add production files matching a filename pattern to ``files``."""
        for path in await self.finder.find_files(pattern):
            if path in files:
                continue
            if not is_production_path(self.finder.relative(path), self.config):
                log.debug("Skipped %s", path)
                continue
            files.append(path)
            log.debug("Added %s", path)
