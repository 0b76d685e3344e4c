"""Group parsed outcomes by the test file that defines them."""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence

from trx_correlate.file_finder import FileFinder
from trx_correlate.models.result import ParsedOutcome, TestFileResult, TestMethodResult

log = logging.getLogger(__name__)

type ClassFileResolver = Callable[[ParsedOutcome], Awaitable[str | None]]


def class_file_resolver(finder: FileFinder, source_extension: str) -> ClassFileResolver:
    """Build a resolver from an outcome to the path of its test class file.

    The file is looked up by the class name without its namespace, one
    search per distinct class name.
    """
    cache: dict[str, str | None] = {}

    async def resolve(outcome: ParsedOutcome) -> str | None:
        short_name = outcome.short_class_name
        if short_name not in cache:
            matches = await finder.find_files(
                f"{short_name}{source_extension}", limit=1
            )
            cache[short_name] = matches[0] if matches else None
            if not matches:
                log.info("No test file found for class %s", outcome.class_name)
        return cache[short_name]

    return resolve


async def aggregate_outcomes(
    outcomes: Sequence[ParsedOutcome],
    resolve_class_file: ClassFileResolver,
) -> Mapping[str, TestFileResult]:
    """Build per-file results from outcomes, preserving report order.

    Outcomes whose class resolves to no file are dropped.

    Args:
        outcomes: Parsed outcomes in report order
        resolve_class_file: Maps an outcome to the absolute path of its test file

    Returns:
        Test file results keyed by absolute file path

    """
    file_results: dict[str, TestFileResult] = {}
    dropped = 0

    for outcome in outcomes:
        file_path = await resolve_class_file(outcome)
        if file_path is None:
            dropped += 1
            continue

        if file_path not in file_results:
            file_results[file_path] = TestFileResult(file_path=file_path)

        file_results[file_path].add_method(
            TestMethodResult(
                method_name=outcome.method_name,
                outcome=outcome.outcome,
                error_message=outcome.error_detail,
            )
        )

    if dropped:
        log.warning("Dropped %d outcome(s) with no matching test file", dropped)
    log.info(
        "Aggregated %d outcome(s) into %d test file(s)",
        len(outcomes) - dropped,
        len(file_results),
    )
    return file_results
