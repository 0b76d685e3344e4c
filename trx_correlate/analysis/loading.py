"""Loading of symbol inferrers from entry points."""

from importlib.metadata import entry_points

from trx_correlate.analysis.base import SymbolInferrer

ENTRY_POINT_GROUP = "trx_correlate.inferrers"


class InferrerNotFoundError(Exception):
    """Raised when a symbol inferrer is not found."""


def load_inferrer(key: str) -> SymbolInferrer:
    """Instantiate a symbol inferrer by key.

    Args:
        key: The inferrer key as registered in pyproject.toml (e.g., "regex")

    Returns:
        A new inferrer instance

    Raises:
        InferrerNotFoundError: If no inferrer with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            inferrer_cls: type[SymbolInferrer] = entry.load()
            return inferrer_cls()

    available = [e.name for e in entries]
    raise InferrerNotFoundError(
        f"Inferrer '{key}' not found. Available inferrers: {available}"
    )
