"""Heuristic static analysis of test source text."""

from trx_correlate.analysis.base import ClassDependencyModel, SymbolInferrer
from trx_correlate.analysis.loading import InferrerNotFoundError, load_inferrer
from trx_correlate.analysis.method_locator import (
    find_method_body,
    find_used_variables,
    locate_method_offset,
)
from trx_correlate.analysis.regex_inferrer import RegexSymbolInferrer

__all__ = [
    "ClassDependencyModel",
    "InferrerNotFoundError",
    "RegexSymbolInferrer",
    "SymbolInferrer",
    "find_method_body",
    "find_used_variables",
    "load_inferrer",
    "locate_method_offset",
]
