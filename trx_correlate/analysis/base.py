"""Abstract base class for symbol type inference strategies."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class ClassDependencyModel:
    """Symbol name to declared type maps for one test class.

    Computed fresh for every resolution; never cached.
    """

    field_types: Mapping[str, str] = field(default_factory=dict)
    mock_types: Mapping[str, str] = field(default_factory=dict)
    constructor_params: Mapping[str, str] = field(default_factory=dict)

    def type_of(self, symbol: str) -> str | None:
        """Look up a symbol in the field types, then in the mock types."""
        return self.field_types.get(symbol) or self.mock_types.get(symbol)


@dataclass(frozen=True, kw_only=True)
class SymbolInferrer(ABC):
    """Infers the declared types of the symbols of a test class.

    Implementations are registered under the ``trx_correlate.inferrers``
    entry point group and looked up by key.
    """

    @abstractmethod
    def infer_symbol_types(self, source_text: str) -> ClassDependencyModel:
        """Extract field, mock and constructor parameter types.

        Args:
            source_text: Full text of one test source file

        Returns:
            The symbol tables found in the text

        """
