"""Regex-based symbol type inference for C# test classes.

PascalCase is the only signal separating a type name from a variable or a
keyword, so anything lower-case in a type position is ignored.
"""

import logging
import re
from dataclasses import dataclass

from trx_correlate.analysis.base import ClassDependencyModel, SymbolInferrer

log = logging.getLogger(__name__)

_TYPE = r"[A-Z][a-zA-Z0-9]*(?:<[^>]+>)?"
_IDENT = r"[a-zA-Z_][a-zA-Z0-9_]*"
_ACCESS = r"(?:private|protected|internal|public)"

# Strictest first; later patterns only fill identifiers the earlier ones missed.
FIELD_PATTERNS = (
    re.compile(rf"{_ACCESS}\s+readonly\s+({_TYPE})\s+({_IDENT})\s*;"),
    re.compile(rf"{_ACCESS}\s+({_TYPE})\s+({_IDENT})\s*;"),
    re.compile(rf"(?:{_ACCESS}\s+)?(?:readonly\s+)?({_TYPE})\s+({_IDENT})\s*;"),
)
MOCK_PATTERN = re.compile(rf"Mock<({_TYPE})>\s+({_IDENT})")
CONSTRUCTOR_PATTERN = re.compile(r"public\s+\w+\s*\(([^)]*)\)")
PARAMETER_PATTERN = re.compile(rf"({_TYPE})\s+({_IDENT})")
INSTANTIATION_PATTERN = re.compile(rf"({_IDENT})\s*=\s*new\s+({_TYPE})\s*\(")

_MOCK_PREFIX = re.compile(r"^(_?)mock")


def unwrapped_mock_name(mock_name: str) -> str:
    """Name a test typically gives the object behind a mock field.

    ``_mockPricing`` becomes ``_pricing`` and ``mockPricing`` becomes
    ``pricing``. Names without a mock prefix are returned unchanged.
    """
    match = _MOCK_PREFIX.match(mock_name)
    if not match:
        return mock_name
    rest = mock_name[match.end() :]
    if not rest:
        return ""
    return f"{match.group(1)}{rest[0].lower()}{rest[1:]}"


@dataclass(frozen=True, kw_only=True)
class RegexSymbolInferrer(SymbolInferrer):
    """Lexical approximation of a type resolver.

    Fields are collected first, mocks second, constructor parameters third
    and direct instantiations last; an instantiation overrides any type a
    field declaration recorded for the same identifier.
    """

    def infer_symbol_types(self, source_text: str) -> ClassDependencyModel:
        field_types: dict[str, str] = {}
        mock_types: dict[str, str] = {}
        constructor_params: dict[str, str] = {}

        for pattern in FIELD_PATTERNS:
            for match in pattern.finditer(source_text):
                type_name, field_name = match.groups()
                if field_name not in field_types:
                    field_types[field_name] = type_name
                    log.debug("Field found: %s -> %s", field_name, type_name)

        for match in MOCK_PATTERN.finditer(source_text):
            type_name, mock_name = match.groups()
            mock_types[mock_name] = type_name
            # The mock wrapper itself is tracked only as a mock.
            field_types.pop(mock_name, None)
            object_name = unwrapped_mock_name(mock_name)
            if object_name and object_name != mock_name:
                field_types[object_name] = type_name
            log.debug(
                "Mock found: %s -> %s, object: %s", mock_name, type_name, object_name
            )

        if (match := CONSTRUCTOR_PATTERN.search(source_text)) and match.group(1).strip():
            for param in match.group(1).split(","):
                if parts := PARAMETER_PATTERN.search(param.strip()):
                    type_name, param_name = parts.groups()
                    constructor_params[param_name] = type_name
                    log.debug("Constructor param: %s -> %s", param_name, type_name)

        for match in INSTANTIATION_PATTERN.finditer(source_text):
            field_name, type_name = match.groups()
            if field_name in mock_types:
                continue
            field_types[field_name] = type_name
            log.debug("Instantiation found: %s -> %s", field_name, type_name)

        log.debug(
            "Inferred %d field(s), %d mock(s), %d constructor param(s)",
            len(field_types),
            len(mock_types),
            len(constructor_params),
        )
        return ClassDependencyModel(
            field_types=field_types,
            mock_types=mock_types,
            constructor_params=constructor_params,
        )
