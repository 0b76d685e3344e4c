"""Locate test methods in source text and the variables they use."""

import re

_TEST_ATTRIBUTE = r"\[(?:Fact|Theory|Test|TestMethod|TestCase)\b"
_RETURN_TYPE = r"(?:void|Task(?:<[^>]+>)?)"

_MEMBER_ACCESS = re.compile(r"([a-zA-Z_][a-zA-Z0-9_]*)\s*\.")
_ASSIGNMENT_ACCESS = re.compile(r"=\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*\.")
_AWAIT_ACCESS = re.compile(r"await\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\.")


def _body_patterns(method_name: str) -> tuple[re.Pattern[str], ...]:
    name = re.escape(method_name)
    return (
        re.compile(
            rf"(?:public|private|internal|protected)?\s*(?:async\s+)?{_RETURN_TYPE}"
            rf"\s+{name}\s*\([^)]*\)\s*{{[\s\S]*?^\s*}}",
            re.MULTILINE,
        ),
        re.compile(
            rf"{_TEST_ATTRIBUTE}[\s\S]*?\b{name}\s*\([\s\S]*?{{[\s\S]*?^\s*}}",
            re.MULTILINE,
        ),
    )


def find_method_body(source_text: str, method_name: str) -> str | None:
    """Return the text of a method from its declaration to its closing brace.

    The closing brace is the first line that starts with ``}`` after the
    opening one, so a nested block can end the body early.

    Args:
        source_text: Full text of the test source file
        method_name: Unqualified method name

    Returns:
        The matched method text, or None if no pattern matched

    """
    for pattern in _body_patterns(method_name):
        if match := pattern.search(source_text):
            return match.group(0)
    return None


def find_used_variables(method_body: str) -> list[str]:
    """Identifiers used as the target of a member access in a method body.

    Collects ``name.``, ``= name.`` and ``await name.`` occurrences. The
    result keeps first-seen order and has no duplicates.
    """
    variables: dict[str, None] = {}
    for pattern in (_MEMBER_ACCESS, _ASSIGNMENT_ACCESS, _AWAIT_ACCESS):
        for match in pattern.finditer(method_body):
            variables.setdefault(match.group(1), None)
    return list(variables)


def locate_method_offset(source_text: str, method_name: str) -> int:
    """Character offset of a method declaration, or -1 when absent.

    Tries an attributed test method, then any method declaration, then a
    bare ``name(`` occurrence. Matching ignores case.
    """
    name = re.escape(method_name)
    patterns = (
        rf"{_TEST_ATTRIBUTE}(?:[^\]]*)?\]\s*(?://.*?\n\s*)*"
        rf"(?:public|private|internal)?\s*(?:async\s+)?{_RETURN_TYPE}\s+{name}\s*\(",
        rf"(?:public|private|internal)?\s*(?:async\s+)?{_RETURN_TYPE}\s+{name}\s*\(",
        rf"\b{name}\s*\(",
    )
    for pattern in patterns:
        if match := re.search(pattern, source_text, re.IGNORECASE):
            return match.start()
    return -1
