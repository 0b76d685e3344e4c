"""Parse Visual Studio TRX test-run reports into raw outcomes.

Only the paths below are read; everything else in the report is ignored::

    TestRun/Results/UnitTestResult[@testId, @outcome, @testName]
        Output/ErrorInfo/Message | Output/ErrorInfo/StackTrace | Output/StdOut
    TestRun/TestDefinitions/UnitTest[@id, @name]
        TestMethod[@className, @testName, @methodName]
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence

from trx_correlate.models.result import ParsedOutcome

log = logging.getLogger(__name__)

OUTCOMES: frozenset[str] = frozenset({"Passed", "Failed"})


class ReportFormatError(ValueError):
    """Raised when a report lacks the sections needed to correlate results."""


def parse_report(content: str) -> Sequence[ParsedOutcome]:
    """Convert TRX report text into outcomes bound to their definitions.

    Result entries without a matching definition, without a determinable
    method name or with an outcome other than Passed/Failed are skipped.

    Args:
        content: Full text of the TRX report

    Returns:
        Outcomes in report order

    Raises:
        ReportFormatError: If the XML is malformed or lacks the Results or
            TestDefinitions sections

    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ReportFormatError(f"Report is not valid XML: {e}") from e

    _strip_namespaces(root)
    if root.tag != "TestRun":
        raise ReportFormatError(f"Unexpected root element <{root.tag}>")

    results = root.findall("Results/UnitTestResult")
    definitions = root.findall("TestDefinitions/UnitTest")
    if not results or not definitions:
        raise ReportFormatError("Report has no test results or test definitions")

    log.info(
        "Found %d test result(s) and %d test definition(s)",
        len(results),
        len(definitions),
    )
    definitions_by_id = {d.get("id"): d for d in definitions if d.get("id")}

    outcomes: list[ParsedOutcome] = []
    for result in results:
        if (parsed := _parse_result(result, definitions_by_id)) is not None:
            outcomes.append(parsed)
    return outcomes


def _parse_result(
    result: ET.Element, definitions_by_id: Mapping[str | None, ET.Element]
) -> ParsedOutcome | None:
    test_id = result.get("testId")
    definition = definitions_by_id.get(test_id)
    if definition is None:
        log.debug("No test definition for result %s, skipping", test_id)
        return None

    test_method = definition.find("TestMethod")
    method_name = extract_method_name(result, definition, test_method)
    if not method_name:
        log.warning("Could not determine method name for test %s", test_id)
        return None

    class_name = extract_class_name(test_method)
    if not class_name:
        log.warning("Could not determine class name for test %s", test_id)
        return None

    outcome = result.get("outcome", "")
    if outcome not in OUTCOMES:
        log.debug("Skipping %s with outcome %r", method_name, outcome)
        return None

    log.debug("Method: %s, Outcome: %s", method_name, outcome)
    return ParsedOutcome(
        class_name=class_name,
        method_name=method_name,
        outcome=outcome,  # type: ignore[arg-type]
        error_detail=(
            extract_error_detail(result, method_name) if outcome == "Failed" else None
        ),
    )


def extract_method_name(
    result: ET.Element, definition: ET.Element, test_method: ET.Element | None
) -> str | None:
    """Pick the method name from the first non-empty attribute.

    Order: result ``testName``, definition ``TestMethod/@testName``,
    definition ``name``, definition ``TestMethod/@methodName``. A dotted
    name keeps only its last segment.
    """
    method_attrs = test_method.attrib if test_method is not None else {}
    candidates = (
        result.get("testName"),
        method_attrs.get("testName"),
        definition.get("name"),
        method_attrs.get("methodName"),
    )
    name = next((c for c in candidates if c), None)
    if name is None:
        return None
    return name.rsplit(".", 1)[-1] or None


def extract_class_name(test_method: ET.Element | None) -> str | None:
    """Namespace-qualified class name with assembly qualification removed."""
    if test_method is None:
        return None
    class_name = test_method.get("className", "").split(",", 1)[0].strip()
    return class_name or None


def extract_error_detail(result: ET.Element, method_name: str) -> str:
    """Best available failure text for a failed result.

    Order: error message, stack trace, captured standard output, then a
    generic message naming the method.
    """
    for path in (
        "Output/ErrorInfo/Message",
        "Output/ErrorInfo/StackTrace",
        "Output/StdOut",
    ):
        element = result.find(path)
        if element is not None and element.text:
            return element.text
    return f"Test {method_name} failed"


def _strip_namespaces(root: ET.Element) -> None:
    """Drop XML namespaces from tags so paths can be written without them."""
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.rsplit("}", 1)[1]
