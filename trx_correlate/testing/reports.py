"""Report helpers for building TRX documents in tests."""

from collections.abc import Sequence
from xml.sax.saxutils import escape, quoteattr

TRX_NAMESPACE = "http://microsoft.com/schemas/VisualStudio/TeamTest/2010"


def unit_test_result(
    *,
    test_id: str,
    outcome: str = "Passed",
    test_name: str | None = None,
    message: str | None = None,
    stack_trace: str | None = None,
    std_out: str | None = None,
) -> str:
    """Create a ``UnitTestResult`` element.

    ``test_name`` of None omits the attribute entirely.
    """
    attrs = f"testId={quoteattr(test_id)} outcome={quoteattr(outcome)}"
    if test_name is not None:
        attrs += f" testName={quoteattr(test_name)}"

    output = ""
    error_info = ""
    if message is not None:
        error_info += f"<Message>{escape(message)}</Message>"
    if stack_trace is not None:
        error_info += f"<StackTrace>{escape(stack_trace)}</StackTrace>"
    if error_info:
        output += f"<ErrorInfo>{error_info}</ErrorInfo>"
    if std_out is not None:
        output += f"<StdOut>{escape(std_out)}</StdOut>"
    if output:
        return f"<UnitTestResult {attrs}><Output>{output}</Output></UnitTestResult>"
    return f"<UnitTestResult {attrs} />"


def unit_test(
    *,
    test_id: str,
    class_name: str,
    name: str | None = None,
    method_name: str | None = None,
    method_test_name: str | None = None,
    assembly: str = "Shop.Tests, Version=1.0.0.0, Culture=neutral",
) -> str:
    """Create a ``UnitTest`` definition element.

    The class name is assembly-qualified the way ``dotnet test`` writes it.
    """
    attrs = f"id={quoteattr(test_id)}"
    if name is not None:
        attrs += f" name={quoteattr(name)}"

    method_attrs = f"className={quoteattr(f'{class_name}, {assembly}')}"
    if method_test_name is not None:
        method_attrs += f" testName={quoteattr(method_test_name)}"
    if method_name is not None:
        method_attrs += f" methodName={quoteattr(method_name)}"

    return (
        f"<UnitTest {attrs}><Execution id={quoteattr(test_id + '-exec')} />"
        f"<TestMethod codeBase=\"Shop.Tests.dll\" {method_attrs} /></UnitTest>"
    )


def trx_document(
    results: Sequence[str],
    definitions: Sequence[str],
    *,
    namespaced: bool = True,
) -> str:
    """Wrap result and definition elements in a ``TestRun`` document."""
    xmlns = f" xmlns={quoteattr(TRX_NAMESPACE)}" if namespaced else ""
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<TestRun id="run-1" name="trx run"{xmlns}>'
        f"<TestDefinitions>{''.join(definitions)}</TestDefinitions>"
        f"<Results>{''.join(results)}</Results>"
        "</TestRun>"
    )


def simple_report(
    class_name: str, outcomes: Sequence[tuple[str, str, str | None]]
) -> str:
    """Report for one class from ``(method, outcome, message)`` triples."""
    results: list[str] = []
    definitions: list[str] = []
    for index, (method, outcome, message) in enumerate(outcomes):
        test_id = f"id-{class_name}-{index}"
        results.append(
            unit_test_result(
                test_id=test_id,
                outcome=outcome,
                test_name=f"{class_name}.{method}",
                message=message,
            )
        )
        definitions.append(
            unit_test(
                test_id=test_id,
                class_name=class_name,
                name=method,
                method_name=method,
            )
        )
    return trx_document(results, definitions)
