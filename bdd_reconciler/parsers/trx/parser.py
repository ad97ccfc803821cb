"""Parser for Visual Studio TRX results (namespaced ``<TestRun>`` root)."""

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from bdd_reconciler.models.execution import (
    ExecutionReport,
    ExecutionStatus,
    Framework,
    ReportFormat,
    ScenarioResult,
)
from bdd_reconciler.parsers.base import ResultParser
from bdd_reconciler.parsers.common import (
    build_feature,
    ensure_failed_step,
    failed_line,
    load_xml,
    parse_timespan,
    parse_timestamp,
    readable_feature_name,
    readable_scenario_name,
    root_tag,
    text_of,
)
from bdd_reconciler.parsers.trx.steps import trx_step_reader

TRX_NAMESPACE = "http://microsoft.com/schemas/VisualStudio/TeamTest/2010"
NS = {"t": TRX_NAMESPACE}

OUTCOME_TO_STATUS: Mapping[str, ExecutionStatus] = {
    "passed": ExecutionStatus.PASSED,
    "passedbutrunaborted": ExecutionStatus.PASSED,
    "failed": ExecutionStatus.FAILED,
    "error": ExecutionStatus.FAILED,
    "timeout": ExecutionStatus.FAILED,
    "aborted": ExecutionStatus.FAILED,
    "notexecuted": ExecutionStatus.SKIPPED,
    "notrunnable": ExecutionStatus.SKIPPED,
    "inconclusive": ExecutionStatus.INCONCLUSIVE,
    "pending": ExecutionStatus.PENDING,
}


@dataclass(frozen=True, kw_only=True)
class TestDefinitionInfo:
    """What a ``<UnitTest>`` definition says about a test."""

    __test__ = False

    class_name: str
    name: str
    description: str | None = None
    feature_title: str | None = None
    categories: list[str] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class TrxParser(ResultParser):
    """TRX report parser (MSTest, VSTest, NUnit/xUnit via the TRX logger).

    Results are grouped into features by the test class of their definition.
    Data-driven results nest one ``UnitTestResult`` per row in
    ``InnerResults``; each row becomes its own scenario.
    """

    report_format = ReportFormat.TRX
    framework = Framework.MSTEST
    extensions = frozenset([".trx"])

    def probe(self, path: Path) -> bool:
        """Recognise ``<TestRun>`` in the TRX namespace."""
        namespace, local = root_tag(path)
        return local == "TestRun" and namespace == TRX_NAMESPACE

    def read_report(self, path: Path) -> ExecutionReport:
        """Convert a TRX document."""
        root = load_xml(path)
        if root.tag != f"{{{TRX_NAMESPACE}}}TestRun":
            raise ValueError(f"expected namespaced <TestRun> root, found <{root.tag}>")

        definitions = _definitions(root)
        groups: dict[str, list[ScenarioResult]] = {}
        titles: dict[str, str] = {}
        for result, test_id in _results(root):
            info = definitions.get(test_id)
            class_name = info.class_name if info else "Unknown"
            groups.setdefault(class_name, []).append(self._parse_scenario(result, info))
            if info and info.feature_title:
                titles.setdefault(class_name, info.feature_title)

        times = root.find("t:Times", NS)
        start = parse_timestamp(times.get("start")) if times is not None else None
        finish = parse_timestamp(times.get("finish")) if times is not None else None

        return ExecutionReport(
            source=path.name,
            framework=self.framework,
            generated_at=start,
            total_duration=(
                (finish - start).total_seconds() if start and finish else 0.0
            ),
            environment=_environment(root),
            features=[
                build_feature(
                    name=titles.get(class_name) or readable_feature_name(class_name),
                    scenarios=scenarios,
                )
                for class_name, scenarios in groups.items()
            ],
        )

    def _parse_scenario(
        self, result: ET.Element, info: TestDefinitionInfo | None
    ) -> ScenarioResult:
        native_name = result.get("testName") or (info.name if info else "Unknown")
        if info is not None and info.description and "(" not in native_name:
            name = info.description
        elif info is not None and info.description:
            _base, paren, params = native_name.partition("(")
            name = f"{info.description}{paren}{params}"
        else:
            name = readable_scenario_name(native_name)

        status = OUTCOME_TO_STATUS.get(
            (result.get("outcome") or "").lower(), ExecutionStatus.NOT_EXECUTED
        )
        error_info = result.find("t:Output/t:ErrorInfo", NS)
        error_message = text_of(error_info, "t:Message", NS)
        stack_trace = text_of(error_info, "t:StackTrace", NS)

        output = result.find("t:Output/t:StdOut", NS)
        steps = trx_step_reader.read(output.text if output is not None else None)
        if status == ExecutionStatus.FAILED:
            steps = ensure_failed_step(steps, error_message)

        metadata = {"test_name": native_name}
        if info is not None:
            metadata["class_name"] = info.class_name
        if (line := failed_line(error_message, stack_trace)) is not None:
            metadata["failed_at_line"] = str(line)

        return ScenarioResult(
            name=name,
            tags=list(info.categories) if info else [],
            status=status,
            start_time=parse_timestamp(result.get("startTime")),
            end_time=parse_timestamp(result.get("endTime")),
            duration=parse_timespan(result.get("duration")),
            error_message=error_message,
            stack_trace=stack_trace,
            steps=steps,
            attachments=[
                entry.get("path") or ""
                for entry in result.findall("t:ResultFiles/t:ResultFile", NS)
            ],
            metadata=metadata,
        )


def _results(root: ET.Element) -> Iterator[tuple[ET.Element, str]]:
    """Yield leaf results with their test id, expanding ``InnerResults``."""
    for result in root.findall("t:Results/t:UnitTestResult", NS):
        test_id = result.get("testId") or ""
        inner = result.findall("t:InnerResults/t:UnitTestResult", NS)
        if not inner:
            yield result, test_id
        for row in inner:
            yield row, row.get("testId") or test_id


def _definitions(root: ET.Element) -> dict[str, TestDefinitionInfo]:
    definitions: dict[str, TestDefinitionInfo] = {}
    for unit_test in root.findall("t:TestDefinitions/t:UnitTest", NS):
        method = unit_test.find("t:TestMethod", NS)
        properties = {
            text_of(prop, "t:Key", NS): text_of(prop, "t:Value", NS)
            for prop in unit_test.findall("t:Properties/t:Property", NS)
        }
        definitions[unit_test.get("id") or ""] = TestDefinitionInfo(
            class_name=(method.get("className") if method is not None else None)
            or "Unknown",
            name=unit_test.get("name") or "Unknown",
            description=text_of(unit_test, "t:Description", NS),
            feature_title=properties.get("FeatureTitle"),
            categories=[
                item.get("TestCategory") or ""
                for item in unit_test.findall("t:TestCategory/t:TestCategoryItem", NS)
            ],
        )
    return definitions


def _environment(root: ET.Element) -> dict[str, str]:
    environment: dict[str, str] = {}
    settings = root.find("t:TestSettings", NS)
    if settings is not None:
        environment["test_settings"] = settings.get("name") or "Unknown"
    if run_user := root.get("runUser"):
        environment["run_user"] = run_user
    return environment
