"""Parser for NUnit 3/4 XML results (``<test-run>`` root)."""

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from bdd_reconciler.models.execution import (
    ExecutionReport,
    ExecutionStatus,
    FeatureResult,
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
    parse_seconds,
    parse_timestamp,
    property_value,
    readable_feature_name,
    readable_scenario_name,
    root_tag,
    text_of,
)
from bdd_reconciler.parsers.nunit3.steps import nunit_step_reader

ROOT_ELEMENT = "test-run"

RESULT_TO_STATUS: Mapping[str, ExecutionStatus] = {
    "passed": ExecutionStatus.PASSED,
    "failed": ExecutionStatus.FAILED,
    "skipped": ExecutionStatus.SKIPPED,
    "ignored": ExecutionStatus.SKIPPED,
    "inconclusive": ExecutionStatus.INCONCLUSIVE,
    "warning": ExecutionStatus.INCONCLUSIVE,
}


@dataclass(frozen=True, kw_only=True)
class NUnit3Parser(ResultParser):
    """NUnit 3 report parser.

    Test fixtures become features and test cases become scenarios. Test
    cases of a parameterized method (outline rows) inherit the method's
    ``Description`` so each row keeps the scenario title plus its arguments.
    """

    report_format = ReportFormat.NUNIT3
    framework = Framework.NUNIT
    extensions = frozenset([".xml"])

    def probe(self, path: Path) -> bool:
        """Recognise the modern ``<test-run>`` envelope."""
        _namespace, local = root_tag(path)
        return local == ROOT_ELEMENT

    def read_report(self, path: Path) -> ExecutionReport:
        """Convert a ``<test-run>`` document."""
        root = load_xml(path)
        if root.tag != ROOT_ELEMENT:
            raise ValueError(f"expected <{ROOT_ELEMENT}> root, found <{root.tag}>")

        features = [
            feature
            for fixture in root.iter("test-suite")
            if fixture.get("type") == "TestFixture"
            if (feature := self._parse_feature(fixture)).scenarios
        ]

        return ExecutionReport(
            source=path.name,
            framework=self.framework,
            generated_at=parse_timestamp(root.get("start-time")),
            total_duration=parse_seconds(root.get("duration")),
            environment=_environment(root),
            features=features,
        )

    def _parse_feature(self, fixture: ET.Element) -> FeatureResult:
        name = property_value(fixture, ["Description"]) or readable_feature_name(
            fixture.get("name") or "Unknown Feature"
        )
        tags = [
            prop.get("value") or ""
            for prop in fixture.findall("properties/property")
            if prop.get("name") == "Category"
        ]
        scenarios = [
            self._parse_scenario(test_case, title)
            for test_case, title in _test_cases(fixture)
        ]
        return build_feature(
            name=name,
            file_path=property_value(fixture, ["FeatureFile"]) or "",
            tags=tags,
            scenarios=scenarios,
        )

    def _parse_scenario(
        self, test_case: ET.Element, inherited_title: str | None
    ) -> ScenarioResult:
        native_name = test_case.get("name") or "Unknown Scenario"
        name = property_value(test_case, ["Description"])
        if name is None and inherited_title is not None:
            _base, paren, params = native_name.partition("(")
            name = f"{inherited_title}{paren}{params}"
        if name is None:
            name = readable_scenario_name(native_name)

        status = _map_status(test_case.get("result"), test_case.get("label"))
        failure = test_case.find("failure")
        error_message = text_of(failure, "message")
        stack_trace = text_of(failure, "stack-trace")
        if status == ExecutionStatus.SKIPPED:
            error_message = text_of(test_case.find("reason"), "message")

        steps = nunit_step_reader.read(text_of(test_case, "output"))
        if status == ExecutionStatus.FAILED:
            steps = ensure_failed_step(steps, error_message)

        metadata = {"test_name": native_name}
        if (line := failed_line(error_message, stack_trace)) is not None:
            metadata["failed_at_line"] = str(line)

        return ScenarioResult(
            name=name,
            tags=[
                prop.get("value") or ""
                for prop in test_case.findall("properties/property")
                if prop.get("name") == "Category"
            ],
            status=status,
            start_time=parse_timestamp(test_case.get("start-time")),
            end_time=parse_timestamp(test_case.get("end-time")),
            duration=parse_seconds(test_case.get("duration")),
            error_message=error_message,
            stack_trace=stack_trace,
            steps=steps,
            attachments=[
                path
                for attachment in test_case.findall("attachments/attachment")
                if (path := text_of(attachment, "filePath"))
            ],
            metadata=metadata,
        )


def _test_cases(
    suite: ET.Element, title: str | None = None
) -> Iterator[tuple[ET.Element, str | None]]:
    """Yield test cases below a fixture with the title of their outline method."""
    for child in suite:
        if child.tag == "test-case":
            yield child, title
        elif child.tag == "test-suite" and child.get("type") != "TestFixture":
            yield from _test_cases(
                child, property_value(child, ["Description"]) or title
            )


def _map_status(result: str | None, label: str | None) -> ExecutionStatus:
    if (label or "").lower() in {"error", "cancelled", "invalid"}:
        return ExecutionStatus.FAILED
    return RESULT_TO_STATUS.get((result or "").lower(), ExecutionStatus.NOT_EXECUTED)


def _environment(root: ET.Element) -> dict[str, str]:
    environment = root.find("test-suite/environment")
    if environment is None:
        return {}
    return {
        "framework": environment.get("framework-version") or "Unknown",
        "clr": environment.get("clr-version") or "Unknown",
        "os": environment.get("os-version") or "Unknown",
        "platform": environment.get("platform") or "Unknown",
    }
