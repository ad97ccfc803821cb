"""Parser for legacy NUnit 2.x XML results (``<test-results>`` root)."""

import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
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

ROOT_ELEMENT = "test-results"

RESULT_TO_STATUS: Mapping[str, ExecutionStatus] = {
    "success": ExecutionStatus.PASSED,
    "failure": ExecutionStatus.FAILED,
    "error": ExecutionStatus.FAILED,
    "cancelled": ExecutionStatus.FAILED,
    "ignored": ExecutionStatus.SKIPPED,
    "notrunnable": ExecutionStatus.SKIPPED,
    "skipped": ExecutionStatus.SKIPPED,
    "inconclusive": ExecutionStatus.INCONCLUSIVE,
}


@dataclass(frozen=True, kw_only=True)
class NUnit2Parser(ResultParser):
    """NUnit 2.x report parser.

    NUnit 2 records neither start times nor a run duration, so scenarios of
    this format never win a timestamp comparison during merge.
    """

    report_format = ReportFormat.NUNIT2
    framework = Framework.NUNIT
    extensions = frozenset([".xml"])

    def probe(self, path: Path) -> bool:
        """Recognise the legacy ``<test-results>`` envelope."""
        _namespace, local = root_tag(path)
        return local == ROOT_ELEMENT

    def read_report(self, path: Path) -> ExecutionReport:
        """Convert a ``<test-results>`` document."""
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
            generated_at=_generated_at(root),
            total_duration=sum(feature.duration for feature in features),
            environment=_environment(root),
            features=features,
        )

    def _parse_feature(self, fixture: ET.Element) -> FeatureResult:
        name = (
            fixture.get("description")
            or property_value(fixture, ["Description"])
            or readable_feature_name(fixture.get("name") or "Unknown Feature")
        )
        scenarios = [
            self._parse_scenario(test_case) for test_case in fixture.iter("test-case")
        ]
        return build_feature(
            name=name,
            file_path=property_value(fixture, ["FeatureFile"]) or "",
            tags=[c.get("name") or "" for c in fixture.findall("categories/category")],
            scenarios=scenarios,
        )

    def _parse_scenario(self, test_case: ET.Element) -> ScenarioResult:
        native_name = test_case.get("name") or "Unknown Scenario"
        status = _map_status(
            test_case.get("result"), test_case.get("success"), test_case.get("executed")
        )

        failure = test_case.find("failure")
        error_message = text_of(failure, "message")
        if status == ExecutionStatus.SKIPPED:
            error_message = text_of(test_case.find("reason"), "message") or (
                "Test skipped"
            )

        steps = nunit_step_reader.read(text_of(test_case, "output"))
        if status == ExecutionStatus.FAILED:
            steps = ensure_failed_step(steps, error_message)

        return ScenarioResult(
            name=test_case.get("description") or readable_scenario_name(native_name),
            tags=[
                c.get("name") or "" for c in test_case.findall("categories/category")
            ],
            status=status,
            duration=parse_seconds(test_case.get("time")),
            error_message=error_message,
            stack_trace=text_of(failure, "stack-trace"),
            steps=steps,
            metadata={"test_name": native_name},
        )


def _map_status(
    result: str | None, success: str | None, executed: str | None
) -> ExecutionStatus:
    """Map NUnit 2 ``result``/``success``/``executed`` attributes."""
    native = (result or "").lower()
    if native in RESULT_TO_STATUS:
        return RESULT_TO_STATUS[native]
    if executed == "False":
        return ExecutionStatus.NOT_EXECUTED
    if success == "True":
        return ExecutionStatus.PASSED
    if success == "False":
        return ExecutionStatus.FAILED
    return ExecutionStatus.NOT_EXECUTED


def _generated_at(root: ET.Element) -> datetime | None:
    date, time = root.get("date"), root.get("time")
    if not date:
        return None
    return parse_timestamp(f"{date}T{time}" if time else date)


def _environment(root: ET.Element) -> dict[str, str]:
    environment = root.find("environment")
    if environment is None:
        return {}
    return {
        "framework": environment.get("nunit-version") or "NUnit 2.x",
        "clr": environment.get("clr-version") or "Unknown",
        "os": environment.get("os-version") or "Unknown",
        "platform": environment.get("platform") or "Unknown",
    }
