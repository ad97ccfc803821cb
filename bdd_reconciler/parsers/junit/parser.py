"""Parser for JUnit XML results (``<testsuites>``/``<testsuite>`` root)."""

import re
import xml.etree.ElementTree as ET
from collections.abc import Sequence
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
    root_tag,
)
from bdd_reconciler.parsers.junit.steps import junit_step_reader

ROOT_ELEMENTS = frozenset(["testsuites", "testsuite"])
CLASSNAME_TAGS = re.compile(r"\[@(.+?)\]")


@dataclass(frozen=True, kw_only=True)
class JUnitParser(ResultParser):
    """JUnit report parser (Cucumber-JVM, Maven Surefire and friends).

    A suite carrying a ``feature.name`` property is one feature. Otherwise
    test cases are grouped by ``classname``, which Cucumber-JVM sets to the
    feature title and Surefire sets to the test class.
    """

    report_format = ReportFormat.JUNIT
    framework = Framework.JUNIT
    extensions = frozenset([".xml"])

    def probe(self, path: Path) -> bool:
        """Recognise the testsuite-rooted envelope."""
        _namespace, local = root_tag(path)
        return local in ROOT_ELEMENTS

    def read_report(self, path: Path) -> ExecutionReport:
        """Convert a ``<testsuites>`` or single ``<testsuite>`` document."""
        root = load_xml(path)
        if root.tag not in ROOT_ELEMENTS:
            raise ValueError(f"expected <testsuites> root, found <{root.tag}>")

        suites = [s for s in root.iter("testsuite") if s.find("testcase") is not None]
        features = [
            feature
            for suite in suites
            for feature in self._parse_features(suite)
            if feature.scenarios
        ]

        first = suites[0] if suites else root
        return ExecutionReport(
            source=path.name,
            framework=self.framework,
            generated_at=parse_timestamp(first.get("timestamp")),
            total_duration=sum(parse_seconds(s.get("time")) for s in suites),
            environment=_environment(first),
            features=features,
        )

    def _parse_features(self, suite: ET.Element) -> Sequence[FeatureResult]:
        suite_name = suite.get("name") or "Unknown Feature"
        file_path = property_value(suite, ["feature.file", "featureFile"]) or ""
        tags = (property_value(suite, ["feature.tags"]) or "").replace(",", " ").split()

        groups: dict[str, list[ET.Element]] = {}
        if feature_name := property_value(suite, ["feature.name"]):
            groups[feature_name] = suite.findall("testcase")
        else:
            for test_case in suite.findall("testcase"):
                group = readable_feature_name(
                    CLASSNAME_TAGS.sub("", test_case.get("classname") or suite_name)
                )
                groups.setdefault(group, []).append(test_case)

        return [
            build_feature(
                name=name,
                file_path=file_path,
                tags=tags,
                scenarios=[self._parse_scenario(test_case) for test_case in cases],
            )
            for name, cases in groups.items()
        ]

    def _parse_scenario(self, test_case: ET.Element) -> ScenarioResult:
        failure = test_case.find("failure")
        if failure is None:
            failure = test_case.find("error")
        skipped = test_case.find("skipped")

        if failure is not None:
            status = ExecutionStatus.FAILED
            error_message = failure.get("message") or None
            stack_trace = (failure.text or "").strip() or None
        elif skipped is not None:
            status = ExecutionStatus.SKIPPED
            error_message = skipped.get("message") or "Test skipped"
            stack_trace = None
        else:
            status = ExecutionStatus.PASSED
            error_message = stack_trace = None

        steps = junit_step_reader.read(test_case.findtext("system-out"))
        if status == ExecutionStatus.FAILED:
            steps = ensure_failed_step(steps, error_message)

        metadata: dict[str, str] = {}
        tags: list[str] = []
        if class_name := test_case.get("classname"):
            metadata["class_name"] = class_name
            if match := CLASSNAME_TAGS.search(class_name):
                tags = [tag.strip().lstrip("@") for tag in match.group(1).split(",")]
        if (line := failed_line(stack_trace, error_message)) is not None:
            metadata["failed_at_line"] = str(line)

        return ScenarioResult(
            name=test_case.get("name") or "Unknown Scenario",
            tags=tags,
            status=status,
            start_time=parse_timestamp(test_case.get("timestamp")),
            duration=parse_seconds(test_case.get("time")),
            error_message=error_message,
            stack_trace=stack_trace,
            steps=steps,
            metadata=metadata,
        )


def _environment(suite: ET.Element) -> dict[str, str]:
    environment = {
        "test_suite": suite.get("name") or "Unknown",
        "hostname": suite.get("hostname") or "Unknown",
    }
    if timestamp := suite.get("timestamp"):
        environment["timestamp"] = timestamp
    for prop in suite.findall("properties/property"):
        name, value = prop.get("name"), prop.get("value")
        if name and value:
            environment[name] = value
    return environment
