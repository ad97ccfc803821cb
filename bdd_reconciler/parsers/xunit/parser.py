"""Parser for xUnit XML results (``<assemblies>``/``<assembly>`` root)."""

import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
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
    failed_line,
    load_xml,
    parse_seconds,
    parse_timestamp,
    readable_feature_name,
    readable_scenario_name,
    root_tag,
    text_of,
)
from bdd_reconciler.parsers.xunit.steps import xunit_step_reader

ROOT_ELEMENTS = frozenset(["assemblies", "assembly"])
COLLECTION_PREFIX = "Test collection for "

RESULT_TO_STATUS: Mapping[str, ExecutionStatus] = {
    "pass": ExecutionStatus.PASSED,
    "fail": ExecutionStatus.FAILED,
    "skip": ExecutionStatus.SKIPPED,
}


@dataclass(frozen=True, kw_only=True)
class XUnitParser(ResultParser):
    """xUnit v2 report parser.

    Collections become features. ``FeatureTitle``/``Feature`` and
    ``FeatureFile`` traits of the first test carrying them take precedence
    over the collection name.
    """

    report_format = ReportFormat.XUNIT
    framework = Framework.XUNIT
    extensions = frozenset([".xml"])

    def probe(self, path: Path) -> bool:
        """Recognise the assembly-rooted envelope."""
        _namespace, local = root_tag(path)
        return local in ROOT_ELEMENTS

    def read_report(self, path: Path) -> ExecutionReport:
        """Convert an ``<assemblies>`` or single ``<assembly>`` document."""
        root = load_xml(path)
        if root.tag not in ROOT_ELEMENTS:
            raise ValueError(f"expected <assemblies> root, found <{root.tag}>")

        assemblies = root.findall("assembly") if root.tag == "assemblies" else [root]
        features = [
            feature
            for assembly in assemblies
            for collection in assembly.findall("collection")
            if (feature := self._parse_feature(collection)).scenarios
        ]

        first = assemblies[0] if assemblies else None
        return ExecutionReport(
            source=path.name,
            framework=self.framework,
            generated_at=_generated_at(first),
            total_duration=sum(parse_seconds(a.get("time")) for a in assemblies),
            environment=_environment(first),
            features=features,
        )

    def _parse_feature(self, collection: ET.Element) -> FeatureResult:
        tests = collection.findall("test")
        collection_name = (collection.get("name") or "Unknown Feature").removeprefix(
            COLLECTION_PREFIX
        )
        name = _first_trait(tests, ["FeatureTitle", "Feature"])
        return build_feature(
            name=name or readable_feature_name(collection_name),
            file_path=_first_trait(tests, ["FeatureFile"]) or "",
            scenarios=[self._parse_scenario(test) for test in tests],
        )

    def _parse_scenario(self, test: ET.Element) -> ScenarioResult:
        native_name = test.get("name") or "Unknown Scenario"
        status = RESULT_TO_STATUS.get(
            (test.get("result") or "").lower(), ExecutionStatus.NOT_EXECUTED
        )

        failure = test.find("failure")
        error_message = text_of(failure, "message")
        stack_trace = text_of(failure, "stack-trace")
        if status == ExecutionStatus.SKIPPED:
            error_message = text_of(test, "reason")

        steps = xunit_step_reader.read(text_of(test, "output"))
        if status == ExecutionStatus.FAILED:
            steps = ensure_failed_step(steps, error_message)

        metadata = {"test_name": native_name}
        if method := test.get("method"):
            metadata["method"] = method
        if (line := failed_line(error_message, stack_trace)) is not None:
            metadata["failed_at_line"] = str(line)

        return ScenarioResult(
            name=(
                _traits(test).get("Description")
                or readable_scenario_name(native_name)
            ),
            tags=[
                trait.get("value") or ""
                for trait in test.findall("traits/trait")
                if trait.get("name") == "Category"
            ],
            status=status,
            duration=parse_seconds(test.get("time")),
            error_message=error_message,
            stack_trace=stack_trace,
            steps=steps,
            metadata=metadata,
        )


def _traits(test: ET.Element) -> dict[str, str]:
    return {
        trait.get("name") or "": trait.get("value") or ""
        for trait in test.findall("traits/trait")
    }


def _first_trait(tests: Sequence[ET.Element], names: Sequence[str]) -> str | None:
    for test in tests:
        traits = _traits(test)
        for name in names:
            if traits.get(name):
                return traits[name]
    return None


def _generated_at(assembly: ET.Element | None) -> datetime | None:
    if assembly is None or not assembly.get("run-date"):
        return None
    run_time = assembly.get("run-time")
    stamp = assembly.get("run-date", "")
    return parse_timestamp(f"{stamp}T{run_time}" if run_time else stamp)


def _environment(assembly: ET.Element | None) -> dict[str, str]:
    if assembly is None:
        return {}
    return {
        "assembly": assembly.get("name") or "Unknown",
        "test_framework": assembly.get("test-framework") or "Unknown",
        "environment": assembly.get("environment") or "Unknown",
        "run_date": " ".join(
            part
            for part in (assembly.get("run-date"), assembly.get("run-time"))
            if part
        ),
    }
