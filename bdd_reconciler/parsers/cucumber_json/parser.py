"""Parser for Cucumber JSON reports (cucumber-js, Cucumber-JVM, SpecFlow+)."""

import json
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC
from pathlib import Path

from pydantic import TypeAdapter

from bdd_reconciler.models.execution import (
    ExecutionReport,
    ExecutionStatus,
    FeatureResult,
    Framework,
    ReportFormat,
    ScenarioResult,
    StepResult,
)
from bdd_reconciler.parsers.base import ResultParser
from bdd_reconciler.parsers.common import build_feature, failed_line
from bdd_reconciler.parsers.cucumber_json.models import (
    CucumberElement,
    CucumberFeature,
    CucumberStep,
    CucumberTag,
)

NANOSECONDS = 1_000_000_000

STATUS_MAP = {
    "passed": ExecutionStatus.PASSED,
    "failed": ExecutionStatus.FAILED,
    "ambiguous": ExecutionStatus.FAILED,
    "skipped": ExecutionStatus.SKIPPED,
    "pending": ExecutionStatus.PENDING,
    "undefined": ExecutionStatus.UNDEFINED,
}

_features_adapter = TypeAdapter(list[CucumberFeature])


@dataclass(frozen=True, kw_only=True)
class CucumberJsonParser(ResultParser):
    """Cucumber JSON parser.

    The report is an array of feature objects whose ``elements`` are
    scenarios (outlines already expanded, one element per example row) and
    backgrounds. Background steps are carried into the following scenario.
    """

    report_format = ReportFormat.CUCUMBER_JSON
    framework = Framework.CUCUMBER
    extensions = frozenset([".json"])

    def probe(self, path: Path) -> bool:
        """Recognise an array holding at least one feature-shaped object."""
        document = json.loads(path.read_bytes())
        return isinstance(document, list) and any(
            isinstance(item, dict) and "name" in item and "elements" in item
            for item in document
        )

    def read_report(self, path: Path) -> ExecutionReport:
        """Validate the JSON document and convert every feature."""
        features = [
            self._parse_feature(feature)
            for feature in _features_adapter.validate_json(path.read_bytes())
        ]
        starts = [
            scenario.start_time
            for feature in features
            for scenario in feature.scenarios
            if scenario.start_time is not None
        ]
        return ExecutionReport(
            source=path.name,
            framework=self.framework,
            generated_at=min(starts) if starts else None,
            total_duration=sum(feature.duration for feature in features),
            features=features,
        )

    def _parse_feature(self, feature: CucumberFeature) -> FeatureResult:
        scenarios: list[ScenarioResult] = []
        background: list[StepResult] = []
        for element in feature.elements:
            if element.type == "background":
                background = [_parse_step(step) for step in element.steps]
                continue
            scenarios.append(_parse_scenario(element, background))
            background = []

        return build_feature(
            name=feature.name or "Unknown Feature",
            file_path=feature.uri,
            tags=_tag_names(feature.tags),
            scenarios=scenarios,
        )


def _parse_scenario(
    element: CucumberElement, background: Sequence[StepResult]
) -> ScenarioResult:
    steps = [*background, *(_parse_step(step) for step in element.steps)]
    hooks = [_parse_step(hook) for hook in (*element.before, *element.after)]

    status = _scenario_status(steps, hooks)
    error_message = stack_trace = None
    failure = next(
        (s for s in (*steps, *hooks) if s.status == ExecutionStatus.FAILED), None
    )
    if failure is not None:
        error_message, stack_trace = failure.error_message, failure.stack_trace

    metadata: dict[str, str] = {}
    if element.id:
        metadata["id"] = element.id
    if element.line is not None:
        metadata["line"] = str(element.line)
    if (line := failed_line(stack_trace, error_message)) is not None:
        metadata["failed_at_line"] = str(line)

    start_time = element.start_timestamp
    if start_time is not None and start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=UTC)

    return ScenarioResult(
        name=element.name or "Unknown Scenario",
        tags=_tag_names(element.tags),
        status=status,
        start_time=start_time,
        duration=sum(s.duration for s in (*steps, *hooks)),
        error_message=error_message,
        stack_trace=stack_trace,
        steps=steps,
        attachments=[a for step in steps for a in step.attachments],
        metadata=metadata,
    )


def _parse_step(step: CucumberStep) -> StepResult:
    result = step.result
    status = ExecutionStatus.NOT_EXECUTED
    if result is not None and result.status:
        status = STATUS_MAP.get(result.status.lower(), ExecutionStatus.NOT_EXECUTED)

    error_message = stack_trace = None
    if result is not None and result.error_message:
        first, _, rest = result.error_message.strip().partition("\n")
        error_message, stack_trace = first, rest.strip() or None

    return StepResult(
        keyword=step.keyword.strip(),
        text=step.name,
        line=step.line,
        status=status,
        duration=(result.duration if result else 0) / NANOSECONDS,
        error_message=error_message,
        stack_trace=stack_trace,
        attachments=[
            f"data:{embedding.mime_type};base64,{embedding.data}"
            for embedding in step.embeddings
            if embedding.mime_type.startswith("image/")
        ],
    )


def _scenario_status(
    steps: Sequence[StepResult], hooks: Sequence[StepResult]
) -> ExecutionStatus:
    statuses = [s.status for s in (*steps, *hooks)]
    if ExecutionStatus.FAILED in statuses:
        return ExecutionStatus.FAILED
    if steps and all(s.status == ExecutionStatus.PASSED for s in steps):
        return ExecutionStatus.PASSED
    for status in (
        ExecutionStatus.UNDEFINED,
        ExecutionStatus.PENDING,
        ExecutionStatus.SKIPPED,
    ):
        if status in statuses:
            return status
    return ExecutionStatus.NOT_EXECUTED


def _tag_names(tags: Sequence[CucumberTag]) -> list[str]:
    return [tag.name.removeprefix("@") for tag in tags if tag.name]
