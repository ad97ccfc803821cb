"""Merge independently produced execution reports with latest-wins semantics."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from bdd_reconciler.errors import MergeInputEmptyError
from bdd_reconciler.events import EventSink, ReconcileEvent, log_event
from bdd_reconciler.models.execution import (
    ExecutionReport,
    FeatureResult,
    ScenarioResult,
)
from bdd_reconciler.statistics import calculate_statistics, derive_feature_status

MERGED_SOURCE = "Merged Test Report"


@dataclass
class _FeatureSlot:
    """Accumulates the scenarios of one feature key while merging."""

    feature: FeatureResult
    scenarios: list[ScenarioResult] = field(init=False)
    positions: dict[str, list[int]] = field(init=False, default_factory=dict)
    merged: bool = False

    def __post_init__(self) -> None:
        self.scenarios = list(self.feature.scenarios)
        for index, scenario in enumerate(self.scenarios):
            self.positions.setdefault(scenario.key, []).append(index)

    def build(self) -> FeatureResult:
        if not self.merged:
            return self.feature
        return self.feature.model_copy(
            update={
                "scenarios": self.scenarios,
                "duration": sum(s.duration for s in self.scenarios),
                "status": derive_feature_status(s.status for s in self.scenarios),
            }
        )


def merge_reports(
    reports: Sequence[ExecutionReport], on_event: EventSink = log_event
) -> ExecutionReport:
    """Combine reports into one, keeping the most recent execution of a scenario.

    Reports are processed in the order given. Within a feature, a scenario is
    compared with the existing scenario of the same normalized key and native
    test name. Scenarios without a native test name fall back to occurrence
    order: the k-th scenario carrying a key meets the k-th existing one, so
    outline rows that share a display name merge row by row. A partial rerun
    of such rows can only be told apart through its native test names.

    Args:
        reports: Reports in arrival order
        on_event: Sink receiving merge events

    Returns:
        The merged report; the single input itself when only one is given

    Raises:
        MergeInputEmptyError: If no report is given

    """
    if not reports:
        raise MergeInputEmptyError("Cannot merge an empty list of reports")
    if len(reports) == 1:
        return reports[0]

    on_event(
        ReconcileEvent(
            name="merge.started",
            attributes={
                "reports": len(reports),
                "sources": [report.source for report in reports],
            },
        )
    )

    slots: dict[str, _FeatureSlot] = {}
    environment: dict[str, str] = {}
    for report in reports:
        for feature in report.features:
            if (slot := slots.get(feature.key)) is None:
                slots[feature.key] = _FeatureSlot(feature)
                on_event(
                    ReconcileEvent(
                        name="merge.feature_added",
                        attributes={"feature": feature.name, "source": report.source},
                    )
                )
            else:
                _merge_feature(slot, feature, report.source, on_event)
        for key, value in report.environment.items():
            environment.setdefault(key, value)

    features = [slot.build() for slot in slots.values()]
    statistics = calculate_statistics(features)
    on_event(
        ReconcileEvent(
            name="merge.completed",
            attributes={
                "features": len(features),
                "scenarios": statistics.total_scenarios,
            },
        )
    )

    return ExecutionReport(
        source=MERGED_SOURCE,
        framework=reports[0].framework,
        generated_at=datetime.now(UTC),
        total_duration=sum(report.total_duration for report in reports),
        environment=environment,
        features=features,
        statistics=statistics,
    )


def is_more_recent(incoming: ScenarioResult, existing: ScenarioResult) -> bool:
    """Whether ``incoming`` should replace ``existing``.

    True when incoming started strictly later, or when only incoming carries a
    start time. Without usable timestamps the existing entry stays.
    """
    if incoming.start_time is None:
        return False
    if existing.start_time is None:
        return True
    return incoming.start_time > existing.start_time


def _pair_scenarios(
    slot: _FeatureSlot, scenarios: Sequence[ScenarioResult]
) -> list[int | None]:
    """Existing index each incoming scenario merges with, None when it is new.

    Scenarios pair first by key and native test name, so a rerun holding only
    some rows of an outline meets the rows it ran. The rest pair with the
    existing scenario at the same occurrence of their key, if still free.
    """
    pairs: list[int | None] = [None] * len(scenarios)
    claimed: set[int] = set()
    for position, scenario in enumerate(scenarios):
        if (test_name := scenario.metadata.get("test_name")) is None:
            continue
        for index in slot.positions.get(scenario.key, ()):
            if index in claimed:
                continue
            if slot.scenarios[index].metadata.get("test_name") == test_name:
                pairs[position] = index
                claimed.add(index)
                break

    occurrences: Counter[str] = Counter()
    for position, scenario in enumerate(scenarios):
        occurrence = occurrences[scenario.key]
        occurrences[scenario.key] += 1
        indices = slot.positions.get(scenario.key, ())
        if pairs[position] is not None or occurrence >= len(indices):
            continue
        if indices[occurrence] not in claimed:
            pairs[position] = indices[occurrence]
            claimed.add(indices[occurrence])
    return pairs


def _merge_feature(
    slot: _FeatureSlot, feature: FeatureResult, source: str, on_event: EventSink
) -> None:
    slot.merged = True
    pairs = _pair_scenarios(slot, feature.scenarios)
    for scenario, index in zip(feature.scenarios, pairs, strict=True):
        if index is None:
            slot.positions.setdefault(scenario.key, []).append(len(slot.scenarios))
            slot.scenarios.append(scenario)
            on_event(
                ReconcileEvent(
                    name="merge.scenario_added",
                    attributes={
                        "feature": feature.name,
                        "scenario": scenario.name,
                        "source": source,
                    },
                )
            )
            continue

        existing = slot.scenarios[index]
        if is_more_recent(scenario, existing):
            slot.scenarios[index] = scenario
            on_event(
                ReconcileEvent(
                    name="merge.scenario_replaced",
                    attributes={
                        "feature": feature.name,
                        "scenario": scenario.name,
                        "previous_status": existing.status,
                        "status": scenario.status,
                        "source": source,
                    },
                )
            )
        else:
            on_event(
                ReconcileEvent(
                    name="merge.scenario_kept",
                    attributes={
                        "feature": feature.name,
                        "scenario": existing.name,
                        "source": source,
                    },
                )
            )
