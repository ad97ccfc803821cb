"""Models for the enriched document consumed by renderers."""

from collections.abc import Mapping, Sequence
from datetime import datetime

from pydantic import Field, computed_field

from bdd_reconciler.models.base import Model
from bdd_reconciler.models.execution import (
    ExecutionStatus,
    FeatureResult,
    ScenarioResult,
    Statistics,
    StepResult,
)
from bdd_reconciler.models.specification import SpecFeature, SpecScenario, SpecStep


class EnrichedStep(Model):
    """A specification step with the execution result bound to it."""

    step: SpecStep
    result: StepResult | None = None
    status: ExecutionStatus = ExecutionStatus.NOT_EXECUTED
    duration: float = 0.0
    error_message: str | None = None
    attachments: Sequence[str] = Field(default_factory=list)
    is_background: bool = False


class EnrichedScenario(Model):
    """A specification scenario with its execution result.

    For outlines, ``example_results`` holds one entry per example row keyed
    by the 0-based row index across all example tables.
    """

    scenario: SpecScenario
    result: ScenarioResult | None = None
    status: ExecutionStatus = ExecutionStatus.NOT_EXECUTED
    duration: float = 0.0
    error_message: str | None = None
    failed_at_line: int | None = None
    steps: Sequence[EnrichedStep] = Field(default_factory=list)
    example_row: Mapping[str, str] | None = None
    example_results: Mapping[int, "EnrichedScenario"] = Field(default_factory=dict)


class EnrichedFeature(Model):
    """A specification feature with aggregated execution data."""

    feature: SpecFeature
    results: Sequence[FeatureResult] = Field(default_factory=list)
    scenarios: Sequence[EnrichedScenario] = Field(default_factory=list)
    status: ExecutionStatus = ExecutionStatus.NOT_EXECUTED
    duration: float = 0.0
    passed_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    not_executed_count: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pass_rate(self) -> float:
        """Percentage of passed scenarios in this feature."""
        if not self.scenarios:
            return 0.0
        return self.passed_count / len(self.scenarios) * 100


class DocumentStatistics(Model):
    """Statistics over the whole specification, tested or not."""

    total_features: int = 0
    total_scenarios: int = 0
    total_steps: int = 0
    passed_scenarios: int = 0
    failed_scenarios: int = 0
    skipped_scenarios: int = 0
    pending_scenarios: int = 0
    undefined_scenarios: int = 0
    inconclusive_scenarios: int = 0
    untested_scenarios: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def executed_scenarios(self) -> int:
        """Scenarios with any reported outcome, pending and undefined included."""
        return (
            self.passed_scenarios
            + self.failed_scenarios
            + self.skipped_scenarios
            + self.pending_scenarios
            + self.undefined_scenarios
            + self.inconclusive_scenarios
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pass_rate(self) -> float:
        """Passed share of executed scenarios."""
        return _rate(self.passed_scenarios, self.executed_scenarios)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def fail_rate(self) -> float:
        """Failed share of executed scenarios."""
        return _rate(self.failed_scenarios, self.executed_scenarios)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def skip_rate(self) -> float:
        """Skipped share of executed scenarios."""
        return _rate(self.skipped_scenarios, self.executed_scenarios)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def coverage(self) -> float:
        """Share of specification scenarios that were executed."""
        return _rate(self.executed_scenarios, self.total_scenarios)


class EnrichedDocument(Model):
    """The single document handed to renderers."""

    title: str = "Living Documentation"
    generated_at: datetime
    features: Sequence[EnrichedFeature] = Field(default_factory=list)
    statistics: DocumentStatistics = Field(default_factory=DocumentStatistics)
    execution_statistics: Statistics = Field(default_factory=Statistics)
    tag_distribution: Mapping[str, int] = Field(default_factory=dict)


def _rate(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return count / total * 100
