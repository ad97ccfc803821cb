"""Statistics aggregation and bottom-up status derivation."""

from collections import Counter
from collections.abc import Iterable, Sequence

from bdd_reconciler.models.enriched import DocumentStatistics, EnrichedFeature
from bdd_reconciler.models.execution import (
    ExecutionStatus,
    FeatureResult,
    Statistics,
)

# Worst first.
SEVERITY_ORDER: Sequence[ExecutionStatus] = (
    ExecutionStatus.FAILED,
    ExecutionStatus.UNDEFINED,
    ExecutionStatus.PENDING,
    ExecutionStatus.INCONCLUSIVE,
    ExecutionStatus.SKIPPED,
    ExecutionStatus.PASSED,
    ExecutionStatus.NOT_EXECUTED,
)


def derive_feature_status(statuses: Iterable[ExecutionStatus]) -> ExecutionStatus:
    """Derive a feature status from its scenario statuses.

    Failed if any child failed, Skipped if every child was skipped, Passed if
    any child passed, NotExecuted otherwise (including no children at all).
    """
    children = list(statuses)
    if not children:
        return ExecutionStatus.NOT_EXECUTED
    if ExecutionStatus.FAILED in children:
        return ExecutionStatus.FAILED
    if all(status == ExecutionStatus.SKIPPED for status in children):
        return ExecutionStatus.SKIPPED
    if ExecutionStatus.PASSED in children:
        return ExecutionStatus.PASSED
    return ExecutionStatus.NOT_EXECUTED


def worst_status(statuses: Iterable[ExecutionStatus]) -> ExecutionStatus:
    """Return the most severe status, NotExecuted for an empty input."""
    present = set(statuses)
    for status in SEVERITY_ORDER:
        if status in present:
            return status
    return ExecutionStatus.NOT_EXECUTED


def calculate_statistics(features: Sequence[FeatureResult]) -> Statistics:
    """Count scenarios and steps by status.

    Every scenario entry counts once, so an outline expanded into N results
    counts N times.
    """
    scenarios: Counter[ExecutionStatus] = Counter()
    steps: Counter[ExecutionStatus] = Counter()
    total_steps = 0

    for feature in features:
        for scenario in feature.scenarios:
            scenarios[scenario.status] += 1
            for step in scenario.steps:
                total_steps += 1
                steps[step.status] += 1

    return Statistics(
        total_scenarios=scenarios.total(),
        passed_scenarios=scenarios[ExecutionStatus.PASSED],
        failed_scenarios=scenarios[ExecutionStatus.FAILED],
        skipped_scenarios=scenarios[ExecutionStatus.SKIPPED],
        pending_scenarios=scenarios[ExecutionStatus.PENDING],
        undefined_scenarios=scenarios[ExecutionStatus.UNDEFINED],
        inconclusive_scenarios=scenarios[ExecutionStatus.INCONCLUSIVE],
        not_executed_scenarios=scenarios[ExecutionStatus.NOT_EXECUTED],
        total_steps=total_steps,
        passed_steps=steps[ExecutionStatus.PASSED],
        failed_steps=steps[ExecutionStatus.FAILED],
        skipped_steps=steps[ExecutionStatus.SKIPPED],
        pending_steps=steps[ExecutionStatus.PENDING],
        undefined_steps=steps[ExecutionStatus.UNDEFINED],
    )


def calculate_document_statistics(
    features: Sequence[EnrichedFeature],
) -> DocumentStatistics:
    """Count specification scenarios by their enriched status.

    Outlines count once per example row; rows left unmatched count as untested.
    """
    counts: Counter[ExecutionStatus] = Counter()
    total_steps = 0

    for feature in features:
        for enriched in feature.scenarios:
            total_steps += len(enriched.steps)
            units = list(enriched.example_results.values()) or [enriched]
            for unit in units:
                counts[unit.status] += 1

    return DocumentStatistics(
        total_features=len(features),
        total_scenarios=counts.total(),
        total_steps=total_steps,
        passed_scenarios=counts[ExecutionStatus.PASSED],
        failed_scenarios=counts[ExecutionStatus.FAILED],
        skipped_scenarios=counts[ExecutionStatus.SKIPPED],
        pending_scenarios=counts[ExecutionStatus.PENDING],
        undefined_scenarios=counts[ExecutionStatus.UNDEFINED],
        inconclusive_scenarios=counts[ExecutionStatus.INCONCLUSIVE],
        untested_scenarios=counts[ExecutionStatus.NOT_EXECUTED],
    )
