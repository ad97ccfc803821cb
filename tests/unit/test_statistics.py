"""Tests for statistics aggregation and status derivation."""

import pytest

from bdd_reconciler.models.execution import ExecutionStatus
from bdd_reconciler.statistics import (
    calculate_statistics,
    derive_feature_status,
    worst_status,
)
from bdd_reconciler.testing.factories import (
    FeatureResultFactory,
    ScenarioResultFactory,
    StepResultFactory,
)

P = ExecutionStatus.PASSED
F = ExecutionStatus.FAILED
S = ExecutionStatus.SKIPPED
N = ExecutionStatus.NOT_EXECUTED
U = ExecutionStatus.UNDEFINED


@pytest.mark.parametrize(
    ("statuses", "expected"),
    [
        ([P, F, S], F),
        ([S, S], S),
        ([P, S], P),
        ([P, N], P),
        ([N, N], N),
        ([ExecutionStatus.PENDING], N),
        ([], N),
    ],
)
def test_derive_feature_status(
    statuses: list[ExecutionStatus], expected: ExecutionStatus
) -> None:
    """Failed beats all-skipped beats any-passed."""
    assert derive_feature_status(statuses) == expected


@pytest.mark.parametrize(
    ("statuses", "expected"),
    [
        ([P, F, S], F),
        ([P, S], S),
        ([P, N], P),
        ([U, ExecutionStatus.PENDING], U),
        ([], N),
    ],
)
def test_worst_status(
    statuses: list[ExecutionStatus], expected: ExecutionStatus
) -> None:
    """Picks the most severe status."""
    assert worst_status(statuses) == expected


def test_statistics_for_empty_report() -> None:
    """Zero scenarios yields zero totals and a zero pass rate."""
    stats = calculate_statistics([])

    assert stats.total_scenarios == 0
    assert stats.pass_rate == 0.0


def test_statistics_count_each_scenario_and_step() -> None:
    """Counts scenarios and steps by status."""
    feature = FeatureResultFactory.build(
        scenarios=[
            ScenarioResultFactory.build(
                status=P,
                steps=[
                    StepResultFactory.build(status=P),
                    StepResultFactory.build(status=P),
                ],
            ),
            ScenarioResultFactory.build(
                status=F,
                steps=[
                    StepResultFactory.build(status=F),
                    StepResultFactory.build(status=S),
                ],
            ),
            ScenarioResultFactory.build(status=ExecutionStatus.INCONCLUSIVE),
        ]
    )

    stats = calculate_statistics([feature])

    assert stats.total_scenarios == 3
    assert stats.passed_scenarios == 1
    assert stats.failed_scenarios == 1
    assert stats.inconclusive_scenarios == 1
    assert stats.total_steps == 4
    assert stats.passed_steps == 2
    assert stats.failed_steps == 1
    assert stats.skipped_steps == 1


def test_expanded_outline_counts_once_per_row() -> None:
    """An outline expanded into three results counts three times."""
    feature = FeatureResultFactory.build(
        scenarios=[
            ScenarioResultFactory.build(name=f"Add numbers(row={i})", status=P)
            for i in range(1, 4)
        ]
    )

    stats = calculate_statistics([feature])

    assert stats.total_scenarios == 3
    assert stats.passed_scenarios == 3
