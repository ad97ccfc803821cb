"""Tests for the specification tree models."""

from bdd_reconciler.models.specification import (
    Background,
    ExampleTable,
    SpecFeature,
    SpecRule,
    SpecScenario,
    SpecStep,
)


def test_example_rows_flatten_tables_in_order() -> None:
    """Rows of every example table are keyed by header, in declaration order."""
    outline = SpecScenario(
        name="Add numbers",
        type="outline",
        examples=[
            ExampleTable(header=["a", "b"], rows=[["1", "2"], ["3", "4"]]),
            ExampleTable(name="negative", header=["a", "b"], rows=[["-1", "-2"]]),
        ],
    )

    assert outline.is_outline
    assert outline.example_rows() == [
        {"a": "1", "b": "2"},
        {"a": "3", "b": "4"},
        {"a": "-1", "b": "-2"},
    ]


def test_plain_scenario_has_no_rows() -> None:
    """A plain scenario is not an outline."""
    scenario = SpecScenario(name="Can login")

    assert not scenario.is_outline
    assert scenario.example_rows() == []


def test_all_scenarios_includes_rules_with_combined_background() -> None:
    """Rule scenarios follow feature scenarios and see both backgrounds."""
    feature_step = SpecStep(keyword="Given", text="a registered user")
    rule_step = SpecStep(keyword="And", text="the user is locked")
    feature = SpecFeature(
        name="User Login",
        background=Background(steps=[feature_step]),
        scenarios=[SpecScenario(name="Can login")],
        rules=[
            SpecRule(
                name="Locked accounts",
                background=Background(steps=[rule_step]),
                scenarios=[SpecScenario(name="Cannot login")],
            )
        ],
    )

    entries = feature.all_scenarios()

    assert [scenario.name for scenario, _ in entries] == ["Can login", "Cannot login"]
    assert entries[0][1] is not None
    assert list(entries[0][1].steps) == [feature_step]
    assert entries[1][1] is not None
    assert list(entries[1][1].steps) == [feature_step, rule_step]
