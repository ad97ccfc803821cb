"""Models for the specification tree handed over by the markup parser."""

from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from bdd_reconciler.models.base import Model


class SpecStep(Model):
    """A step as written in the specification."""

    keyword: str = Field(..., description="Given, When, Then, And, But or *")
    text: str = Field(..., description="Step text without the keyword")
    line: int | None = Field(default=None, description="Source line")
    doc_string: str | None = None
    data_table: Sequence[Sequence[str]] = Field(default_factory=list)


class Background(Model):
    """Steps shared by every scenario of a feature or rule."""

    name: str = ""
    steps: Sequence[SpecStep] = Field(default_factory=list)


class ExampleTable(Model):
    """One ``Examples:`` block of an outline."""

    name: str = ""
    tags: Sequence[str] = Field(default_factory=list)
    header: Sequence[str] = Field(default_factory=list)
    rows: Sequence[Sequence[str]] = Field(default_factory=list)


class SpecScenario(Model):
    """A scenario or scenario outline."""

    name: str = Field(..., description="Scenario title")
    type: Literal["scenario", "outline"] = Field(
        default="scenario", description="Plain scenario or parameterized outline"
    )
    tags: Sequence[str] = Field(default_factory=list)
    steps: Sequence[SpecStep] = Field(default_factory=list)
    examples: Sequence[ExampleTable] = Field(default_factory=list)
    line: int | None = None

    @property
    def is_outline(self) -> bool:
        """Whether the scenario expands into one execution per example row."""
        return self.type == "outline"

    def example_rows(self) -> Sequence[dict[str, str]]:
        """Flatten every example table into header-keyed rows, in declaration order."""
        rows: list[dict[str, str]] = []
        for table in self.examples:
            for values in table.rows:
                rows.append(dict(zip(table.header, values, strict=False)))
        return rows


class SpecRule(Model):
    """A ``Rule:`` grouping scenarios inside a feature."""

    name: str
    tags: Sequence[str] = Field(default_factory=list)
    background: Background | None = None
    scenarios: Sequence[SpecScenario] = Field(default_factory=list)


class SpecFeature(Model):
    """A feature file."""

    name: str = Field(..., description="Feature title")
    description: str = ""
    file_path: str = ""
    tags: Sequence[str] = Field(default_factory=list)
    background: Background | None = None
    scenarios: Sequence[SpecScenario] = Field(default_factory=list)
    rules: Sequence[SpecRule] = Field(default_factory=list)

    def all_scenarios(self) -> Sequence[tuple[SpecScenario, Background | None]]:
        """Feature scenarios then rule scenarios, each with its effective background."""
        entries: list[tuple[SpecScenario, Background | None]] = [
            (scenario, self.background) for scenario in self.scenarios
        ]
        for rule in self.rules:
            background = _combine(self.background, rule.background)
            entries.extend((scenario, background) for scenario in rule.scenarios)
        return entries


class Specification(Model):
    """The complete specification tree."""

    features: Sequence[SpecFeature] = Field(default_factory=list)


def _combine(outer: Background | None, inner: Background | None) -> Background | None:
    if outer is None:
        return inner
    if inner is None:
        return outer
    return Background(name=inner.name, steps=[*outer.steps, *inner.steps])
