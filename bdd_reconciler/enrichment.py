"""Bind execution results onto the specification tree."""

import re
from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from bdd_reconciler.errors import (
    InvalidSpecificationError,
    UnidentifiableFeatureError,
)
from bdd_reconciler.events import EventSink, ReconcileEvent, log_event
from bdd_reconciler.models.enriched import (
    EnrichedDocument,
    EnrichedFeature,
    EnrichedScenario,
    EnrichedStep,
)
from bdd_reconciler.models.execution import (
    ExecutionReport,
    ExecutionStatus,
    FeatureResult,
    ScenarioResult,
    Statistics,
    StepResult,
    normalize_name,
)
from bdd_reconciler.models.specification import (
    Background,
    SpecFeature,
    SpecScenario,
    SpecStep,
    Specification,
)
from bdd_reconciler.statistics import (
    calculate_document_statistics,
    calculate_statistics,
    worst_status,
)

PLACEHOLDER = re.compile(r"<([^<>]+)>")
PARAMETER_DELIMITER = re.compile(r"[(<]")
KEYED_ARGUMENT = re.compile(r"^\s*([\w ]+?)\s*(?:=|:)\s*(.*)$")
NULL_ARGUMENTS = frozenset(["null", "none", "nil", ""])

type ResultPredicate = Callable[[ScenarioResult], bool]


@dataclass
class _ResultPool:
    """Execution scenarios of one feature, each bindable at most once."""

    results: Sequence[ScenarioResult]
    consumed: set[int] = field(default_factory=set)

    def take(self, predicate: ResultPredicate) -> ScenarioResult | None:
        """Consume the first unconsumed result accepted by ``predicate``."""
        for index, result in enumerate(self.results):
            if index not in self.consumed and predicate(result):
                self.consumed.add(index)
                return result
        return None


def enrich_document(
    specification: Specification | None,
    report: ExecutionReport | None = None,
    on_event: EventSink = log_event,
) -> EnrichedDocument:
    """Build the enriched document from a specification and a merged report.

    A specification scenario without a matching result is left NotExecuted;
    that is the expected state for untested scenarios, not an error.

    Args:
        specification: The parsed specification tree
        report: The merged execution report, None when nothing ran yet
        on_event: Sink receiving enrichment events

    Returns:
        The enriched document

    Raises:
        InvalidSpecificationError: If no specification tree is given
        UnidentifiableFeatureError: If an execution feature has no usable name

    """
    if specification is None:
        raise InvalidSpecificationError("A specification tree is required")

    results_by_feature: dict[str, list[FeatureResult]] = {}
    if report is not None:
        for feature_result in report.features:
            key = normalize_name(feature_result.name)
            if not key:
                raise UnidentifiableFeatureError(
                    f"Execution feature without a usable name in {report.source}"
                )
            results_by_feature.setdefault(key, []).append(feature_result)

    on_event(
        ReconcileEvent(
            name="enrich.started",
            attributes={
                "features": len(specification.features),
                "execution_features": sum(map(len, results_by_feature.values())),
            },
        )
    )

    spec_keys = {normalize_name(feature.name) for feature in specification.features}
    for key, feature_results in results_by_feature.items():
        if key not in spec_keys:
            for feature_result in feature_results:
                on_event(
                    ReconcileEvent(
                        name="enrich.feature_unmatched",
                        attributes={"feature": feature_result.name},
                    )
                )

    features = [
        enrich_feature(
            feature,
            results_by_feature.get(normalize_name(feature.name), []),
            on_event,
        )
        for feature in specification.features
    ]
    statistics = calculate_document_statistics(features)
    on_event(
        ReconcileEvent(
            name="enrich.completed",
            attributes={
                "scenarios": statistics.total_scenarios,
                "executed": statistics.executed_scenarios,
                "untested": statistics.untested_scenarios,
            },
        )
    )

    return EnrichedDocument(
        generated_at=datetime.now(UTC),
        features=features,
        statistics=statistics,
        execution_statistics=(
            calculate_statistics(report.features)
            if report is not None
            else Statistics()
        ),
        tag_distribution=tag_distribution(specification),
    )


def enrich_feature(
    feature: SpecFeature,
    results: Sequence[FeatureResult],
    on_event: EventSink = log_event,
) -> EnrichedFeature:
    """Bind the scenarios of every matching execution feature onto ``feature``.

    Plain scenarios claim their exact-name results first, then outlines bind
    their rows, then plain scenarios fall back to the base name.
    """
    pool = _ResultPool([s for result in results for s in result.scenarios])
    entries = feature.all_scenarios()
    bound: dict[int, ScenarioResult | None] = {}

    for index, (scenario, _background) in enumerate(entries):
        if not scenario.is_outline:
            key = normalize_name(scenario.name)
            bound[index] = pool.take(lambda r, key=key: r.key == key)

    enriched: dict[int, EnrichedScenario] = {}
    for index, (scenario, background) in enumerate(entries):
        if scenario.is_outline:
            enriched[index] = _enrich_outline(
                feature, scenario, background, pool, on_event
            )

    for index, (scenario, background) in enumerate(entries):
        if scenario.is_outline:
            continue
        if bound[index] is None:
            base = base_key(scenario.name)
            bound[index] = pool.take(lambda r, base=base: base_key(r.name) == base)
        enriched[index] = enrich_scenario(scenario, background, bound[index])

    scenarios = [enriched[index] for index in range(len(entries))]
    if not results:
        on_event(
            ReconcileEvent(
                name="enrich.feature_untested", attributes={"feature": feature.name}
            )
        )

    counts = Counter(s.status for s in scenarios)
    return EnrichedFeature(
        feature=feature,
        results=list(results),
        scenarios=scenarios,
        status=worst_status(s.status for s in scenarios),
        duration=sum(s.duration for s in scenarios),
        passed_count=counts[ExecutionStatus.PASSED],
        failed_count=counts[ExecutionStatus.FAILED],
        skipped_count=counts[ExecutionStatus.SKIPPED],
        not_executed_count=counts[ExecutionStatus.NOT_EXECUTED],
    )


def enrich_scenario(
    scenario: SpecScenario,
    background: Background | None,
    result: ScenarioResult | None,
    example_row: Mapping[str, str] | None = None,
) -> EnrichedScenario:
    """Bind one execution result (or none) onto a specification scenario."""
    steps = bind_steps(scenario.steps, background, result)
    return EnrichedScenario(
        scenario=scenario,
        result=result,
        status=result.status if result is not None else ExecutionStatus.NOT_EXECUTED,
        duration=result.duration if result is not None else 0.0,
        error_message=result.error_message if result is not None else None,
        failed_at_line=_failed_at_line(steps, result),
        steps=steps,
        example_row=example_row,
    )


def bind_steps(
    steps: Sequence[SpecStep],
    background: Background | None,
    result: ScenarioResult | None,
) -> Sequence[EnrichedStep]:
    """Bind step results to specification steps by position.

    When the background leads the observed results, the first results bind to
    the background and the scenario steps bind from there on. Specification
    steps beyond the observed results stay NotExecuted.
    """
    observed: Sequence[StepResult] = result.steps if result is not None else ()
    enriched: list[EnrichedStep] = []
    offset = 0

    if background is not None and _background_leads(background, steps, observed):
        offset = len(background.steps)
        enriched.extend(
            _enrich_step(
                step, observed[i] if i < len(observed) else None, is_background=True
            )
            for i, step in enumerate(background.steps)
        )

    for i, step in enumerate(steps):
        position = offset + i
        step_result = observed[position] if position < len(observed) else None
        enriched.append(_enrich_step(step, step_result))
    return enriched


def base_key(name: str) -> str:
    """Normalized name with everything from the first parameter delimiter removed."""
    return normalize_name(PARAMETER_DELIMITER.split(name, maxsplit=1)[0])


def matches_row(
    scenario: SpecScenario, row: Mapping[str, str], result: ScenarioResult
) -> bool:
    """Whether a result name encodes exactly this example row.

    Accepts the outline title with its placeholders substituted, or the base
    title followed by a parameter list of ``key=value``, ``key: value`` or
    bare positional values.
    """
    substituted = PLACEHOLDER.sub(
        lambda m: row.get(m.group(1), m.group(0)), scenario.name
    )
    if PLACEHOLDER.search(scenario.name) and (
        result.key == normalize_name(substituted)
        or base_key(result.name) == normalize_name(substituted)
    ):
        return True

    base, paren, params = result.name.partition("(")
    if not paren or normalize_name(base) != base_key(scenario.name):
        return False
    return _arguments_match(_split_arguments(params.rstrip().removesuffix(")")), row)


def tag_distribution(specification: Specification) -> Mapping[str, int]:
    """Count tag usage over features and scenarios, most used first."""
    tags: Counter[str] = Counter()
    for feature in specification.features:
        tags.update(feature.tags)
        for scenario, _background in feature.all_scenarios():
            tags.update(scenario.tags)
    return dict(tags.most_common())


def _enrich_outline(
    feature: SpecFeature,
    scenario: SpecScenario,
    background: Background | None,
    pool: _ResultPool,
    on_event: EventSink,
) -> EnrichedScenario:
    rows = scenario.example_rows()
    bound: dict[int, ScenarioResult] = {}

    for index, row in enumerate(rows):
        result = pool.take(lambda r, row=row: matches_row(scenario, row, r))
        if result is not None:
            bound[index] = result

    # Remaining rows take the remaining same-base results in report order.
    base = base_key(scenario.name)
    for index in range(len(rows)):
        if index in bound:
            continue
        result = pool.take(lambda r: base_key(r.name) == base)
        if result is None:
            break
        bound[index] = result

    example_results: dict[int, EnrichedScenario] = {}
    for index, row in enumerate(rows):
        if index not in bound:
            on_event(
                ReconcileEvent(
                    name="enrich.outline_row_unmatched",
                    attributes={
                        "feature": feature.name,
                        "scenario": scenario.name,
                        "row": index,
                    },
                )
            )
        example_results[index] = enrich_scenario(
            scenario, background, bound.get(index), example_row=row
        )

    rows_enriched = list(example_results.values())
    representative = next(
        (r for r in rows_enriched if r.status == ExecutionStatus.FAILED),
        next((r for r in rows_enriched if r.result is not None), None),
    )
    if representative is None:
        summary = enrich_scenario(scenario, background, None)
    else:
        summary = representative
    return summary.model_copy(
        update={
            "status": worst_status(r.status for r in rows_enriched),
            "duration": sum(r.duration for r in rows_enriched),
            "example_row": None,
            "example_results": example_results,
        }
    )


def _background_leads(
    background: Background,
    steps: Sequence[SpecStep],
    observed: Sequence[StepResult],
) -> bool:
    """Whether the observed results start with the background steps.

    The leading results must repeat the background step texts; a log cut
    short inside the background only has to match the part it covers.
    Otherwise only a complete log, one result per background and scenario
    step, counts as led by the background.
    """
    if not background.steps or not observed:
        return False
    leading = zip(background.steps, observed, strict=False)
    if all(
        normalize_name(step.text) == normalize_name(result.text)
        for step, result in leading
    ):
        return True
    return len(observed) >= len(background.steps) + len(steps)


def _enrich_step(
    step: SpecStep, result: StepResult | None, is_background: bool = False
) -> EnrichedStep:
    if result is None:
        return EnrichedStep(step=step, is_background=is_background)
    return EnrichedStep(
        step=step,
        result=result,
        status=result.status,
        duration=result.duration,
        error_message=result.error_message,
        attachments=list(result.attachments),
        is_background=is_background,
    )


def _failed_at_line(
    steps: Sequence[EnrichedStep], result: ScenarioResult | None
) -> int | None:
    if result is None or result.status != ExecutionStatus.FAILED:
        return None
    for enriched in steps:
        if enriched.status == ExecutionStatus.FAILED:
            if enriched.step.line is not None:
                return enriched.step.line
            if enriched.result is not None and enriched.result.line is not None:
                return enriched.result.line
    line = result.metadata.get("failed_at_line")
    return int(line) if line and line.isdigit() else None


def _split_arguments(params: str) -> list[str]:
    arguments: list[str] = []
    current: list[str] = []
    quote: str | None = None
    for char in params:
        if quote is not None:
            if char == quote:
                quote = None
            current.append(char)
        elif char in "\"'":
            quote = char
            current.append(char)
        elif char == ",":
            arguments.append("".join(current))
            current = []
        else:
            current.append(char)
    if current or arguments:
        arguments.append("".join(current))
    return arguments


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _arguments_match(arguments: Sequence[str], row: Mapping[str, str]) -> bool:
    keyed: dict[str, str] = {}
    positional: list[str] = []
    for argument in arguments:
        stripped = argument.strip()
        if stripped[:1] not in "\"'" and (match := KEYED_ARGUMENT.match(stripped)):
            keyed[normalize_name(match.group(1))] = _unquote(match.group(2))
        else:
            positional.append(_unquote(stripped))

    if keyed:
        row_by_key = {normalize_name(k): v.strip() for k, v in row.items()}
        return bool(row_by_key) and all(
            keyed.get(k) == v for k, v in row_by_key.items()
        )

    expected = [value.strip() for value in row.values()]
    if positional[: len(expected)] != expected:
        return False
    return all(extra.lower() in NULL_ARGUMENTS for extra in positional[len(expected) :])
