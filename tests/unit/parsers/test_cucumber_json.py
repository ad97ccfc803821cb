"""Tests for the Cucumber JSON parser."""

import json
from datetime import UTC, datetime
from typing import Any

import pytest

from bdd_reconciler.errors import InvalidFormatError
from bdd_reconciler.models.execution import ExecutionStatus, Framework
from bdd_reconciler.parsers.cucumber_json import CucumberJsonParser
from bdd_reconciler.testing import payloads
from bdd_reconciler.testing.payloads import WriteReportFn


@pytest.fixture
def parser() -> CucumberJsonParser:
    """Create parser."""
    return CucumberJsonParser()


def _dump(*features: dict[str, Any]) -> str:
    return json.dumps(list(features))


def test_parses_scenarios_with_steps(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """Step durations are converted from nanoseconds and summed."""
    content = _dump(
        payloads.cucumber_feature(
            tags=["@auth"],
            elements=[
                payloads.cucumber_element(
                    tags=["@smoke"],
                    start_timestamp="2024-01-15T10:30:00.000Z",
                    steps=[
                        payloads.cucumber_step(duration=500_000_000),
                        payloads.cucumber_step(
                            keyword="When ", name="the user logs in", line=6
                        ),
                    ],
                )
            ],
        )
    )

    report = parser.parse(write_report("cucumber.json", content))

    assert report.framework == Framework.CUCUMBER
    assert report.generated_at == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    feature = report.features[0]
    assert feature.name == "User Login"
    assert feature.file_path == "features/login.feature"
    assert feature.tags == ["auth"]
    scenario = feature.scenarios[0]
    assert scenario.tags == ["smoke"]
    assert scenario.status == ExecutionStatus.PASSED
    assert scenario.duration == pytest.approx(0.501)
    assert [s.keyword for s in scenario.steps] == ["Given", "When"]
    assert scenario.metadata["line"] == "4"


def test_background_steps_prefix_next_scenario(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """A background element is carried into the following scenario only."""
    content = _dump(
        payloads.cucumber_feature(
            elements=[
                payloads.cucumber_element(
                    name="",
                    element_type="background",
                    steps=[payloads.cucumber_step(name="the app is running")],
                ),
                payloads.cucumber_element(steps=[payloads.cucumber_step()]),
                payloads.cucumber_element(
                    name="Log out", steps=[payloads.cucumber_step()]
                ),
            ]
        )
    )

    feature = parser.parse(write_report("cucumber.json", content)).features[0]

    assert len(feature.scenarios) == 2
    assert [s.text for s in feature.scenarios[0].steps] == [
        "the app is running",
        "the user is on the login page",
    ]
    assert len(feature.scenarios[1].steps) == 1


def test_failed_step_error_is_split(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """The first error line is the message, the rest the stack trace."""
    content = _dump(
        payloads.cucumber_feature(
            elements=[
                payloads.cucumber_element(
                    steps=[
                        payloads.cucumber_step(),
                        payloads.cucumber_step(
                            status="failed",
                            error_message="Expected dashboard\n  at login.feature:7",
                        ),
                        payloads.cucumber_step(status="skipped"),
                    ]
                )
            ]
        )
    )

    report = parser.parse(write_report("cucumber.json", content))

    scenario = report.features[0].scenarios[0]
    assert scenario.status == ExecutionStatus.FAILED
    assert scenario.error_message == "Expected dashboard"
    assert scenario.stack_trace == "at login.feature:7"
    assert scenario.metadata["failed_at_line"] == "7"
    assert report.statistics.failed_steps == 1


def test_failing_hook_fails_scenario(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """A failed after hook fails a scenario whose steps all passed."""
    element = payloads.cucumber_element(steps=[payloads.cucumber_step()])
    element["after"] = [
        {"result": {"status": "failed", "error_message": "teardown failed"}}
    ]
    content = _dump(payloads.cucumber_feature(elements=[element]))

    report = parser.parse(write_report("cucumber.json", content))

    scenario = report.features[0].scenarios[0]
    assert scenario.status == ExecutionStatus.FAILED
    assert scenario.error_message == "teardown failed"


@pytest.mark.parametrize(
    ("statuses", "expected"),
    [
        (["passed", "pending"], ExecutionStatus.PENDING),
        (["passed", "undefined", "skipped"], ExecutionStatus.UNDEFINED),
        (["skipped", "skipped"], ExecutionStatus.SKIPPED),
        (["passed", "ambiguous"], ExecutionStatus.FAILED),
    ],
)
def test_scenario_status_precedence(
    parser: CucumberJsonParser,
    write_report: WriteReportFn,
    statuses: list[str],
    expected: ExecutionStatus,
) -> None:
    """Failed beats undefined, which beats pending, which beats skipped."""
    content = _dump(
        payloads.cucumber_feature(
            elements=[
                payloads.cucumber_element(
                    steps=[payloads.cucumber_step(status=s) for s in statuses]
                )
            ]
        )
    )

    report = parser.parse(write_report("cucumber.json", content))

    assert report.features[0].scenarios[0].status == expected


def test_scenario_without_steps_is_not_executed(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """An element with no steps never ran."""
    content = _dump(payloads.cucumber_feature(elements=[payloads.cucumber_element()]))

    report = parser.parse(write_report("cucumber.json", content))

    assert report.features[0].scenarios[0].status == ExecutionStatus.NOT_EXECUTED


def test_image_embeddings_become_attachments(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """Image embeddings are kept as data URIs, other types are dropped."""
    step = payloads.cucumber_step()
    step["embeddings"] = [
        {"mime_type": "image/png", "data": "iVBORw0KGgo="},
        {"mime_type": "text/plain", "data": "bG9n"},
    ]
    content = _dump(
        payloads.cucumber_feature(elements=[payloads.cucumber_element(steps=[step])])
    )

    report = parser.parse(write_report("cucumber.json", content))

    assert report.features[0].scenarios[0].attachments == [
        "data:image/png;base64,iVBORw0KGgo="
    ]


def test_probe_rejects_other_json(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """JSON that is not a feature array is not recognised."""
    assert not parser.can_parse(write_report("package.json", '{"name": "app"}'))
    assert not parser.can_parse(write_report("empty.json", "[]"))
    assert not parser.can_parse(write_report("broken.json", "[{"))


def test_invalid_shape_raises(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """Elements that are not objects make the report invalid."""
    path = write_report("cucumber.json", '[{"name": "Login", "elements": [42]}]')

    with pytest.raises(InvalidFormatError, match="unexpected document shape"):
        parser.parse(path)


def test_passed_and_failed_statistics(
    parser: CucumberJsonParser, write_report: WriteReportFn
) -> None:
    """One passed and one failed scenario yields 2/1/1 statistics."""
    content = _dump(
        payloads.cucumber_feature(
            elements=[
                payloads.cucumber_element(steps=[payloads.cucumber_step()]),
                payloads.cucumber_element(
                    name="Invalid password",
                    steps=[payloads.cucumber_step(status="failed")],
                ),
            ]
        )
    )

    report = parser.parse(write_report("cucumber.json", content))

    assert report.statistics.total_scenarios == 2
    assert report.statistics.passed_scenarios == 1
    assert report.statistics.failed_scenarios == 1
