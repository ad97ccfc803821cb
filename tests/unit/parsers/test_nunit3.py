"""Tests for the NUnit 3 parser."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from bdd_reconciler.errors import InvalidFormatError, ReportFileNotFoundError
from bdd_reconciler.models.execution import ExecutionStatus, Framework
from bdd_reconciler.parsers.nunit3 import NUnit3Parser
from bdd_reconciler.testing import payloads
from bdd_reconciler.testing.payloads import WriteReportFn


@pytest.fixture
def parser() -> NUnit3Parser:
    """Create parser."""
    return NUnit3Parser()


def _passed_and_failed() -> str:
    return payloads.nunit3_report(
        test_cases=[
            payloads.nunit3_test_case(name="CanLogin"),
            payloads.nunit3_test_case(
                name="InvalidPassword",
                result="Failed",
                start_time="2024-01-15T10:30:01Z",
                message="Expected dashboard",
                stack_trace="at LoginSteps.ThenDashboard() in Login.feature:12",
            ),
        ]
    )


def test_parses_passed_and_failed(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """One passed and one failed scenario yields 2/1/1 statistics."""
    report = parser.parse(write_report("results.xml", _passed_and_failed()))

    assert report.framework == Framework.NUNIT
    assert report.statistics.total_scenarios == 2
    assert report.statistics.passed_scenarios == 1
    assert report.statistics.failed_scenarios == 1


def test_maps_fixture_to_feature(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """Fixture class names become readable feature names."""
    report = parser.parse(write_report("results.xml", _passed_and_failed()))

    feature = report.features[0]
    assert feature.name == "User Login"
    assert feature.status == ExecutionStatus.FAILED
    assert feature.duration == 1.0
    assert [s.name for s in feature.scenarios] == ["Can Login", "Invalid Password"]


def test_reads_failure_detail_and_times(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """Failure message, stack trace, line and start time are kept."""
    report = parser.parse(write_report("results.xml", _passed_and_failed()))

    failed = report.features[0].scenarios[1]
    assert failed.error_message == "Expected dashboard"
    assert failed.stack_trace is not None
    assert failed.metadata["failed_at_line"] == "12"
    assert failed.metadata["test_name"] == "InvalidPassword"
    assert failed.start_time == datetime(2024, 1, 15, 10, 30, 1, tzinfo=UTC)
    assert report.environment["framework"] == "3.13.3"


def test_description_and_feature_file_properties_win(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """Description and FeatureFile properties take precedence."""
    content = payloads.nunit3_report(
        description="Login",
        feature_file="Features/Login.feature",
        test_cases=[payloads.nunit3_test_case(description="User can log in")],
    )

    feature = parser.parse(write_report("results.xml", content)).features[0]

    assert feature.name == "Login"
    assert feature.file_path == "Features/Login.feature"
    assert feature.scenarios[0].name == "User can log in"


def test_outline_rows_inherit_method_description(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """Rows of a parameterized method keep the title plus their arguments."""
    rows = "".join(
        payloads.nunit3_test_case(name=f'AddTwoNumbers("{a}","{b}",null)')
        for a, b in (("1", "2"), ("3", "4"))
    )
    method = (
        '<test-suite type="ParameterizedMethod" name="AddTwoNumbers">'
        '<properties><property name="Description" value="Add two numbers" />'
        f"</properties>{rows}</test-suite>"
    )

    report = parser.parse(
        write_report("results.xml", payloads.nunit3_report(test_cases=[method]))
    )

    assert [s.name for s in report.features[0].scenarios] == [
        'Add two numbers("1","2",null)',
        'Add two numbers("3","4",null)',
    ]


def test_recovers_steps_from_output(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """Reqnroll trace output becomes step results."""
    output = "\n".join(
        [
            "Given the user is on the login page",
            "-> done: LoginSteps.GivenTheUserIsOnTheLoginPage() (0.1s)",
            "When the user logs in",
            "-> error: Timeout (0.2s)",
        ]
    )
    content = payloads.nunit3_report(
        test_cases=[
            payloads.nunit3_test_case(result="Failed", message="Timeout", output=output)
        ]
    )

    report = parser.parse(write_report("results.xml", content))
    scenario = report.features[0].scenarios[0]

    assert [s.status for s in scenario.steps] == [
        ExecutionStatus.PASSED,
        ExecutionStatus.FAILED,
    ]


def test_failed_scenario_marks_last_step_failed(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """A failed scenario whose steps all passed gets its last step failed."""
    content = payloads.nunit3_report(
        test_cases=[
            payloads.nunit3_test_case(
                result="Failed", message="Teardown failed", output="Given X\nWhen Y"
            )
        ]
    )

    report = parser.parse(write_report("results.xml", content))
    scenario = report.features[0].scenarios[0]

    assert scenario.steps[-1].status == ExecutionStatus.FAILED
    assert scenario.steps[-1].error_message == "Teardown failed"


@pytest.mark.parametrize(
    ("result", "label", "expected"),
    [
        ("Skipped", None, ExecutionStatus.SKIPPED),
        ("Inconclusive", None, ExecutionStatus.INCONCLUSIVE),
        ("Failed", "Error", ExecutionStatus.FAILED),
        ("Exploded", None, ExecutionStatus.NOT_EXECUTED),
    ],
)
def test_status_mapping(
    parser: NUnit3Parser,
    write_report: WriteReportFn,
    result: str,
    label: str | None,
    expected: ExecutionStatus,
) -> None:
    """Native results map onto canonical statuses, unknown to NotExecuted."""
    content = payloads.nunit3_report(
        test_cases=[payloads.nunit3_test_case(result=result, label=label)]
    )

    report = parser.parse(write_report("results.xml", content))
    scenario = report.features[0].scenarios[0]

    assert scenario.status == expected


def test_can_parse(parser: NUnit3Parser, write_report: WriteReportFn) -> None:
    """Accepts <test-run> documents only."""
    assert parser.can_parse(write_report("a.xml", _passed_and_failed()))
    assert not parser.can_parse(write_report("b.xml", "<test-results />"))
    assert not parser.can_parse(write_report("c.xml", "not xml at all"))
    assert not parser.can_parse(write_report("d.txt", _passed_and_failed()))


def test_raises_for_truncated_document(
    parser: NUnit3Parser, write_report: WriteReportFn
) -> None:
    """A broken document is an InvalidFormatError naming the file."""
    path = write_report("broken.xml", '<test-run><test-suite type="TestFixture">')

    with pytest.raises(InvalidFormatError, match="broken.xml"):
        parser.parse(path)


def test_raises_for_missing_file(parser: NUnit3Parser, tmp_path: Path) -> None:
    """A missing file raises ReportFileNotFoundError."""
    with pytest.raises(ReportFileNotFoundError, match="missing.xml"):
        parser.parse(tmp_path / "missing.xml")
