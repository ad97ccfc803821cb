"""Tests for the NUnit 2 parser."""

from datetime import UTC, datetime

import pytest

from bdd_reconciler.models.execution import ExecutionStatus
from bdd_reconciler.parsers.nunit2 import NUnit2Parser
from bdd_reconciler.testing import payloads
from bdd_reconciler.testing.payloads import WriteReportFn


@pytest.fixture
def parser() -> NUnit2Parser:
    """Create parser."""
    return NUnit2Parser()


def test_parses_passed_and_failed(
    parser: NUnit2Parser, write_report: WriteReportFn
) -> None:
    """One passed and one failed scenario yields 2/1/1 statistics."""
    content = payloads.nunit2_report(
        test_cases=[
            payloads.nunit2_test_case(),
            payloads.nunit2_test_case(
                name="MyApp.Features.UserLoginFeature.InvalidPassword",
                result="Failure",
                success="False",
                message="Expected dashboard",
            ),
        ]
    )

    report = parser.parse(write_report("legacy.xml", content))

    assert report.statistics.total_scenarios == 2
    assert report.statistics.passed_scenarios == 1
    assert report.statistics.failed_scenarios == 1
    feature = report.features[0]
    assert feature.name == "User Login"
    assert [s.name for s in feature.scenarios] == ["Can Login", "Invalid Password"]
    assert feature.scenarios[1].error_message == "Expected dashboard"
    assert report.generated_at == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    assert report.environment["framework"] == "2.6.4"


def test_scenarios_carry_no_start_time(
    parser: NUnit2Parser, write_report: WriteReportFn
) -> None:
    """NUnit 2 records no per-test start time."""
    content = payloads.nunit2_report(test_cases=[payloads.nunit2_test_case()])

    report = parser.parse(write_report("legacy.xml", content))
    scenario = report.features[0].scenarios[0]

    assert scenario.start_time is None


def test_description_attributes_win(
    parser: NUnit2Parser, write_report: WriteReportFn
) -> None:
    """Fixture and test descriptions name the feature and scenario."""
    content = payloads.nunit2_report(
        description="Login",
        test_cases=[payloads.nunit2_test_case(description="User can log in")],
    )

    feature = parser.parse(write_report("legacy.xml", content)).features[0]

    assert feature.name == "Login"
    assert feature.scenarios[0].name == "User can log in"


@pytest.mark.parametrize(
    ("result", "success", "executed", "expected"),
    [
        ("Ignored", "False", "False", ExecutionStatus.SKIPPED),
        ("Inconclusive", "False", "True", ExecutionStatus.INCONCLUSIVE),
        ("Error", "False", "True", ExecutionStatus.FAILED),
        ("", "True", "True", ExecutionStatus.PASSED),
        ("", "", "False", ExecutionStatus.NOT_EXECUTED),
        ("Strange", "", "True", ExecutionStatus.NOT_EXECUTED),
    ],
)
def test_status_mapping(
    parser: NUnit2Parser,
    write_report: WriteReportFn,
    result: str,
    success: str,
    executed: str,
    expected: ExecutionStatus,
) -> None:
    """Results map onto canonical statuses, unknown to NotExecuted."""
    content = payloads.nunit2_report(
        test_cases=[
            payloads.nunit2_test_case(
                result=result, success=success, executed=executed
            )
        ]
    )

    report = parser.parse(write_report("legacy.xml", content))
    scenario = report.features[0].scenarios[0]

    assert scenario.status == expected


def test_skipped_scenario_gets_default_reason(
    parser: NUnit2Parser, write_report: WriteReportFn
) -> None:
    """Skipped tests without a reason still explain themselves."""
    content = payloads.nunit2_report(
        test_cases=[payloads.nunit2_test_case(result="Ignored", executed="False")]
    )

    report = parser.parse(write_report("legacy.xml", content))
    scenario = report.features[0].scenarios[0]

    assert scenario.error_message == "Test skipped"
