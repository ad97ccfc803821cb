"""Canonical execution model shared by every report parser."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from enum import StrEnum

from pydantic import Field, computed_field

from bdd_reconciler.models.base import Model


class ExecutionStatus(StrEnum):
    """Outcome of a scenario or step."""

    NOT_EXECUTED = "not_executed"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    PENDING = "pending"
    UNDEFINED = "undefined"
    INCONCLUSIVE = "inconclusive"


class Framework(StrEnum):
    """Test runner family a report was produced by."""

    NUNIT = "nunit"
    XUNIT = "xunit"
    JUNIT = "junit"
    MSTEST = "mstest"
    CUCUMBER = "cucumber"
    UNKNOWN = "unknown"


class ReportFormat(StrEnum):
    """On-disk report schema."""

    NUNIT2 = "nunit2"
    NUNIT3 = "nunit3"
    XUNIT = "xunit"
    JUNIT = "junit"
    TRX = "trx"
    CUCUMBER_JSON = "cucumber_json"


def normalize_name(name: str | None) -> str:
    """Lower-case a name and drop spaces, hyphens and underscores.

    "Login Test", "login-test" and "LoginTest" all normalize to "logintest".
    """
    if not name:
        return ""
    return name.lower().replace(" ", "").replace("-", "").replace("_", "").strip()


def normalize_path(path: str | None) -> str:
    """Normalize a file path for identity comparisons."""
    if not path:
        return ""
    return path.replace("\\", "/").lower()


class StepResult(Model):
    """Execution result of a single step."""

    keyword: str = ""
    text: str = ""
    line: int | None = None
    status: ExecutionStatus = ExecutionStatus.NOT_EXECUTED
    duration: float = 0.0
    error_message: str | None = None
    stack_trace: str | None = None
    attachments: Sequence[str] = Field(default_factory=list)


class ScenarioResult(Model):
    """Execution result of a single scenario (or one outline example row)."""

    name: str
    tags: Sequence[str] = Field(default_factory=list)
    status: ExecutionStatus = ExecutionStatus.NOT_EXECUTED
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float = 0.0
    error_message: str | None = None
    stack_trace: str | None = None
    steps: Sequence[StepResult] = Field(default_factory=list)
    attachments: Sequence[str] = Field(default_factory=list)
    metadata: Mapping[str, str] = Field(default_factory=dict)

    @property
    def key(self) -> str:
        """Normalized identity of the scenario within its feature."""
        return normalize_name(self.name)


class FeatureResult(Model):
    """Execution results grouped under one feature."""

    name: str
    file_path: str = ""
    tags: Sequence[str] = Field(default_factory=list)
    duration: float = 0.0
    status: ExecutionStatus = ExecutionStatus.NOT_EXECUTED
    scenarios: Sequence[ScenarioResult] = Field(default_factory=list)

    @property
    def key(self) -> str:
        """Normalized identity of the feature: ``name|path``."""
        return f"{normalize_name(self.name)}|{normalize_path(self.file_path)}"


class Statistics(Model):
    """Scenario and step counts of an execution report."""

    total_scenarios: int = 0
    passed_scenarios: int = 0
    failed_scenarios: int = 0
    skipped_scenarios: int = 0
    pending_scenarios: int = 0
    undefined_scenarios: int = 0
    inconclusive_scenarios: int = 0
    not_executed_scenarios: int = 0
    total_steps: int = 0
    passed_steps: int = 0
    failed_steps: int = 0
    skipped_steps: int = 0
    pending_steps: int = 0
    undefined_steps: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pass_rate(self) -> float:
        """Percentage of passed scenarios, 0 when nothing ran."""
        if self.total_scenarios == 0:
            return 0.0
        return self.passed_scenarios / self.total_scenarios * 100

    @computed_field  # type: ignore[prop-decorator]
    @property
    def fail_rate(self) -> float:
        """Percentage of failed scenarios, 0 when nothing ran."""
        if self.total_scenarios == 0:
            return 0.0
        return self.failed_scenarios / self.total_scenarios * 100


class ExecutionReport(Model):
    """Canonical report produced from one source file, or from a merge."""

    source: str
    framework: Framework = Framework.UNKNOWN
    generated_at: datetime | None = None
    total_duration: float = 0.0
    environment: Mapping[str, str] = Field(default_factory=dict)
    features: Sequence[FeatureResult] = Field(default_factory=list)
    statistics: Statistics = Field(default_factory=Statistics)
