"""Step recovery for xUnit test output.

Runners built on xUnit print one line per step prefixed with a status
symbol: ``✓`` passed, ``✗`` failed, ``→`` reached but not completed.
"""

from bdd_reconciler.models.execution import ExecutionStatus
from bdd_reconciler.parsers.nunit3.steps import REQNROLL_OUTCOMES
from bdd_reconciler.parsers.step_output import StepOutputReader

STATUS_SYMBOLS = {
    "✓": ExecutionStatus.PASSED,
    "✗": ExecutionStatus.FAILED,
    "→": ExecutionStatus.NOT_EXECUTED,
}

xunit_step_reader = StepOutputReader(
    status_prefixes=STATUS_SYMBOLS,
    outcome_lines=REQNROLL_OUTCOMES,
)
