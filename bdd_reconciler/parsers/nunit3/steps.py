"""Step recovery for SpecFlow/Reqnroll trace output captured by NUnit."""

from bdd_reconciler.models.execution import ExecutionStatus
from bdd_reconciler.parsers.step_output import StepOutputReader

REQNROLL_OUTCOMES = {
    "-> done:": ExecutionStatus.PASSED,
    "-> error:": ExecutionStatus.FAILED,
    "-> skipping because of previous errors": ExecutionStatus.SKIPPED,
    "-> pending:": ExecutionStatus.PENDING,
    "-> No matching step definition found": ExecutionStatus.UNDEFINED,
}

nunit_step_reader = StepOutputReader(outcome_lines=REQNROLL_OUTCOMES)
