"""Step recovery for Reqnroll/SpecFlow ``StdOut`` captured in TRX files.

Each step line is followed by an outcome line such as
``-> done: LoginSteps.GivenIAmOnTheLoginPage() (0.0s)``.
"""

from bdd_reconciler.parsers.nunit3.steps import REQNROLL_OUTCOMES
from bdd_reconciler.parsers.step_output import StepOutputReader

trx_step_reader = StepOutputReader(outcome_lines=REQNROLL_OUTCOMES)
