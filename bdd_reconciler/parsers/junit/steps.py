"""Step recovery for Cucumber-JVM ``system-out`` in JUnit reports.

The JUnit formatter pads each step with dots and appends its status:
``Given the user is logged in.............................passed``.
"""

import re

from bdd_reconciler.models.execution import ExecutionStatus
from bdd_reconciler.parsers.step_output import StepOutputReader

TRAILING_STATUS = re.compile(
    r"^(?P<text>.*?)\.{2,}\s*(?P<status>passed|failed|skipped|pending|undefined)\s*$",
    re.IGNORECASE,
)

STATUS_WORDS = {
    "passed": ExecutionStatus.PASSED,
    "failed": ExecutionStatus.FAILED,
    "skipped": ExecutionStatus.SKIPPED,
    "pending": ExecutionStatus.PENDING,
    "undefined": ExecutionStatus.UNDEFINED,
}

junit_step_reader = StepOutputReader(
    trailing_status=TRAILING_STATUS,
    status_words=STATUS_WORDS,
)
