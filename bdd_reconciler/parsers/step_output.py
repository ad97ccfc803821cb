"""Recovery of step results from runner console output.

Report schemas rarely carry step detail; runners print it instead. The
``StepOutputReader`` recognises Gherkin step lines by keyword prefix and
tracks failure state while reading lines in order. Each format configures
its own reader for the log conventions of its runner family.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from bdd_reconciler.models.execution import ExecutionStatus, StepResult

GHERKIN_KEYWORDS = frozenset(["Given", "When", "Then", "And", "But", "*"])
FAILURE_MARKERS: Sequence[str] = ("<-- FAILED", "FAILED AT THIS STEP")
COMMENT_SEPARATORS: Sequence[str] = ("<--", " # ")
LINE_REFERENCE = re.compile(r"(?:\.feature:|\bline\s+|#\s*)(\d+)")
OUTCOME_DURATION = re.compile(r"\((\d+(?:\.\d+)?)s\)\s*$")


@dataclass(frozen=True, kw_only=True)
class StepOutputReader:
    """Configurable reader turning console output into step results.

    Attributes:
        failure_markers: Text that flags a failure on the line it appears on.
            The previously parsed step is marked failed, a step on the same
            line is failed, and every later step is skipped.
        status_prefixes: Leading symbols carrying a step status (e.g. ``✓``).
        trailing_status: Pattern with ``text`` and ``status`` groups for
            runners that print the status after the step text.
        outcome_lines: Line prefixes that report the outcome of the step
            printed just before them (e.g. ``-> done:``).
        status_words: Native status words used by ``trailing_status``.

    """

    failure_markers: Sequence[str] = FAILURE_MARKERS
    status_prefixes: Mapping[str, ExecutionStatus] = field(default_factory=dict)
    trailing_status: re.Pattern[str] | None = None
    outcome_lines: Mapping[str, ExecutionStatus] = field(default_factory=dict)
    status_words: Mapping[str, ExecutionStatus] = field(default_factory=dict)

    def read(self, output: str | None) -> list[StepResult]:
        """Parse console output into ordered step results."""
        steps: list[StepResult] = []
        if not output:
            return steps

        failure_seen = False
        for raw_line in output.splitlines():
            line = raw_line.strip()
            if not line:
                continue

            outcome = self._outcome(line)
            if outcome is not None:
                if steps:
                    steps[-1] = self._apply_outcome(steps[-1], line, outcome)
                if outcome == ExecutionStatus.FAILED:
                    failure_seen = True
                continue

            explicit, line = self._strip_status_prefix(line)
            marked = any(marker in line for marker in self.failure_markers)
            if marked and steps:
                steps[-1] = steps[-1].model_copy(
                    update={"status": ExecutionStatus.FAILED}
                )

            step = self._parse_step(line, explicit, marked, failure_seen)
            if step is not None:
                steps.append(step)

            if marked or (step is not None and step.status == ExecutionStatus.FAILED):
                failure_seen = True

        return steps

    def _outcome(self, line: str) -> ExecutionStatus | None:
        for prefix, status in self.outcome_lines.items():
            if line.startswith(prefix):
                return status
        return None

    def _apply_outcome(
        self, step: StepResult, line: str, status: ExecutionStatus
    ) -> StepResult:
        update: dict[str, object] = {"status": status}
        if (duration := OUTCOME_DURATION.search(line)) is not None:
            update["duration"] = float(duration.group(1))
        if status == ExecutionStatus.FAILED:
            _prefix, _, message = line.partition(":")
            update["error_message"] = message.strip() or None
        return step.model_copy(update=update)

    def _strip_status_prefix(self, line: str) -> tuple[ExecutionStatus | None, str]:
        for prefix, status in self.status_prefixes.items():
            if line.startswith(prefix):
                return status, line.removeprefix(prefix).strip()
        return None, line

    def _parse_step(
        self,
        line: str,
        explicit: ExecutionStatus | None,
        marked: bool,
        failure_seen: bool,
    ) -> StepResult | None:
        text, comment = _split_comment(line)
        if self.trailing_status is not None:
            match = self.trailing_status.match(text)
            if match is not None:
                text = match.group("text").strip()
                explicit = self.status_words.get(
                    match.group("status").lower(), ExecutionStatus.NOT_EXECUTED
                )

        keyword, _, rest = text.partition(" ")
        if keyword not in GHERKIN_KEYWORDS or not rest.strip():
            return None

        if marked:
            status = ExecutionStatus.FAILED
        elif explicit is not None and explicit != ExecutionStatus.NOT_EXECUTED:
            status = explicit
        elif failure_seen:
            status = ExecutionStatus.SKIPPED
        elif explicit is not None:
            status = explicit
        else:
            status = ExecutionStatus.PASSED

        line_match = LINE_REFERENCE.search(comment) if comment else None
        return StepResult(
            keyword=keyword,
            text=rest.strip(),
            line=int(line_match.group(1)) if line_match else None,
            status=status,
        )


def _split_comment(line: str) -> tuple[str, str]:
    for separator in COMMENT_SEPARATORS:
        if separator in line:
            text, _, comment = line.partition(separator)
            return text.strip(), comment.strip()
    return line, ""
