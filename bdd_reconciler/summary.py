"""Human and machine readable summaries of reports and enriched documents."""

import logging
from typing import Any

from bdd_reconciler.models.enriched import EnrichedDocument
from bdd_reconciler.models.execution import ExecutionReport, ExecutionStatus
from bdd_reconciler.orchestrator import BatchResult

STATUS_SYMBOLS = {
    ExecutionStatus.PASSED: "✅",
    ExecutionStatus.FAILED: "❌",
    ExecutionStatus.SKIPPED: "⏭️",
    ExecutionStatus.PENDING: "⏳",
    ExecutionStatus.UNDEFINED: "❓",
    ExecutionStatus.INCONCLUSIVE: "❔",
    ExecutionStatus.NOT_EXECUTED: "⚪",
}
FAILURE_SYMBOL = "❗"


def log_batch_summary(log: logging.Logger, batch: BatchResult) -> None:
    """Log one line per parsed file and one per failed file, then totals."""
    log.info("=" * 80)
    log.info("Report Parsing Summary:")
    log.info("=" * 80)

    for report in batch.reports:
        stats = report.statistics
        log.info(
            "%s %s: %s, %d scenario(s), %d passed, %d failed (%.2fs)",
            STATUS_SYMBOLS[
                ExecutionStatus.FAILED
                if stats.failed_scenarios
                else ExecutionStatus.PASSED
            ],
            report.source,
            report.framework,
            stats.total_scenarios,
            stats.passed_scenarios,
            stats.failed_scenarios,
            report.total_duration,
        )

    for failure in batch.failures:
        log.info("%s %s: %s", FAILURE_SYMBOL, failure.path, failure.error_type)
        log.info("  Message: %s", failure.message)

    log.info(
        "Parsed %d of %d file(s), %d failed",
        len(batch.reports),
        batch.total_files,
        len(batch.failures),
    )


def summarize_report(report: ExecutionReport) -> str:
    """Render a plain-text summary of an execution report."""
    stats = report.statistics
    lines = [
        f"Report: {report.source} ({report.framework})",
        f"Features: {len(report.features)}",
        (
            f"Scenarios: {stats.total_scenarios} total, "
            f"{stats.passed_scenarios} passed, {stats.failed_scenarios} failed, "
            f"{stats.skipped_scenarios} skipped"
        ),
        f"Steps: {stats.total_steps} total, {stats.failed_steps} failed",
        f"Pass rate: {stats.pass_rate:.1f}%",
        f"Duration: {report.total_duration:.2f}s",
    ]
    for feature in report.features:
        lines.append(f"{STATUS_SYMBOLS[feature.status]} {feature.name}")
        for scenario in feature.scenarios:
            lines.append(f"  {STATUS_SYMBOLS[scenario.status]} {scenario.name}")
            if scenario.error_message:
                lines.append(f"    {scenario.error_message}")
    return "\n".join(lines)


def format_summary(document: EnrichedDocument) -> dict[str, Any]:
    """Format an enriched document summary for JSON output."""
    features: list[dict[str, Any]] = []
    for enriched in document.features:
        features.append(
            {
                "name": enriched.feature.name,
                "status": str(enriched.status),
                "duration": enriched.duration,
                "passed": enriched.passed_count,
                "failed": enriched.failed_count,
                "skipped": enriched.skipped_count,
                "not_executed": enriched.not_executed_count,
                "pass_rate": enriched.pass_rate,
                "scenarios": [
                    {
                        "name": scenario.scenario.name,
                        "status": str(scenario.status),
                        "duration": scenario.duration,
                        "error_message": scenario.error_message,
                        "failed_at_line": scenario.failed_at_line,
                        "examples": {
                            str(index): str(row.status)
                            for index, row in scenario.example_results.items()
                        },
                    }
                    for scenario in enriched.scenarios
                ],
            }
        )

    stats = document.statistics
    return {
        "title": document.title,
        "generated_at": document.generated_at.isoformat(),
        "total_features": stats.total_features,
        "total_scenarios": stats.total_scenarios,
        "passed": stats.passed_scenarios,
        "failed": stats.failed_scenarios,
        "skipped": stats.skipped_scenarios,
        "pending": stats.pending_scenarios,
        "undefined": stats.undefined_scenarios,
        "inconclusive": stats.inconclusive_scenarios,
        "untested": stats.untested_scenarios,
        "pass_rate": stats.pass_rate,
        "coverage": stats.coverage,
        "tags": dict(document.tag_distribution),
        "features": features,
    }
