"""Batch orchestration: parse many report files, merge, then enrich."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from bdd_reconciler.config import ScanConfig
from bdd_reconciler.enrichment import enrich_document
from bdd_reconciler.errors import ReconcileError
from bdd_reconciler.events import EventSink, log_event
from bdd_reconciler.merging import merge_reports
from bdd_reconciler.models.enriched import EnrichedDocument
from bdd_reconciler.models.execution import ExecutionReport
from bdd_reconciler.models.specification import Specification
from bdd_reconciler.parsers.detection import Detector

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class FileFailure:
    """A report file that could not be parsed."""

    path: Path
    error_type: str
    message: str


@dataclass(frozen=True, kw_only=True)
class BatchResult:
    """Reports parsed from a batch of files, plus the files that failed."""

    reports: Sequence[ExecutionReport] = ()
    failures: Sequence[FileFailure] = ()

    @property
    def total_files(self) -> int:
        """Number of files the batch was given."""
        return len(self.reports) + len(self.failures)


@dataclass(frozen=True, kw_only=True)
class ReconcileResult:
    """The enriched document together with the batch it was built from."""

    document: EnrichedDocument
    batch: BatchResult


@dataclass(frozen=True, kw_only=True)
class ReportCollector:
    """Parses report files on worker threads and reconciles them."""

    detector: Detector = field(default_factory=Detector)
    config: ScanConfig = field(default_factory=ScanConfig)
    on_event: EventSink = log_event

    async def parse_files(self, paths: Sequence[Path]) -> BatchResult:
        """Detect and parse every file, collecting per-file failures.

        Args:
            paths: Report files, in the order reports should be merged

        Returns:
            Parsed reports in input order and a failure record per bad file

        Raises:
            ParserNotFoundError: If the configuration forces an unknown format

        """
        if not paths:
            log.info("No report files provided")
            return BatchResult()

        forced = (
            self.detector.forced_parser(self.config.report_format)
            if self.config.report_format
            else None
        )
        log.info("Parsing %d report file(s)...", len(paths))
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def _parse(path: Path) -> ExecutionReport:
            async with semaphore:
                return await asyncio.to_thread(self.detector.parse, path, forced)

        results = await asyncio.gather(
            *(_parse(path) for path in paths), return_exceptions=True
        )
        return self._process_results(paths, results)

    async def scan_directory(self, directory: Path) -> BatchResult:
        """Parse every report file matching the configured patterns.

        Raises:
            FileNotFoundError: If the directory does not exist

        """
        if not directory.is_dir():
            raise FileNotFoundError(f"Report directory not found: {directory}")

        glob = directory.rglob if self.config.recursive else directory.glob
        paths = sorted(
            {path for pattern in self.config.patterns for path in glob(pattern)}
        )
        log.info("Found %d candidate file(s) in %s", len(paths), directory)
        return await self.parse_files([path for path in paths if path.is_file()])

    async def reconcile(
        self, paths: Sequence[Path], specification: Specification
    ) -> ReconcileResult:
        """Parse, merge and enrich in one go.

        With no parsed report the specification is enriched without
        execution data, leaving every scenario NotExecuted.
        """
        batch = await self.parse_files(paths)
        merged = (
            merge_reports(batch.reports, on_event=self.on_event)
            if batch.reports
            else None
        )
        document = enrich_document(specification, merged, on_event=self.on_event)
        return ReconcileResult(document=document, batch=batch)

    def _process_results(
        self,
        paths: Sequence[Path],
        results: Sequence[ExecutionReport | BaseException],
    ) -> BatchResult:
        """Split gathered results into reports and failure records."""
        reports: list[ExecutionReport] = []
        failures: list[FileFailure] = []

        for path, result in zip(paths, results, strict=True):
            if isinstance(result, ExecutionReport):
                log.info(
                    "Parsed report: file=%s framework=%s scenarios=%d",
                    path.name,
                    result.framework,
                    result.statistics.total_scenarios,
                )
                reports.append(result)
            elif isinstance(result, ReconcileError | FileNotFoundError):
                log.warning("Report file failed: %s: %s", path, result)
                failures.append(
                    FileFailure(
                        path=path,
                        error_type=type(result).__name__,
                        message=str(result),
                    )
                )
            else:
                raise result

        log.info("Parsed %d of %d report file(s)", len(reports), len(paths))
        return BatchResult(reports=reports, failures=failures)
