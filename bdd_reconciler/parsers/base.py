"""Abstract base class for test report parsers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar
from xml.etree.ElementTree import ParseError

from pydantic import ValidationError

from bdd_reconciler.errors import InvalidFormatError, ReportFileNotFoundError
from bdd_reconciler.models.execution import ExecutionReport, Framework, ReportFormat
from bdd_reconciler.statistics import calculate_statistics

log = logging.getLogger(__name__)

# Errors that mean "this file is not (or not a valid) document of my schema".
PROBE_ERRORS = (OSError, ValueError, SyntaxError)


@dataclass(frozen=True, kw_only=True)
class ResultParser(ABC):
    """Capability shared by every report format: probe a file, then parse it.

    Subclasses implement ``probe`` (a cheap structural check) and
    ``read_report`` (the full single-pass conversion). Parsers hold no mutable
    state, so one instance may parse many files from several threads.
    """

    report_format: ClassVar[ReportFormat]
    framework: ClassVar[Framework]
    extensions: ClassVar[frozenset[str]]

    def can_parse(self, path: Path) -> bool:
        """Check whether the file looks like this parser's schema.

        Never raises: unreadable or malformed files simply answer False.
        """
        if path.suffix.lower() not in self.extensions or not path.is_file():
            return False
        try:
            return self.probe(path)
        except PROBE_ERRORS:
            return False

    def parse(self, path: Path) -> ExecutionReport:
        """Parse a report file into the canonical model.

        Raises:
            ReportFileNotFoundError: If the file does not exist
            InvalidFormatError: If the file is structurally broken

        """
        if not path.is_file():
            raise ReportFileNotFoundError(path)

        try:
            report = self.read_report(path)
        except ParseError as exc:
            raise InvalidFormatError(path, f"malformed XML: {exc}") from exc
        except ValidationError as exc:
            raise InvalidFormatError(
                path, f"unexpected document shape: {exc.error_count()} error(s)"
            ) from exc
        except ValueError as exc:
            raise InvalidFormatError(path, str(exc)) from exc

        log.debug(
            "Parsed %s as %s: %d feature(s)",
            path.name,
            self.report_format,
            len(report.features),
        )
        return report.model_copy(
            update={"statistics": calculate_statistics(report.features)}
        )

    @abstractmethod
    def probe(self, path: Path) -> bool:
        """Inspect the minimum of the file needed to recognise the schema."""

    @abstractmethod
    def read_report(self, path: Path) -> ExecutionReport:
        """Convert the whole file into an execution report.

        May raise ``ValueError`` (or ``ParseError``) for broken documents;
        ``parse`` turns those into ``InvalidFormatError``.
        """
