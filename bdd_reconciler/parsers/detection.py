"""Detect the schema of a report file and dispatch it to its parser."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from bdd_reconciler.errors import ReportFileNotFoundError, UnsupportedFormatError
from bdd_reconciler.models.execution import ExecutionReport
from bdd_reconciler.parsers.base import ResultParser
from bdd_reconciler.parsers.cucumber_json import CucumberJsonParser
from bdd_reconciler.parsers.junit import JUnitParser
from bdd_reconciler.parsers.loading import load_parser
from bdd_reconciler.parsers.nunit2 import NUnit2Parser
from bdd_reconciler.parsers.nunit3 import NUnit3Parser
from bdd_reconciler.parsers.trx import TrxParser
from bdd_reconciler.parsers.xunit import XUnitParser

log = logging.getLogger(__name__)


def default_parsers() -> Sequence[ResultParser]:
    """Parsers in detection order.

    The legacy NUnit root is probed before the modern one so that the two
    NUnit schemas never shadow each other.
    """
    return (
        NUnit2Parser(),
        NUnit3Parser(),
        XUnitParser(),
        JUnitParser(),
        CucumberJsonParser(),
        TrxParser(),
    )


@dataclass(frozen=True, kw_only=True)
class Detector:
    """Classify report files by probing each parser in a fixed order."""

    parsers: Sequence[ResultParser] = field(default_factory=default_parsers)

    def detect(self, path: Path) -> ResultParser:
        """Return the first parser whose probe accepts the file.

        Raises:
            UnsupportedFormatError: If no parser recognises the file

        """
        for parser in self.parsers:
            if parser.can_parse(path):
                log.debug("Detected %s as %s", path, parser.report_format)
                return parser
        raise UnsupportedFormatError(path)

    def parse(self, path: Path, forced: ResultParser | None = None) -> ExecutionReport:
        """Detect the format of a file and parse it.

        Args:
            path: Report file
            forced: Parser to use instead of detection, see ``forced_parser``

        Raises:
            ReportFileNotFoundError: If the file does not exist
            UnsupportedFormatError: If no parser recognises the file
            InvalidFormatError: If the file is structurally broken

        """
        if not path.is_file():
            raise ReportFileNotFoundError(path)
        parser = forced if forced is not None else self.detect(path)
        return parser.parse(path)

    @staticmethod
    def forced_parser(key: str) -> ResultParser:
        """Resolve the parser registered under ``key``, skipping detection.

        Raises:
            ParserNotFoundError: If no parser is registered under the key

        """
        parser = load_parser(key)
        log.debug("Forcing %s parser", parser.report_format)
        return parser
