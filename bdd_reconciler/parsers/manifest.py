"""Parser manifest definition for the plugin system."""

from collections.abc import Callable
from dataclasses import dataclass

from bdd_reconciler.models.execution import ReportFormat
from bdd_reconciler.parsers.base import ResultParser


@dataclass(frozen=True, kw_only=True)
class ParserManifest[ParserT: ResultParser]:
    """Manifest describing a parser plugin.

    The manifest references the parser factory so parsers can be created
    lazily from their entry-point key.
    """

    parser_factory: Callable[[], ParserT]

    @property
    def report_format(self) -> ReportFormat:
        """Report schema handled by the manifest's parser."""
        return self.parser_factory.report_format  # type: ignore[attr-defined]

    def create(self) -> ParserT:
        """Instantiate the parser."""
        return self.parser_factory()
