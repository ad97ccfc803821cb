"""xUnit parser manifest."""

from bdd_reconciler.parsers.manifest import ParserManifest
from bdd_reconciler.parsers.xunit.parser import XUnitParser

xunit_manifest = ParserManifest(parser_factory=XUnitParser)
