"""NUnit 3 parser manifest."""

from bdd_reconciler.parsers.manifest import ParserManifest
from bdd_reconciler.parsers.nunit3.parser import NUnit3Parser

nunit3_manifest = ParserManifest(parser_factory=NUnit3Parser)
