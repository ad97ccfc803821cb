"""NUnit 2 parser manifest."""

from bdd_reconciler.parsers.manifest import ParserManifest
from bdd_reconciler.parsers.nunit2.parser import NUnit2Parser

nunit2_manifest = ParserManifest(parser_factory=NUnit2Parser)
