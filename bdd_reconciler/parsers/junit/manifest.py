"""JUnit parser manifest."""

from bdd_reconciler.parsers.junit.parser import JUnitParser
from bdd_reconciler.parsers.manifest import ParserManifest

junit_manifest = ParserManifest(parser_factory=JUnitParser)
