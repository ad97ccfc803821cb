"""TRX parser manifest."""

from bdd_reconciler.parsers.manifest import ParserManifest
from bdd_reconciler.parsers.trx.parser import TrxParser

trx_manifest = ParserManifest(parser_factory=TrxParser)
