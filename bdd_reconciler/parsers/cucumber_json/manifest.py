"""Cucumber JSON parser manifest."""

from bdd_reconciler.parsers.cucumber_json.parser import CucumberJsonParser
from bdd_reconciler.parsers.manifest import ParserManifest

cucumber_json_manifest = ParserManifest(parser_factory=CucumberJsonParser)
