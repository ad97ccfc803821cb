"""Cucumber JSON report parser module."""

from bdd_reconciler.parsers.cucumber_json.manifest import cucumber_json_manifest
from bdd_reconciler.parsers.cucumber_json.parser import CucumberJsonParser

__all__ = ["CucumberJsonParser", "cucumber_json_manifest"]
