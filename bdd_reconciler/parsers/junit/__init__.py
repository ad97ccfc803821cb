"""JUnit report parser module."""

from bdd_reconciler.parsers.junit.manifest import junit_manifest
from bdd_reconciler.parsers.junit.parser import JUnitParser
from bdd_reconciler.parsers.junit.steps import junit_step_reader

__all__ = ["JUnitParser", "junit_manifest", "junit_step_reader"]
