"""xUnit report parser module."""

from bdd_reconciler.parsers.xunit.manifest import xunit_manifest
from bdd_reconciler.parsers.xunit.parser import XUnitParser
from bdd_reconciler.parsers.xunit.steps import xunit_step_reader

__all__ = ["XUnitParser", "xunit_manifest", "xunit_step_reader"]
