"""NUnit 3 report parser module."""

from bdd_reconciler.parsers.nunit3.manifest import nunit3_manifest
from bdd_reconciler.parsers.nunit3.parser import NUnit3Parser
from bdd_reconciler.parsers.nunit3.steps import nunit_step_reader

__all__ = ["NUnit3Parser", "nunit3_manifest", "nunit_step_reader"]
