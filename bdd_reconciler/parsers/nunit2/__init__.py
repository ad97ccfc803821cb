"""NUnit 2 report parser module."""

from bdd_reconciler.parsers.nunit2.manifest import nunit2_manifest
from bdd_reconciler.parsers.nunit2.parser import NUnit2Parser

__all__ = ["NUnit2Parser", "nunit2_manifest"]
