"""TRX report parser module."""

from bdd_reconciler.parsers.trx.manifest import trx_manifest
from bdd_reconciler.parsers.trx.parser import TRX_NAMESPACE, TrxParser
from bdd_reconciler.parsers.trx.steps import trx_step_reader

__all__ = ["TRX_NAMESPACE", "TrxParser", "trx_manifest", "trx_step_reader"]
