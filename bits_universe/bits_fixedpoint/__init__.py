"""
Fixed-point closure engine for the bit-budget expression search.

Modules:
- proofs.py: Proof values (literal, unary, binary, shifted, tombstone)
- table.py: CostKey -> Proof arena with insert-if-absent and tombstoning
- closures.py: Derivation rules and the per-pass deterministic scan
- lfp.py: Worklist fixed point (compute_closure, build_table)
"""

from .proofs import (
    DOMINATED,
    BinaryOp,
    Dominated,
    Literal,
    Proof,
    UnaryOp,
)
from .table import Table
from .closures import collect_derivations, derive_binary, derive_unary
from .lfp import ClosureReceipt, build_table, close_table, compute_closure

__all__ = [
    "DOMINATED",
    "BinaryOp",
    "Dominated",
    "Literal",
    "Proof",
    "UnaryOp",
    "Table",
    "collect_derivations",
    "derive_binary",
    "derive_unary",
    "ClosureReceipt",
    "build_table",
    "close_table",
    "compute_closure",
]
