"""
bits_core: Core primitives for the bit-budget expression search.

Provides:
- types: CostKey, budget constants, InvariantViolation
- arith: Overflow-checked 16-bit arithmetic and exact integer square root
- alphabet: Literal alphabet and per-literal bit costs
- order_hash: Global total order and deterministic hashing (SHA-256)
"""

__all__ = [
    "alphabet",
    "arith",
    "order_hash",
    "types",
]
