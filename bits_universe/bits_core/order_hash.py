"""
Deterministic hashing over the global CostKey order.

Provides:
- hash64: SHA-256 canonical hash truncated to 64-bit int
- table_fingerprint: hash64 of a table's entries in CostKey order

All functions are deterministic and stable across runs.
No use of Python's built-in hash() (salted per process for str).
"""

import hashlib
import json
from typing import Any, Iterable, Tuple

from .types import CostKey, Hash64


def hash64(obj: Any) -> Hash64:
    """
    Deterministic 64-bit hash using SHA-256 on canonical JSON.

    - Uses canonical JSON serialization (sorted keys, no whitespace)
    - Truncates to 64-bit integer (first 8 bytes)

    Args:
        obj: Any JSON-serializable Python object

    Returns:
        64-bit integer hash (0 to 2^64-1)

    Examples:
        >>> hash64([1, 2, 3]) == hash64([1, 2, 3])
        True
        >>> hash64({"a": 1, "b": 2}) == hash64({"b": 2, "a": 1})
        True
    """
    canonical_json = json.dumps(obj, sort_keys=True, separators=(",", ":"))

    sha = hashlib.sha256(canonical_json.encode("utf-8"))

    hash_bytes = sha.digest()[:8]
    hash_int = int.from_bytes(hash_bytes, byteorder="big", signed=False)

    return Hash64(hash_int)


def table_fingerprint(entries: Iterable[Tuple[CostKey, Any]]) -> Hash64:
    """
    Hash of (key, proof-json) pairs after sorting by the CostKey order.

    Two tables with the same keys and the same recorded derivations hash
    identically regardless of insertion order.
    """
    rows = [
        [key.value, key.zero_cost, key.one_cost, proof_json]
        for key, proof_json in sorted(entries, key=lambda item: item[0])
    ]
    return hash64(rows)


__all__ = [
    "hash64",
    "table_fingerprint",
]
