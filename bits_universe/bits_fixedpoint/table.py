"""
The derivation table: an arena of CostKey -> Proof.

Lifecycle:
- Built once per search by the closure engine (single writer)
- Grows monotonically: entries are added or turned into tombstones, never
  physically removed, so a dominated (value, cost) pair is never re-derived
- Read-only for rendering and reporting afterwards

Insertion is two-phase:
1. try_insert: first writer wins for an exact CostKey
2. dominate_costlier: every other key of the same value whose cost is
   pointwise >= becomes DOMINATED

A live derivation overwritten in phase 2 is retired rather than forgotten.
Derivations already built on top of it keep a valid operand to render.
"""

from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from bits_core.arith import WORD_MAX
from bits_core.order_hash import table_fingerprint
from bits_core.types import (
    MAX_ONE_COST,
    MAX_ZERO_COST,
    CostKey,
    Hash64,
    InvariantViolation,
    check_budget,
)
from bits_fixedpoint.proofs import DOMINATED, Dominated, Literal, Proof, is_live

# cost_matrix cell states
ABSENT = -1
TOMBSTONE = 0
LIVE = 1


class Table:
    """
    Mapping from CostKey to Proof with deterministic iteration.

    Args:
        limit: Largest value the owning search admits (informational for
            consumers; the closure engine enforces it)
    """

    def __init__(self, limit: int = WORD_MAX):
        if not 0 <= limit <= WORD_MAX:
            raise ValueError(f"limit must be within 0..{WORD_MAX}, got {limit}")
        self.limit = limit
        self._entries: Dict[CostKey, Proof] = {}
        self._retired: Dict[CostKey, Proof] = {}

    # -------------------------------------------------------------------------
    # Mapping protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CostKey) -> bool:
        return key in self._entries

    def __getitem__(self, key: CostKey) -> Proof:
        return self._entries[key]

    def get(self, key: CostKey) -> Optional[Proof]:
        return self._entries.get(key)

    def sorted_items(self) -> List[Tuple[CostKey, Proof]]:
        return sorted(self._entries.items(), key=lambda item: item[0])

    def __iter__(self) -> Iterator[CostKey]:
        return iter(sorted(self._entries))

    # -------------------------------------------------------------------------
    # Writes (closure engine only)
    # -------------------------------------------------------------------------

    def try_insert(self, key: CostKey, proof: Proof) -> bool:
        """Insert if the exact key is absent. Returns True on insertion."""
        if key in self._entries:
            return False
        self._entries[key] = proof
        return True

    def dominate_costlier(self, key: CostKey) -> int:
        """
        Tombstone every other key of key.value with pointwise >= cost.

        Returns:
            Number of live derivations retired by this call
        """
        retired = 0
        for zeros in range(key.zero_cost, MAX_ZERO_COST + 1):
            for ones in range(key.one_cost, MAX_ONE_COST + 1):
                if zeros == key.zero_cost and ones == key.one_cost:
                    continue
                sibling = CostKey(key.value, zeros, ones)
                prior = self._entries.get(sibling)
                if prior is not None and is_live(prior):
                    self._retired[sibling] = prior
                    retired += 1
                self._entries[sibling] = DOMINATED
        return retired

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def is_live(self, key: CostKey) -> bool:
        proof = self._entries.get(key)
        return proof is not None and is_live(proof)

    def live_keys(self) -> List[CostKey]:
        """Non-dominated keys in CostKey order, budget-checked."""
        return sorted(
            check_budget(key)
            for key, proof in self._entries.items()
            if is_live(proof)
        )

    def literal_keys(self) -> List[CostKey]:
        return sorted(
            key for key, proof in self._entries.items() if isinstance(proof, Literal)
        )

    def resolve(self, key: CostKey) -> Proof:
        """
        Proof for an operand key.

        Falls back to the retired derivation when the key has since been
        dominated.

        Raises:
            InvariantViolation: key absent, a bare tombstone, or over budget
        """
        check_budget(key)
        proof = self._entries.get(key)
        if proof is None:
            raise InvariantViolation(f"Operand {key} is not in the table")
        if isinstance(proof, Dominated):
            proof = self._retired.get(key)
            if proof is None:
                raise InvariantViolation(f"Operand {key} is dominated")
        return proof

    def retired_count(self) -> int:
        return len(self._retired)

    def tombstone_count(self) -> int:
        return sum(1 for proof in self._entries.values() if not is_live(proof))

    def cost_matrix(self, value: int) -> np.ndarray:
        """
        Entry states for one value over the (zero_cost, one_cost) grid.

        Returns:
            int8 array of shape (5, 5): LIVE (1), TOMBSTONE (0) or ABSENT (-1)
        """
        grid = np.full((MAX_ZERO_COST + 1, MAX_ONE_COST + 1), ABSENT, dtype=np.int8)
        for zeros in range(MAX_ZERO_COST + 1):
            for ones in range(MAX_ONE_COST + 1):
                proof = self._entries.get(CostKey(value, zeros, ones))
                if proof is not None:
                    grid[zeros, ones] = LIVE if is_live(proof) else TOMBSTONE
        return grid

    def fingerprint(self) -> Hash64:
        return table_fingerprint(
            (key, proof.to_json()) for key, proof in self._entries.items()
        )


__all__ = [
    "ABSENT",
    "TOMBSTONE",
    "LIVE",
    "Table",
]
