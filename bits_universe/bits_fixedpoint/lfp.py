"""
Fixed-point closure of the derivation table.

Goal: Worklist fixed point over (value, cost) pairs.

Key principles:
1. Bounded state space: values <= limit, costs in the 5x5 budget grid
2. Monotone growth: entries are only added or tombstoned, never removed
3. Convergence-based: loop until a drain inserts nothing (no max_passes)
4. Deterministic: pending candidates are produced in CostKey scan order, so
   the first-writer-wins choice between equally cheap derivations is
   reproducible run to run

Algorithm:
    1. Seed pending with every literal within budget
    2. Drain pending: skip value > limit; try-insert; on success tombstone
       every costlier sibling of the same value
    3. If the drain inserted nothing, stop
    4. Scan live entries for unary and binary derivations into pending
    5. Go to 2

The first derivation to reach a (value, cost) pair in scan order is kept,
even when a cheaper candidate for the same value waits later in the same
pending list (that one then tombstones the costlier pair).
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Set, Tuple

from bits_core.alphabet import literal_keys
from bits_core.arith import WORD_MAX
from bits_core.types import CostKey, Hash64, check_budget
from bits_fixedpoint.closures import Candidate, collect_derivations
from bits_fixedpoint.proofs import Literal
from bits_fixedpoint.table import Table

logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================


@dataclass
class ClosureReceipt:
    """
    Closure computation receipt.

    {
        "passes": 6,
        "insertions_per_pass": [96, 1714, ...],
        "live_entries": 5210,
        ...
    }
    """
    limit: int
    passes: int                          # Drains that inserted at least one entry
    insertions_per_pass: List[int] = field(default_factory=list)
    live_entries: int = 0
    tombstones: int = 0
    retired: int = 0                     # Live derivations later dominated
    total_entries: int = 0
    fingerprint: Hash64 = Hash64(0)

    def to_dict(self) -> dict:
        return {
            "limit": self.limit,
            "passes": self.passes,
            "insertions_per_pass": list(self.insertions_per_pass),
            "live_entries": self.live_entries,
            "tombstones": self.tombstones,
            "retired": self.retired,
            "total_entries": self.total_entries,
            "fingerprint": f"{self.fingerprint:016x}",
        }


# =============================================================================
# Worklist steps
# =============================================================================


def seed_literals() -> List[Candidate]:
    """Literal candidates for every byte within budget, in value order."""
    return [(key, Literal(key.value)) for key in literal_keys()]


def drain_pending(table: Table, pending: Iterable[Candidate]) -> Set[CostKey]:
    """
    Insert pending candidates in order.

    Args:
        table: Table to grow (mutated)
        pending: Candidates in scan order

    Returns:
        Keys inserted by this drain that are still live at its end
    """
    inserted: List[CostKey] = []

    for key, proof in pending:
        if key.value > table.limit:
            continue
        if key in table:
            check_budget(key)
            continue
        table.try_insert(key, proof)
        table.dominate_costlier(key)
        inserted.append(key)

    # A later, cheaper insert in the same drain may have tombstoned an earlier one
    return {key for key in inserted if table.is_live(key)}


# =============================================================================
# Main Entry Point
# =============================================================================


def compute_closure(limit: int = WORD_MAX) -> Tuple[Table, ClosureReceipt]:
    """
    Run the closure to its fixed point.

    Args:
        limit: Largest value admitted into the table (0..65535)

    Returns:
        (table, receipt) where table satisfies: no live entries combine
        under any operator into a (value, cost) pair not already present,
        within limit and the (4, 4) budget

    Raises:
        ValueError: limit outside 0..65535
        InvariantViolation: a key over budget was read back from the table

    Example:
        >>> table, receipt = compute_closure(limit=64)
        >>> receipt.passes > 0
        True
    """
    table = Table(limit)
    pending = seed_literals()
    insertions_per_pass: List[int] = []

    while True:
        before = len(table)
        fresh = drain_pending(table, pending)
        if len(table) == before:
            break

        insertions_per_pass.append(len(fresh))
        pending = collect_derivations(table, fresh)
        logger.debug(
            "pass %d: %d fresh keys, %d entries, %d candidates queued",
            len(insertions_per_pass), len(fresh), len(table), len(pending),
        )

    live_entries = len(table.live_keys())
    receipt = ClosureReceipt(
        limit=limit,
        passes=len(insertions_per_pass),
        insertions_per_pass=insertions_per_pass,
        live_entries=live_entries,
        tombstones=table.tombstone_count(),
        retired=table.retired_count(),
        total_entries=len(table),
        fingerprint=table.fingerprint(),
    )
    logger.info(
        "Closure for limit=%d converged in %d passes: %d live, %d tombstones",
        limit, receipt.passes, receipt.live_entries, receipt.tombstones,
    )

    return table, receipt


def build_table(limit: int = WORD_MAX) -> Table:
    """Fixed-point table for limit (entry point for reporting)."""
    table, _ = compute_closure(limit)
    return table


def close_table(table: Table) -> int:
    """
    Re-run one full scan and drain over a table.

    Returns:
        Number of entries added (0 when table is already at its fixed point)
    """
    before = len(table)
    drain_pending(table, collect_derivations(table, set(table.live_keys())))
    return len(table) - before


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    "ClosureReceipt",
    "seed_literals",
    "drain_pending",
    "compute_closure",
    "build_table",
    "close_table",
]
