"""
Core type definitions for the bit-budget expression search.

A table entry is identified by a CostKey: the value produced plus the
two-dimensional cost (budget zero bits, budget one bits) spent to produce it.
"""

from dataclasses import dataclass
from typing import NewType, Tuple

# Budget ceiling per cost dimension
MAX_ZERO_COST = 4
MAX_ONE_COST = 4

# Hash type (64-bit from SHA-256)
Hash64 = NewType("Hash64", int)

# (zero_cost, one_cost)
Cost = Tuple[int, int]


class InvariantViolation(AssertionError):
    """A structural invariant of the table or a proof was broken (fatal)."""


@dataclass(frozen=True, order=True)
class CostKey:
    """
    Identity of a table entry.

    Ordered lexicographically on (value, zero_cost, one_cost); this is the
    total order used for every deterministic scan of the table.
    """
    value: int
    zero_cost: int
    one_cost: int

    @property
    def cost(self) -> Cost:
        return (self.zero_cost, self.one_cost)

    def within_budget(self) -> bool:
        return 0 <= self.zero_cost <= MAX_ZERO_COST and 0 <= self.one_cost <= MAX_ONE_COST

    def __str__(self) -> str:
        return f"{self.value}@{self.zero_cost},{self.one_cost}"


def check_budget(key: CostKey) -> CostKey:
    """Fail fatally when a key read back from the table exceeds the budget."""
    if not key.within_budget():
        raise InvariantViolation(
            f"Cost budget exceeded for {key}: "
            f"limit is ({MAX_ZERO_COST}, {MAX_ONE_COST})"
        )
    return key
