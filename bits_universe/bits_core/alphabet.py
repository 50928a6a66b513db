"""
The literal alphabet: one-byte binary literals that fit the bit budget.

Cost of a literal (per byte b):
- ones:  popcount(b)
- zeros: zero bits strictly below the highest set bit; the literal "0"
         itself costs one zero

Only literals with zeros <= MAX_ZERO_COST and ones <= MAX_ONE_COST seed the
closure.
"""

from typing import List

import numpy as np

from .types import MAX_ONE_COST, MAX_ZERO_COST, CostKey

BYTE_VALUES = 256


def literal_costs() -> np.ndarray:
    """
    (zeros, ones) cost of every byte value.

    Returns:
        int array of shape (256, 2); row b holds the cost of literal b

    Examples:
        >>> literal_costs()[6].tolist()   # "110"
        [1, 2]
        >>> literal_costs()[0].tolist()   # "0"
        [1, 0]
    """
    values = np.arange(BYTE_VALUES, dtype=np.uint8)
    # MSB-first bit matrix, shape (256, 8)
    bits = np.unpackbits(values[:, None], axis=1)

    ones = bits.sum(axis=1).astype(np.int64)
    # argmax finds the first set bit from the top; value 0 has no set bit
    width = np.where(values == 0, 0, 8 - np.argmax(bits, axis=1)).astype(np.int64)
    zeros = width - ones
    zeros[0] = 1

    return np.stack([zeros, ones], axis=1)


def literal_keys(
    max_zeros: int = MAX_ZERO_COST, max_ones: int = MAX_ONE_COST
) -> List[CostKey]:
    """CostKeys of every literal within budget, in ascending value order."""
    costs = literal_costs()
    within = (costs[:, 0] <= max_zeros) & (costs[:, 1] <= max_ones)

    return [
        CostKey(int(b), int(costs[b, 0]), int(costs[b, 1]))
        for b in np.flatnonzero(within)
    ]


__all__ = [
    "BYTE_VALUES",
    "literal_costs",
    "literal_keys",
]
