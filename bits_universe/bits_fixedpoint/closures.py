"""
Derivation rules for the closure engine.

Each rule maps live table keys to candidate (CostKey, Proof) pairs:
- derive_unary:  FACTORIAL (value <= 8), DOUBLE_FACTORIAL (value <= 12),
                 INTEGER_SQRT (perfect squares); cost unchanged
- derive_binary: shifted TIMES/DIV against a literal right operand, then
                 EXP (both orders), PLUS, MINUS, TIMES, DIV with left >= right

Candidates are only proposals. The engine decides which become entries
(first writer wins), so the order in which candidates are produced is part
of the result and must be deterministic.

Silently dropped (no candidate):
- 16-bit overflow or negative results
- inexact division, non-square operands for INTEGER_SQRT
- summed cost above (MAX_ZERO_COST, MAX_ONE_COST)
"""

import heapq
from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

from bits_core.arith import (
    DOUBLE_FACTORIAL_MAX,
    FACTORIAL_MAX,
    bit_width,
    checked_add,
    checked_mul,
    checked_pow,
    checked_shl,
    checked_sub,
    double_factorial,
    factorial,
    is_perfect_square,
)
from bits_core.types import MAX_ONE_COST, MAX_ZERO_COST, Cost, CostKey
from bits_fixedpoint.proofs import (
    DIV,
    DIV_SHIFT,
    DOUBLE_FACTORIAL,
    EXP,
    FACTORIAL,
    INTEGER_SQRT,
    MINUS,
    PLUS,
    SHIFTS,
    TIMES,
    TIMES_SHIFT,
    BinaryOp,
    Proof,
    UnaryOp,
)
from bits_fixedpoint.table import Table

Candidate = Tuple[CostKey, Proof]


# =============================================================================
# Unary rules
# =============================================================================


def derive_unary(key: CostKey) -> List[Candidate]:
    """
    Unary derivations of one live key.

    Args:
        key: Live operand key

    Returns:
        Candidates with the operand's cost, in the order
        FACTORIAL, DOUBLE_FACTORIAL, INTEGER_SQRT
    """
    n = key.value
    out: List[Candidate] = []

    if n <= FACTORIAL_MAX:
        out.append((CostKey(factorial(n), key.zero_cost, key.one_cost),
                    UnaryOp(FACTORIAL, key)))

    if n <= DOUBLE_FACTORIAL_MAX:
        out.append((CostKey(double_factorial(n), key.zero_cost, key.one_cost),
                    UnaryOp(DOUBLE_FACTORIAL, key)))

    root = is_perfect_square(n)
    if root is not None:
        out.append((CostKey(root, key.zero_cost, key.one_cost),
                    UnaryOp(INTEGER_SQRT, key)))

    return out


# =============================================================================
# Binary rules
# =============================================================================


def derive_shifted(left: CostKey, right: CostKey, zeros: int, ones: int) -> List[Candidate]:
    """
    TIMES_SHIFT / DIV_SHIFT candidates for a literal right operand.

    A shift splices a binary point into the literal; shifting past its
    width pads zeros after the point, which costs extra zero budget.
    """
    n1, n2 = left.value, right.value
    width = bit_width(n2)
    out: List[Candidate] = []

    for shift in SHIFTS:
        shifted_zeros = zeros + max(0, shift - width)
        if shifted_zeros > MAX_ZERO_COST:
            continue

        if n1 % (1 << shift) == 0:
            product = checked_mul(n1, n2)
            if product is not None:
                out.append((CostKey(product >> shift, shifted_zeros, ones),
                            BinaryOp(TIMES_SHIFT, left, right, shift)))

        if n2 != 0 and n1 % n2 == 0:
            quotient = checked_shl(n1 // n2, shift)
            if quotient is not None:
                out.append((CostKey(quotient, shifted_zeros, ones),
                            BinaryOp(DIV_SHIFT, left, right, shift)))

    return out


def derive_binary(left: CostKey, right: CostKey, right_is_literal: bool) -> List[Candidate]:
    """
    Binary derivations of an ordered pair of live keys.

    Args:
        left: First operand (outer scan)
        right: Second operand (inner scan); may equal left
        right_is_literal: Whether right's proof is a Literal (enables shifts)

    Returns:
        Candidates in a fixed order: shifted operators for each shift, then
        EXP, EXP (swapped), PLUS, MINUS, TIMES, DIV
    """
    zeros = left.zero_cost + right.zero_cost
    ones = left.one_cost + right.one_cost
    if zeros > MAX_ZERO_COST or ones > MAX_ONE_COST:
        return []

    out: List[Candidate] = []
    if right_is_literal:
        out.extend(derive_shifted(left, right, zeros, ones))

    n1, n2 = left.value, right.value
    # Canonical operand order for the commutative and ordered operators
    if n1 < n2:
        return out

    ops = [
        (checked_pow(n1, n2), BinaryOp(EXP, left, right)),
        (checked_pow(n2, n1), BinaryOp(EXP, right, left)),
        (checked_add(n1, n2), BinaryOp(PLUS, left, right)),
        (checked_sub(n1, n2), BinaryOp(MINUS, left, right)),
        (checked_mul(n1, n2), BinaryOp(TIMES, left, right)),
    ]
    if n2 != 0 and n1 % n2 == 0:
        ops.append((n1 // n2, BinaryOp(DIV, left, right)))

    for value, proof in ops:
        if value is not None:
            out.append((CostKey(value, zeros, ones), proof))

    return out


# =============================================================================
# Pass-level scan
# =============================================================================


def _bucket_by_cost(keys: Iterable[CostKey]) -> Dict[Cost, List[CostKey]]:
    # Input is sorted, so every bucket stays sorted
    buckets: Dict[Cost, List[CostKey]] = defaultdict(list)
    for key in keys:
        buckets[key.cost].append(key)
    return buckets


def collect_derivations(table: Table, fresh: Set[CostKey]) -> List[Candidate]:
    """
    All candidates of one pass, in deterministic scan order.

    The scan visits live keys in CostKey order; for each left key it visits
    budget-compatible right keys in CostKey order (cost buckets merged with
    heapq.merge). A pair where neither key is fresh was already expanded in
    an earlier pass, and re-queuing its candidates can never insert anything
    under first-writer-wins, so it is skipped. Unary rules run for fresh
    keys only, for the same reason.

    Args:
        table: Table at the end of the last drain
        fresh: Keys inserted live by that drain (all live keys for a full scan)

    Returns:
        Candidates with value <= table.limit, in scan order
    """
    live = table.live_keys()
    literals = set(table.literal_keys())
    all_buckets = _bucket_by_cost(live)
    fresh_buckets = _bucket_by_cost(key for key in live if key in fresh)
    limit = table.limit

    pending: List[Candidate] = []
    for left in live:
        left_is_fresh = left in fresh
        if left_is_fresh:
            pending.extend(c for c in derive_unary(left) if c[0].value <= limit)

        buckets = all_buckets if left_is_fresh else fresh_buckets
        partners = [
            buckets[(zeros, ones)]
            for zeros in range(MAX_ZERO_COST - left.zero_cost + 1)
            for ones in range(MAX_ONE_COST - left.one_cost + 1)
            if (zeros, ones) in buckets
        ]
        for right in heapq.merge(*partners):
            for candidate in derive_binary(left, right, right in literals):
                if candidate[0].value <= limit:
                    pending.append(candidate)

    return pending


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    "Candidate",
    "derive_unary",
    "derive_shifted",
    "derive_binary",
    "collect_derivations",
]
