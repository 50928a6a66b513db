"""
Reporting driver: cheapest known expression for every value in a range.

Reads a completed table; never mutates it.

Line formats:
- simple:    "<value>: <expression>"
- detailed:  "<value>: <zero_cost>,<one_cost>: <top> <expression>"
- absent:    "<value> was not found"
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from bits_core.arith import WORD_MAX
from bits_core.types import MAX_ONE_COST, MAX_ZERO_COST, Cost, CostKey
from bits_fixedpoint.proofs import Proof, is_live
from bits_fixedpoint.table import Table
from bits_render.render import render, render_top

MAX_MARKER = " [max]"


@dataclass
class SearchConfig:
    """
    Parameters of one search-and-report run.

    limit:        derivation ceiling (largest value admitted into the table)
    max_num:      report values 0..max_num
    print_one:    stop at the first reported cost per value
    simple_print: terse lines instead of detailed ones
    print_big:    report only derivations whose largest operand exceeds max_num
    skip_top:     suppress repeated top descriptors within one value
    mark_max:     flag expressions longer than every earlier one
    """
    limit: int = WORD_MAX
    max_num: int = 500
    print_one: bool = True
    simple_print: bool = True
    print_big: bool = False
    skip_top: bool = False
    mark_max: bool = False

    def __post_init__(self):
        if not 0 <= self.limit <= WORD_MAX:
            raise ValueError(f"limit must be within 0..{WORD_MAX}, got {self.limit}")
        if self.max_num < 0:
            raise ValueError(f"max_num must be non-negative, got {self.max_num}")


def cost_order() -> List[Cost]:
    """
    Cheapest-first enumeration of the budget grid.

    Total cost ascending; within one total, larger zero cost first.

    Examples:
        >>> cost_order()[:4]
        [(0, 0), (1, 0), (0, 1), (2, 0)]
    """
    order: List[Cost] = []
    for total in range(MAX_ZERO_COST + MAX_ONE_COST + 1):
        high = min(MAX_ZERO_COST, total)
        low = max(0, total - MAX_ONE_COST)
        for zeros in range(high, low - 1, -1):
            order.append((zeros, total - zeros))
    return order


COST_ORDER = cost_order()


def live_derivations(table: Table, value: int) -> List[Tuple[CostKey, Proof]]:
    """Live entries for value, cheapest first."""
    found = []
    for zeros, ones in COST_ORDER:
        key = CostKey(value, zeros, ones)
        proof = table.get(key)
        if proof is not None and is_live(proof):
            found.append((key, proof))
    return found


def best_entry(table: Table, value: int) -> Optional[Tuple[CostKey, Proof]]:
    derivations = live_derivations(table, value)
    return derivations[0] if derivations else None


def largest_operand(proof: Proof, table: Table) -> int:
    """Largest value among all operand keys of the derivation tree (-1 if none)."""
    largest = -1
    stack = list(proof.operands())
    while stack:
        key = stack.pop()
        largest = max(largest, key.value)
        stack.extend(table.resolve(key).operands())
    return largest


def report_lines(table: Table, config: SearchConfig) -> Iterator[str]:
    """
    Report lines for values 0..config.max_num.

    A value with no live entry yields "<value> was not found". A value whose
    entries are all filtered out (print_big, skip_top) yields nothing.
    """
    longest = 0

    for value in range(config.max_num + 1):
        derivations = live_derivations(table, value)
        if not derivations:
            yield f"{value} was not found"
            continue

        seen_tops = set()
        for key, proof in derivations:
            if config.print_big and largest_operand(proof, table) <= config.max_num:
                continue

            top = render_top(proof)
            if config.skip_top:
                if top in seen_tops:
                    continue
                seen_tops.add(top)

            expression = render(proof, table)
            if config.simple_print:
                line = f"{value}: {expression}"
            else:
                line = f"{value}: {key.zero_cost},{key.one_cost}: {top} {expression}"

            if config.mark_max and len(expression) > longest:
                line += MAX_MARKER
            longest = max(longest, len(expression))

            yield line
            if config.print_one:
                break


def summarize(table: Table, max_num: int) -> Dict[str, Any]:
    """
    Coverage of 0..max_num by the table.

    Returns:
        {
            "max_num": 500,
            "found": 498,
            "missing": 2,
            "first_missing": 487,
            "best_cost_histogram": 5x5 nested list (zero_cost x one_cost)
        }
    """
    best_costs = np.full((max_num + 1, 2), -1, dtype=np.int64)
    for value in range(max_num + 1):
        entry = best_entry(table, value)
        if entry is not None:
            best_costs[value] = entry[0].cost

    found = best_costs[:, 0] >= 0
    histogram = np.zeros((MAX_ZERO_COST + 1, MAX_ONE_COST + 1), dtype=np.int64)
    np.add.at(histogram, (best_costs[found, 0], best_costs[found, 1]), 1)

    missing = np.flatnonzero(~found)
    return {
        "max_num": max_num,
        "found": int(found.sum()),
        "missing": int(missing.size),
        "first_missing": int(missing[0]) if missing.size else None,
        "best_cost_histogram": histogram.tolist(),
    }


__all__ = [
    "SearchConfig",
    "COST_ORDER",
    "cost_order",
    "live_derivations",
    "best_entry",
    "largest_operand",
    "report_lines",
    "summarize",
]
