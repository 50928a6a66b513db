"""
Integration tests: closure -> table -> render -> evaluate -> report

Covers:
- End-to-end: compute_closure(limit) -> report lines
- Known derivations (0, 255, 720)
- Table invariants over a real closure: limit, budget, domination
- Every live entry renders to an expression that evaluates to its value
- Live entries only change by being dominated (never re-derived)
- Idempotence and determinism
- Incremental passes build the same table as full rescans
- The default (full word) closure
"""

from unittest.mock import patch

import numpy as np
import pytest

from bits_fixedpoint.closures import collect_derivations
from bits_fixedpoint.lfp import close_table, compute_closure, seed_literals
from bits_fixedpoint.lfp import drain_pending as real_drain_pending
from bits_fixedpoint.proofs import DOMINATED
from bits_fixedpoint.table import LIVE, TOMBSTONE, Table
from bits_render.evaluate import evaluate, evaluate_int
from bits_render.render import render
from bits_report.report import SearchConfig, best_entry, report_lines


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(scope="module")
def closure_720():
    """Closure reaching 720 = (3!)!."""
    return compute_closure(limit=720)


@pytest.fixture(scope="module")
def closure_full():
    """Closure at the default limit (the whole 16-bit word)."""
    return compute_closure()


@pytest.fixture(scope="module")
def closure_128():
    return compute_closure(limit=128)


def full_rescan_closure(limit: int) -> Table:
    """Closure that re-expands every live pair on every pass."""
    table = Table(limit)
    pending = seed_literals()
    while True:
        before = len(table)
        real_drain_pending(table, pending)
        if len(table) == before:
            return table
        pending = collect_derivations(table, set(table.live_keys()))


def has_cheaper_live(grid: np.ndarray, zeros: int, ones: int) -> bool:
    """Some other LIVE cell of the grid costs pointwise <= (zeros, ones)."""
    for z in range(zeros + 1):
        for o in range(ones + 1):
            if (z, o) != (zeros, ones) and grid[z, o] == LIVE:
                return True
    return False


# ============================================================================
# Known values
# ============================================================================


class TestKnownValues:
    def test_zero(self, closure_720):
        """0 is the literal '0' at cost (1, 0)."""
        table, _ = closure_720
        key, proof = best_entry(table, 0)
        assert key.cost == (1, 0)
        assert render(proof, table) == "0"

    def test_720_is_factorial_of_factorial(self, closure_720):
        """720 = (11!)! at cost (0, 2)."""
        table, _ = closure_720
        key, proof = best_entry(table, 720)
        assert key.cost == (0, 2)
        assert render(proof, table) == "(11!)!"

    def test_255_reachable(self, closure_720):
        """255 has eight ones as a literal but is reachable by derivation."""
        table, _ = closure_720
        entry = best_entry(table, 255)
        assert entry is not None
        assert evaluate_int(render(entry[1], table)) == 255

    def test_report_line_for_720(self, closure_720):
        """Report driver prints the cheapest expression."""
        table, _ = closure_720
        config = SearchConfig(limit=720, max_num=720)
        lines = list(report_lines(table, config))
        assert len(lines) == 721
        assert "720: (11!)!" in lines


# ============================================================================
# Table invariants
# ============================================================================


class TestTableInvariants:
    def test_nothing_above_limit(self, closure_720):
        table, _ = closure_720
        assert max(key.value for key in table) <= 720

    def test_budget(self, closure_720):
        table, _ = closure_720
        assert all(key.within_budget() for key in table)

    def test_domination(self, closure_720):
        """No live cell dominates another; every tombstone has a cheaper live cell."""
        table, _ = closure_720
        for value in sorted({key.value for key in table}):
            grid = table.cost_matrix(value)
            live = np.argwhere(grid == LIVE)
            assert len(live) > 0, f"{value} has entries but none live"

            for zeros, ones in live:
                assert not has_cheaper_live(grid, zeros, ones), (
                    f"{value}@{zeros},{ones} is live but dominated"
                )
            for zeros, ones in np.argwhere(grid == TOMBSTONE):
                assert has_cheaper_live(grid, zeros, ones), (
                    f"{value}@{zeros},{ones} is a tombstone without a cheaper live entry"
                )

    def test_render_round_trip(self, closure_720):
        """Every live derivation evaluates back to its value."""
        table, _ = closure_720
        for key in table.live_keys():
            text = render(table[key], table)
            assert evaluate(text) == key.value, f"{key}: {text}"

    def test_receipt_matches_table(self, closure_720):
        table, receipt = closure_720
        assert receipt.total_entries == len(table)
        assert receipt.live_entries == len(table.live_keys())
        assert receipt.fingerprint == table.fingerprint()


# ============================================================================
# Growth, idempotence, determinism
# ============================================================================


class TestClosureDynamics:
    def test_live_entries_only_get_dominated(self):
        """Across drains a live entry either keeps its proof or becomes a
        tombstone because a strictly cheaper entry for its value exists."""
        drains = []

        def spy(table, pending):
            before = {key: table[key] for key in table.live_keys()}
            fresh = real_drain_pending(table, pending)
            for key, proof in before.items():
                after = table[key]
                if after != proof:
                    assert after == DOMINATED
                    grid = table.cost_matrix(key.value)
                    assert has_cheaper_live(grid, key.zero_cost, key.one_cost)
            drains.append(len(fresh))
            return fresh

        with patch("bits_fixedpoint.lfp.drain_pending", side_effect=spy):
            _, receipt = compute_closure(limit=64)

        # the final drain inserts nothing
        assert len(drains) == receipt.passes + 1

    def test_idempotent(self, closure_128):
        """A full rescan of the fixed point adds no entries."""
        table, receipt = closure_128
        assert close_table(table) == 0
        assert table.fingerprint() == receipt.fingerprint

    def test_deterministic(self, closure_128):
        """A fresh run reproduces the table and the report."""
        table, receipt = closure_128
        again, again_receipt = compute_closure(limit=128)
        assert again_receipt.fingerprint == receipt.fingerprint

        config = SearchConfig(limit=128, max_num=128, print_one=False, simple_print=False)
        assert list(report_lines(table, config)) == list(report_lines(again, config))

    @pytest.mark.parametrize("limit", [0, 64, 300, 2000])
    def test_incremental_matches_full_rescan(self, limit):
        """Expanding only pairs that touch a fresh key picks the same winner
        for every (value, cost) pair as re-expanding every live pair."""
        table, receipt = compute_closure(limit)
        reference = full_rescan_closure(limit)

        assert receipt.fingerprint == reference.fingerprint()
        assert table.live_keys() == reference.live_keys()
        assert table.retired_count() == reference.retired_count()


# ============================================================================
# Default limit (full 16-bit word)
# ============================================================================


class TestDefaultLimit:
    def test_720(self, closure_full):
        """720 is still (11!)! when the whole word is searched."""
        table, receipt = closure_full
        assert receipt.limit == 65535

        key, proof = best_entry(table, 720)
        assert key.cost == (0, 2)
        assert render(proof, table) == "(11!)!"

    def test_render_round_trip(self, closure_full):
        """Every live derivation, including those built on retired operands,
        evaluates back to its value."""
        table, receipt = closure_full
        assert receipt.retired > 0

        for key in table.live_keys():
            text = render(table[key], table)
            assert evaluate(text) == key.value, f"{key}: {text}"

    def test_default_report(self, closure_full):
        """The default report prints one line per value in 0..500."""
        table, _ = closure_full
        config = SearchConfig()
        lines = list(report_lines(table, config))
        assert len(lines) == config.max_num + 1
        assert lines[0] == "0: 0"
