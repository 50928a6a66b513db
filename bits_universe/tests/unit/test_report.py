"""
Unit tests for bits_report/report.py

Report lines over a small hand-built table (limit 7):

    0: 0@1,0 literal, 0@0,4 = 6-6
    1: 1@1,0 = 0!, 1@0,1 literal
    2: 2@2,0 = 1+1, 2@1,1 literal, 2@0,2 = 1+1
    3: 3@0,2 literal
    4: missing
    5: 5@1,2 literal (5@1,3 = 3+2 retired)
    6: 6@0,2 = 3!
    7: missing
"""

import pytest

from bits_core.types import CostKey
from bits_fixedpoint.lfp import drain_pending
from bits_fixedpoint.proofs import FACTORIAL, MINUS, PLUS, BinaryOp, Literal, UnaryOp
from bits_fixedpoint.table import Table
from bits_report.report import (
    SearchConfig,
    best_entry,
    cost_order,
    largest_operand,
    live_derivations,
    report_lines,
    summarize,
)


def k(value, zeros, ones):
    return CostKey(value, zeros, ones)


@pytest.fixture
def table():
    t = Table(limit=7)
    drain_pending(t, [
        (k(0, 1, 0), Literal(0)),
        (k(1, 0, 1), Literal(1)),
        (k(1, 1, 0), UnaryOp(FACTORIAL, k(0, 1, 0))),
        (k(2, 1, 1), Literal(2)),
        (k(2, 2, 0), BinaryOp(PLUS, k(1, 1, 0), k(1, 1, 0))),
        (k(2, 0, 2), BinaryOp(PLUS, k(1, 0, 1), k(1, 0, 1))),
        (k(3, 0, 2), Literal(3)),
        (k(5, 1, 3), BinaryOp(PLUS, k(3, 0, 2), k(2, 1, 1))),
        (k(5, 1, 2), Literal(5)),
        (k(6, 0, 2), UnaryOp(FACTORIAL, k(3, 0, 2))),
        (k(6, 1, 2), Literal(6)),
        (k(0, 0, 4), BinaryOp(MINUS, k(6, 0, 2), k(6, 0, 2))),
    ])
    return t


class TestCostOrder:
    def test_cheapest_first(self):
        """ORDER-01: Total cost ascending, larger zero cost first within a total."""
        order = cost_order()
        assert order[:6] == [(0, 0), (1, 0), (0, 1), (2, 0), (1, 1), (0, 2)]
        assert order[-1] == (4, 4)

    def test_covers_budget_grid(self):
        """ORDER-02: Every cell of the 5x5 grid exactly once."""
        order = cost_order()
        assert len(order) == 25
        assert set(order) == {(z, o) for z in range(5) for o in range(5)}
        totals = [z + o for z, o in order]
        assert totals == sorted(totals)


class TestSearchConfig:
    def test_defaults(self):
        """CONF-01: Defaults report 0..500 over the full 16-bit word."""
        config = SearchConfig()
        assert config.limit == 65535
        assert config.max_num == 500
        assert config.print_one and config.simple_print
        assert not (config.print_big or config.skip_top or config.mark_max)

    @pytest.mark.parametrize("kwargs", [{"limit": -1}, {"limit": 65536}, {"max_num": -1}])
    def test_invalid(self, kwargs):
        """CONF-02: Out-of-range parameters are rejected."""
        with pytest.raises(ValueError):
            SearchConfig(**kwargs)


class TestLookups:
    def test_live_derivations(self, table):
        """LOOK-01: Live entries cheapest first; tombstones excluded."""
        assert [key for key, _ in live_derivations(table, 2)] == [
            k(2, 2, 0), k(2, 1, 1), k(2, 0, 2),
        ]
        assert [key for key, _ in live_derivations(table, 6)] == [k(6, 0, 2)]
        assert live_derivations(table, 4) == []

    def test_best_entry(self, table):
        """LOOK-02: First live entry in cost order."""
        assert best_entry(table, 1) == (k(1, 1, 0), UnaryOp(FACTORIAL, k(0, 1, 0)))
        assert best_entry(table, 7) is None

    def test_largest_operand(self, table):
        """LOOK-03: Largest operand value anywhere in the derivation tree."""
        assert largest_operand(Literal(3), table) == -1
        assert largest_operand(table[k(0, 0, 4)], table) == 6
        assert largest_operand(table[k(2, 2, 0)], table) == 1
        # operands resolve through retired derivations too
        assert largest_operand(BinaryOp(PLUS, k(5, 1, 3), k(0, 1, 0)), table) == 5


class TestReportLines:
    def test_simple_cheapest(self, table):
        """LINES-01: One cheapest expression per value."""
        lines = list(report_lines(table, SearchConfig(limit=7, max_num=7)))
        assert lines == [
            "0: 0",
            "1: 0!",
            "2: 0!+0!",
            "3: 11",
            "4 was not found",
            "5: 101",
            "6: 11!",
            "7 was not found",
        ]

    def test_detailed_all_costs(self, table):
        """LINES-02: Detailed lines carry cost and top descriptor."""
        config = SearchConfig(limit=7, max_num=7, print_one=False, simple_print=False)
        assert list(report_lines(table, config)) == [
            "0: 1,0: 0 0",
            "0: 0,4: 6-6 11!-(11!)",
            "1: 1,0: 0! 0!",
            "1: 0,1: 1 1",
            "2: 2,0: 1+1 0!+0!",
            "2: 1,1: 10 10",
            "2: 0,2: 1+1 1+1",
            "3: 0,2: 11 11",
            "4 was not found",
            "5: 1,2: 101 101",
            "6: 0,2: 3! 11!",
            "7 was not found",
        ]

    def test_beyond_limit(self, table):
        """LINES-03: Values above the table limit are not found."""
        lines = list(report_lines(table, SearchConfig(limit=7, max_num=9)))
        assert lines[-2:] == ["8 was not found", "9 was not found"]

    def test_skip_top(self, table):
        """LINES-04: A repeated top descriptor within one value is dropped."""
        config = SearchConfig(limit=7, max_num=2, print_one=False, skip_top=True)
        assert list(report_lines(table, config)) == [
            "0: 0",
            "0: 11!-(11!)",
            "1: 0!",
            "1: 1",
            "2: 0!+0!",
            "2: 10",
        ]

    def test_mark_max(self, table):
        """LINES-05: Expressions longer than every earlier one are flagged."""
        config = SearchConfig(limit=7, max_num=6, mark_max=True)
        assert list(report_lines(table, config)) == [
            "0: 0 [max]",
            "1: 0! [max]",
            "2: 0!+0! [max]",
            "3: 11",
            "4 was not found",
            "5: 101",
            "6: 11!",
        ]

    def test_print_big(self, table):
        """LINES-06: Only derivations with an operand above max_num; filtered values print nothing."""
        config = SearchConfig(limit=7, max_num=5, print_big=True)
        assert list(report_lines(table, config)) == [
            "0: 11!-(11!)",
            "4 was not found",
        ]

    def test_read_only(self, table):
        """LINES-07: Reporting never mutates the table."""
        before = table.fingerprint()
        config = SearchConfig(limit=7, max_num=7, print_one=False, simple_print=False)
        list(report_lines(table, config))
        assert table.fingerprint() == before


class TestSummarize:
    def test_coverage(self, table):
        """SUM-01: Found, missing and best-cost histogram."""
        summary = summarize(table, 7)
        assert summary["max_num"] == 7
        assert summary["found"] == 6
        assert summary["missing"] == 2
        assert summary["first_missing"] == 4

        histogram = summary["best_cost_histogram"]
        assert histogram[1][0] == 2     # 0 and 1
        assert histogram[2][0] == 1     # 2
        assert histogram[0][2] == 2     # 3 and 6
        assert histogram[1][2] == 1     # 5
        assert sum(map(sum, histogram)) == 6

    def test_nothing_missing(self, table):
        """SUM-02: first_missing is None when the range is covered."""
        summary = summarize(table, 3)
        assert summary["missing"] == 0
        assert summary["first_missing"] is None
