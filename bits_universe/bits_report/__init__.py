"""
Reporting driver and command line for the bit-budget expression search.

Modules:
- report.py: SearchConfig, per-value report lines, coverage summary
- utils.py: Logger setup and JSON receipts
- cli.py: bits-search entry point
"""

from .report import SearchConfig, best_entry, report_lines, summarize

__all__ = [
    "SearchConfig",
    "best_entry",
    "report_lines",
    "summarize",
]
