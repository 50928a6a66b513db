#!/usr/bin/env python3
"""
Search for the cheapest bit-budget expression of every value in a range.

Builds the closure table up to --limit, then prints one line per value in
0..--max-num on stdout. Progress and the closure receipt go to stderr.

Usage:
    bits-search --limit 65535 --max-num 500
    bits-search --limit 4096 --max-num 300 --detailed --all-costs --skip-top
"""

import argparse
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from bits_core.arith import WORD_MAX
from bits_fixedpoint.lfp import compute_closure
from bits_report.report import SearchConfig, report_lines, summarize
from bits_report.utils import build_receipt, save_receipt, setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bits-search",
        description="Cheapest expressions over budgeted binary literals",
    )
    parser.add_argument(
        "--limit", type=int, default=WORD_MAX,
        help=f"Largest value admitted into the table (default: {WORD_MAX})",
    )
    parser.add_argument(
        "--max-num", type=int, default=500,
        help="Report values 0..MAX_NUM (default: 500)",
    )
    parser.add_argument(
        "--all-costs", action="store_true",
        help="List every live cost per value instead of the cheapest only",
    )
    parser.add_argument(
        "--detailed", action="store_true",
        help="Print costs and top-level descriptors",
    )
    parser.add_argument(
        "--big", action="store_true",
        help="Only derivations whose largest operand exceeds MAX_NUM",
    )
    parser.add_argument(
        "--skip-top", action="store_true",
        help="Suppress repeated top-level descriptors per value",
    )
    parser.add_argument(
        "--mark-max", action="store_true",
        help="Flag expressions longer than every earlier one",
    )
    parser.add_argument("--receipt", type=Path, help="Write a JSON receipt here")
    parser.add_argument("--log-file", type=Path, help="Also log to this file")
    parser.add_argument("--verbose", action="store_true", help="Log every pass")
    return parser


def config_from_args(args: argparse.Namespace) -> SearchConfig:
    return SearchConfig(
        limit=args.limit,
        max_num=args.max_num,
        print_one=not args.all_costs,
        simple_print=not args.detailed,
        print_big=args.big,
        skip_top=args.skip_top,
        mark_max=args.mark_max,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    level = logging.DEBUG if args.verbose else logging.INFO
    logger = setup_logger("bits_report", args.log_file, level=level)
    # Route closure-engine progress through the same handlers
    engine_logger = logging.getLogger("bits_fixedpoint")
    engine_logger.setLevel(level)
    engine_logger.handlers = list(logger.handlers)

    logger.info("=" * 60)
    logger.info(f"Closure limit: {config.limit}")
    logger.info(f"Report range: 0..{config.max_num}")
    logger.info("=" * 60)

    table, closure = compute_closure(config.limit)
    logger.info(
        f"Table: {closure.total_entries} entries, {closure.live_entries} live, "
        f"fingerprint {closure.fingerprint:016x}"
    )

    for line in report_lines(table, config):
        print(line)

    summary = summarize(table, config.max_num)
    logger.info(f"Found {summary['found']} of {config.max_num + 1} values")
    if summary["first_missing"] is not None:
        logger.info(f"First missing value: {summary['first_missing']}")

    if args.receipt is not None:
        receipt = build_receipt(asdict(config), closure.to_dict(), summary)
        save_receipt(receipt, args.receipt)
        logger.info(f"Receipt saved to: {args.receipt}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
