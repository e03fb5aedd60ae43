"""
Sell-through report for a BigCommerce store.

Usage:
  python main.py                                   # interactive prompts
  python main.py --range "past month" --brand Acme
  python main.py --range custom --start 01/01/2026 --end 31/03/2026 --output q1.xlsx

Credentials: API_HASH and API_TOKEN in the environment or .env.
"""

import argparse
import logging
import sys
from functools import partial

from sell_through import data_handler, settings
from sell_through.client import BigCommerceClient
from sell_through.date_window import resolve_window
from sell_through.errors import AggregationConflict, InputError, UpstreamError
from sell_through.logger import setup_logger
from sell_through.pipelines.sell_through import SellThroughPipeline

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_UPSTREAM_ERROR = 2
EXIT_CONFIG_ERROR = 3
EXIT_CONFLICT = 4

logger = logging.getLogger("sell_through")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate a ranked sell-through report.")
    p.add_argument("--brand", default=None, help="Only count products of this brand (exact match)")
    p.add_argument(
        "--range",
        dest="date_range",
        default=None,
        help=f"One of: {', '.join(settings.WINDOW_PRESETS)}",
    )
    p.add_argument("--start", default=None, help="Custom range start, DD/MM/YYYY")
    p.add_argument("--end", default=None, help="Custom range end, DD/MM/YYYY")
    p.add_argument("--output", default=None, help=f"Report path (default: {settings.REPORT_FILENAME})")
    p.add_argument("--workers", type=int, default=settings.MAX_WORKERS, help="0 = one per order")
    p.add_argument("--dry-run", action="store_true", help="Build the report but don't write it")
    return p.parse_args(argv)


def prompt_missing(args: argparse.Namespace) -> argparse.Namespace:
    """Asks for anything not given on the command line, the way the report always has."""
    if args.brand is None and args.date_range is None:
        args.brand = input("Enter the brand (or press enter to skip): ").strip()
    if args.date_range is None:
        args.date_range = input(
            f"Enter the date range ({', '.join(settings.WINDOW_PRESETS)}): "
        )
    if args.date_range.strip().lower() == "custom":
        if args.start is None:
            args.start = input("Enter the start date (DD/MM/YYYY): ")
        if args.end is None:
            args.end = input("Enter the end date (DD/MM/YYYY): ")
    return args


def main(argv: list[str] | None = None) -> int:
    setup_logger("sell_through")
    args = parse_args(argv)
    if args.workers < 0:
        logger.error(f"❌ --workers must be 0 (one per order) or positive, got {args.workers}")
        return EXIT_INPUT_ERROR

    try:
        args = prompt_missing(args)
    except EOFError:
        logger.error("❌ No input available for the report prompts (stdin closed).")
        return EXIT_INPUT_ERROR

    try:
        window = resolve_window(args.date_range, args.start, args.end)
    except InputError as e:
        logger.error(f"❌ {e}")
        return EXIT_INPUT_ERROR

    try:
        # One pooled connection per worker
        client = BigCommerceClient(pool_size=args.workers if args.workers > 0 else 64)
    except ValueError as e:
        logger.error(f"❌ {e}")
        return EXIT_CONFIG_ERROR

    if not args.dry_run:
        data_handler.remove_existing_report(args.output)

    pipeline = SellThroughPipeline(
        client,
        window,
        brand_filter=args.brand,
        sink=partial(data_handler.save_outputs, path=args.output),
        max_workers=args.workers,
        dry_run=args.dry_run,
    )
    try:
        with client:
            pipeline.run()
    except UpstreamError as e:
        logger.error(f"❌ Report aborted, upstream request failed: {e}")
        return EXIT_UPSTREAM_ERROR
    except AggregationConflict as e:
        logger.error(f"❌ Report aborted, conflicting product data: {e}")
        return EXIT_CONFLICT

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
