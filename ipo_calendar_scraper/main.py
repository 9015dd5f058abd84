"""CLI orchestrator for the DART subscription-calendar IPO feed."""

from __future__ import annotations

import argparse
import logging
from collections import Counter
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from dateutil import parser as date_parser

from ipo_calendar_scraper import config
from ipo_calendar_scraper.io import meta, parse_output, save_json
from ipo_calendar_scraper.pipeline.run import PipelineRun
from ipo_calendar_scraper.scraper import parse_utils, registry
from ipo_calendar_scraper.scraper.calendar_http import DartCalendarSource
from ipo_calendar_scraper.scraper.filings import DartFilingFetcher
from ipo_calendar_scraper.scraper.models import PageSource

logger = logging.getLogger(__name__)


def parse_iso_date(value: str) -> date:
    try:
        return date_parser.isoparse(value).date()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got {value!r}") from e


def build_page_source(fetcher: str) -> PageSource:
    if fetcher == "browser":
        # Playwright is only imported when the browser strategy is chosen
        from ipo_calendar_scraper.scraper.calendar_browser import BrowserCalendarSource

        return BrowserCalendarSource()
    return DartCalendarSource()


def load_registry(args: argparse.Namespace) -> set[str]:
    if args.no_registry:
        logger.warning("Registry filter disabled; listed companies will not be excluded")
        return set()
    if args.registry_file:
        return registry.load_listed_names_file(args.registry_file)
    return registry.fetch_listed_names()


def run_feed_mode(args: argparse.Namespace) -> int:
    # Without --end the window spans DEFAULT_WINDOW_DAYS from the start
    start, default_end = parse_utils.default_window(args.start)
    end = args.end or default_end
    if start > end:
        logger.error(f"--start {start} is after --end {end}")
        return 2

    try:
        listed_names = load_registry(args)
    except (registry.RegistrySanityError, OSError) as e:
        logger.error(f"Registry setup failed: {e}")
        return 1

    meta_map = meta.load_meta_map(args.meta)
    fetch_filing_text = None if args.no_classify else DartFilingFetcher().fetch_text

    run = PipelineRun(
        build_page_source(args.fetcher),
        listed_names=listed_names,
        meta_map=meta_map,
        fetch_filing_text=fetch_filing_text,
        mode=args.mode,
        source_label=config.SOURCE_LABELS[args.fetcher],
    )
    feed = run.run(start, end)

    try:
        output_path = save_json.save_feed_json(feed, args.out)
    except OSError as e:
        logger.error(f"Failed to write feed to {args.out}: {e}")
        return 1

    stats = run.stats
    print(f"Saved {feed['count']} items to {output_path}")
    print(f"\nRun Summary ({args.mode}):")
    print(f"  Months: {', '.join(stats.months)}")
    print(f"  Events: {stats.total_events} (in window: {stats.ranged_events})")
    print(f"  Merged companies: {stats.merged_items}")
    print(f"  Excluded (listed): {stats.excluded_listed}")
    print(f"  Excluded (offer type): {stats.excluded_non_ipo}")
    print(f"  Output items: {stats.output_items}")
    offer_counter = Counter(item["offer_type"] for item in feed["items"])
    print("Offer type distribution:", offer_counter)
    return 0


def run_summary_mode(path: Path) -> int:
    """Print a summary of an existing feed file."""
    try:
        feed = parse_output.load_feed(path)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read feed {path}: {e}")
        return 1

    df = parse_output.parse_feed_items(feed)
    summary = parse_output.get_feed_summary(feed, df)

    print("=" * 60)
    print(f"Feed: {path}")
    print("=" * 60)
    print(f"  Items: {summary['total_items']} (declared count: {summary['declared_count']})")
    if summary["range"]:
        print(f"  Window: {summary['range'].get('start')} to {summary['range'].get('end')}")
    print(f"  Mode: {summary['mode']}  Updated: {summary['last_updated_kst']}")
    print(f"  Excluded listed: {summary['excluded_listed']}  Excluded non-IPO: {summary['excluded_non_ipo']}")
    if summary["subscription_span"]:
        span = summary["subscription_span"]
        print(f"  Subscriptions: {span['first_start']} to {span['last_end']}")
    if summary["markets"]:
        print("  Markets:")
        for market, count in sorted(summary["markets"].items(), key=lambda x: x[1], reverse=True):
            print(f"    - {market}: {count}")
    if summary["offer_types"]:
        print("  Offer types:")
        for offer_type, count in sorted(summary["offer_types"].items()):
            print(f"    - {offer_type}: {count}")
    return 0


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--start", type=parse_iso_date, help="Window start (YYYY-MM-DD, default: today KST).")
    parser.add_argument(
        "--end",
        type=parse_iso_date,
        help=f"Window end (YYYY-MM-DD, default: start + {config.DEFAULT_WINDOW_DAYS} days).",
    )
    parser.add_argument("--out", type=Path, default=config.OUTPUT_PATH, help="Feed output path.")
    parser.add_argument(
        "--mode",
        choices=config.OFFER_MODES,
        default=config.DEFAULT_OFFER_MODE,
        help="Offer types to keep: ipo only, everything except rights issues, or all.",
    )
    parser.add_argument(
        "--fetcher",
        choices=tuple(config.SOURCE_LABELS),
        default="http",
        help="Calendar page source.",
    )
    parser.add_argument("--meta", type=Path, default=config.META_PATH, help="Broker annotation JSON.")
    parser.add_argument("--registry-file", type=Path, help="Use a downloaded KIND list instead of fetching it.")
    parser.add_argument("--no-registry", action="store_true", help="Skip the listed-company exclusion.")
    parser.add_argument("--no-classify", action="store_true", help="Skip filing lookups (all UNKNOWN).")
    parser.add_argument(
        "--summary",
        nargs="?",
        type=Path,
        const=config.OUTPUT_PATH,
        help="Summarise an existing feed file instead of scraping.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output.")
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.summary is not None:
        return run_summary_mode(args.summary)
    return run_feed_mode(args)


if __name__ == "__main__":
    raise SystemExit(main())
