"""Parser for a previously written IPO feed file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ipo_calendar_scraper import config

logger = logging.getLogger(__name__)

ITEM_COLUMNS = [
    "corp_name",
    "market_short",
    "market",
    "sbd_start",
    "sbd_end",
    "rcp_no",
    "offer_type",
    "brokers",
    "equalMin",
    "note",
]


def load_feed(file_path: Optional[Path] = None) -> dict:
    """Load the raw feed envelope.

    Args:
        file_path: Path to the feed JSON. Defaults to the configured output path.

    Returns:
        The decoded feed dictionary.
    """
    file_path = Path(file_path or config.OUTPUT_PATH)
    if not file_path.exists():
        raise FileNotFoundError(f"Feed file not found: {file_path}")
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def parse_feed_items(feed: dict) -> pd.DataFrame:
    """Convert feed items to a DataFrame with parsed subscription dates."""
    df = pd.DataFrame(feed.get("items") or [], columns=ITEM_COLUMNS)
    for col in ("sbd_start", "sbd_end"):
        df[col] = pd.to_datetime(df[col], errors="coerce")
    logger.info(f"Parsed {len(df)} feed items")
    return df


def get_feed_summary(feed: dict, df: pd.DataFrame) -> dict:
    """Get summary statistics from a feed and its items DataFrame.

    Args:
        feed: The feed envelope.
        df: Items DataFrame from ``parse_feed_items``.

    Returns:
        Dictionary with summary statistics.
    """
    summary = {
        "total_items": len(df),
        "declared_count": feed.get("count"),
        "range": feed.get("range"),
        "mode": feed.get("mode"),
        "last_updated_kst": feed.get("last_updated_kst"),
        "excluded_listed": feed.get("excluded_listed", 0),
        "excluded_non_ipo": feed.get("excluded_non_ipo", 0),
        "markets": {},
        "offer_types": {},
        "subscription_span": None,
    }

    if len(df) > 0:
        summary["markets"] = df["market"].fillna("UNKNOWN").value_counts().to_dict()
        summary["offer_types"] = df["offer_type"].fillna("UNKNOWN").value_counts().to_dict()
        starts = df["sbd_start"].dropna()
        ends = df["sbd_end"].dropna()
        if len(starts) > 0 and len(ends) > 0:
            summary["subscription_span"] = {
                "first_start": starts.min().date().isoformat(),
                "last_end": ends.max().date().isoformat(),
            }

    return summary
