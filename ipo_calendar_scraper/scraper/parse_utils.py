"""Text and date helpers shared by the calendar parsers."""

from __future__ import annotations

import re
import time
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

import pytz
from dateutil.relativedelta import relativedelta

from ipo_calendar_scraper import config

# NBSP, figure/narrow NBSP and ideographic space seen in the widget
_SPACE_VARIANTS = re.compile("[\u00a0\u2007\u202f\u3000]")
_ZERO_WIDTH = re.compile("[\u200b\u200c\u200d\ufeff]")
_WHITESPACE = re.compile(r"\s+")
_RCP_NO = re.compile(r"rcpNo=(\d{14})")


def clean_text(value: Optional[str]) -> str:
    """Collapse whitespace (including NBSP variants) and strip."""
    if not value:
        return ""
    value = _ZERO_WIDTH.sub("", _SPACE_VARIANTS.sub(" ", value))
    return _WHITESPACE.sub(" ", value).strip()


def normalize_name(value: Optional[str]) -> str:
    """Normalise a company name for use as a merge or registry key."""
    return clean_text(value)


def extract_rcp_no(href: Optional[str]) -> Optional[str]:
    """Return the 14-digit filing reference embedded in a DART link."""
    match = _RCP_NO.search(href or "")
    return match.group(1) if match else None


def market_label(market_code: str) -> str:
    return config.MARKET_LABELS.get(market_code, config.UNKNOWN_MARKET_LABEL)


def kst_today() -> date:
    """Today's date in Asia/Seoul."""
    return datetime.now(pytz.timezone(config.TZ_DISPLAY)).date()


def default_window(today: Optional[date] = None) -> tuple[date, date]:
    start = today or kst_today()
    return start, start + timedelta(days=config.DEFAULT_WINDOW_DAYS)


def iter_months(start: date, end: date) -> Iterator[tuple[int, int]]:
    """Yield (year, month) pairs covering start..end inclusive."""
    cursor = start.replace(day=1)
    last = end.replace(day=1)
    while cursor <= last:
        yield cursor.year, cursor.month
        cursor += relativedelta(months=1)


def safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


class Throttle:
    """Enforce a minimum interval between successive calls to ``wait``."""

    def __init__(self, interval: float):
        self.interval = interval
        self._last: Optional[float] = None

    def wait(self) -> None:
        now = time.monotonic()
        if self._last is not None:
            remaining = self.interval - (now - self._last)
            if remaining > 0:
                time.sleep(remaining)
        self._last = time.monotonic()
