"""Markup-based extraction of subscription events from a calendar month page."""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from ipo_calendar_scraper.io import dedupe
from ipo_calendar_scraper.scraper import calendar_tokens, parse_utils
from ipo_calendar_scraper.scraper.encoding import EVENT_RE, EVENT_RE_LOOSE
from ipo_calendar_scraper.scraper.models import BoundaryKind, MonthParse, RawEvent

logger = logging.getLogger(__name__)

_LEAF_TAGS = ("a", "span", "td", "li", "div", "p")
_FILING_LINK_SEL = "a[href*='dsaf001/main.do?rcpNo=']"
# "2026년", "2026.03", "3월" are not day numbers
_YEAR_MONTH = re.compile(r"\d{4}\s*(?:년|[./-]\s*\d{1,2})?|\d{1,2}\s*월")
_DAY_NUMBER = re.compile(r"(?<!\d)(\d{1,2})(?!\d)")
_MAX_ANCESTOR_DEPTH = 6
_MAX_CONTAINER_TEXT = 160


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def build_link_refs(soup: BeautifulSoup) -> dict[str, str]:
    """Map normalised anchor text to the filing reference in its href."""
    refs: dict[str, str] = {}
    for anchor in soup.select(_FILING_LINK_SEL):
        rcp_no = parse_utils.extract_rcp_no(anchor.get("href"))
        key = parse_utils.normalize_name(anchor.get_text(" "))
        if rcp_no and key:
            refs[key] = rcp_no
    return refs


def _is_leaf(el: Tag) -> bool:
    return el.find(True) is None


def _is_entry(el: Tag) -> bool:
    return EVENT_RE.match(parse_utils.clean_text(el.get_text(" "))) is not None


def find_event_leaves(soup: BeautifulSoup) -> list[Tag]:
    """Links or childless cells whose whole text is one calendar entry.

    Links match on their full text even when the market code sits in a
    styled child; cells inside an already matched link are skipped.
    """
    found: list[Tag] = []
    for el in soup.find_all(_LEAF_TAGS):
        if el.name == "a":
            if _is_entry(el):
                found.append(el)
            continue
        if not _is_leaf(el) or not _is_entry(el):
            continue
        owner = el.find_parent("a")
        if owner is not None and any(owner is f for f in found):
            continue
        found.append(el)
    return found


def _container_text(node: Tag) -> str:
    """Visible text of a container, minus links and calendar entries."""
    parts = []
    for piece in node.find_all(string=True):
        if type(piece) is not NavigableString or piece.find_parent("a") is not None:
            continue
        if EVENT_RE_LOOSE.search(piece):
            continue
        parts.append(str(piece))
    return parse_utils.clean_text(" ".join(parts))


def infer_day(leaf: Tag) -> Optional[int]:
    """Walk outward from an entry until a container shows a bare day number."""
    node = leaf
    for _ in range(_MAX_ANCESTOR_DEPTH):
        node = node.parent
        if node is None or not isinstance(node, Tag):
            break
        text = _container_text(node)
        if not text or len(text) > _MAX_CONTAINER_TEXT:
            continue
        for match in _DAY_NUMBER.finditer(_YEAR_MONTH.sub(" ", text)):
            day = int(match.group(1))
            if 1 <= day <= 31:
                return day
    return None


def scan_anchors(soup: BeautifulSoup, year: int, month: int) -> tuple[list[RawEvent], int]:
    """Anchor/cell strategy. Returns the events and how many leaves matched."""
    leaves = find_event_leaves(soup)
    events: list[RawEvent] = []
    for leaf in leaves:
        match = EVENT_RE.match(parse_utils.clean_text(leaf.get_text(" ")))
        day = infer_day(leaf)
        if day is None:
            logger.debug(f"No day cell found for {match.group(0)!r}")
            continue
        event_date = parse_utils.safe_date(year, month, day)
        if event_date is None:
            continue
        anchor = leaf if leaf.name == "a" else leaf.find_parent("a")
        href = anchor.get("href") if anchor is not None else None
        events.append(
            RawEvent(
                date=event_date,
                market_code=match.group(1),
                company_name=parse_utils.normalize_name(match.group(2)),
                boundary_kind=BoundaryKind(match.group(3)),
                source_ref=parse_utils.extract_rcp_no(href),
            )
        )
    return events, len(leaves)


def parse_calendar_month(html: str, year: int, month: int) -> MonthParse:
    """Extract the month's events, preferring markup anchors over the token scan."""
    soup = make_soup(html)
    anchors_total = len(soup.find_all("a"))

    events, matched = scan_anchors(soup, year, month)
    strategy = "anchor"
    if not events:
        body = soup.body or soup
        events = calendar_tokens.scan_text(
            body.get_text(" "),
            year,
            month,
            link_refs=build_link_refs(soup),
        )
        strategy = "tokens"

    unique = dedupe.dedupe_by_key(
        events,
        keys=("date", "market_code", "company_name", "boundary_kind", "source_ref"),
    )
    logger.info(
        f"{year}-{month:02d}: {len(unique)} events via {strategy} scan "
        f"({matched}/{anchors_total} anchors matched)"
    )
    return MonthParse(
        events=unique,
        strategy=strategy,
        anchors_total=anchors_total,
        anchors_matched=matched,
    )
