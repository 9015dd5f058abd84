"""Token scanner over the flattened text of a calendar month page.

The page body reads like ``... 2 02 코 케이뱅크 [시작] 유 에이비씨 [종료] 3 03 ...``:
day markers, then market codes each followed by a company name and a
bracketed boundary word. The scanner walks the tokens through four states:

* ``SEEKING_DAY``: nothing is emitted until the first day marker.
* ``SEEKING_MARKET``: waiting for a market code under the current day.
* ``IN_NAME``: collecting company-name tokens until a boundary marker.
* ``SEEKING_BOUNDARY``: a lone ``[`` was seen; the next token must be a
  boundary word (``시작``/``종료``), optionally followed by ``]``.

An entry interrupted by a day marker or a fresh market code is discarded.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Mapping, Optional

from ipo_calendar_scraper import config
from ipo_calendar_scraper.scraper import parse_utils
from ipo_calendar_scraper.scraper.models import BoundaryKind, RawEvent

logger = logging.getLogger(__name__)

_DAY_TOKEN = re.compile(r"^\d{1,2}$")
_BOUNDARY_TOKEN = re.compile(r"^\[(시작|종료)\]?$")

_BOUNDARY_BY_WORD = {
    config.BOUNDARY_START_WORD: BoundaryKind.START,
    config.BOUNDARY_END_WORD: BoundaryKind.END,
}


class ScanState(Enum):
    SEEKING_DAY = "seeking_day"
    SEEKING_MARKET = "seeking_market"
    IN_NAME = "in_name"
    SEEKING_BOUNDARY = "seeking_boundary"


def tokenize(text: str) -> list[str]:
    """Split page text into tokens, detaching brackets glued to names."""
    text = parse_utils.clean_text(text).replace("[", " [").replace("]", "] ")
    return text.split()


def day_marker(tokens: list[str], idx: int) -> Optional[tuple[int, int]]:
    """Return (day, tokens consumed) if ``tokens[idx]`` starts a day marker.

    The widget renders each day as a bare number, often echoed zero-padded
    (``2 02``); the echo is consumed with it.
    """
    tok = tokens[idx]
    if not _DAY_TOKEN.match(tok):
        return None
    day = int(tok)
    if not 1 <= day <= 31:
        return None
    nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
    if nxt is not None and nxt != tok and _DAY_TOKEN.match(nxt) and int(nxt) == day:
        return day, 2
    return day, 1


class TokenScanner:
    """Finite-state scan of one month's tokens into RawEvents."""

    def __init__(
        self,
        year: int,
        month: int,
        link_refs: Optional[Mapping[str, str]] = None,
    ):
        self.year = year
        self.month = month
        self.link_refs = link_refs or {}
        self.discarded = 0
        self._reset()

    def _reset(self) -> None:
        self.state = ScanState.SEEKING_DAY
        self.day: Optional[int] = None
        self.market: Optional[str] = None
        self.name_parts: list[str] = []

    def _open_entry(self, market: str) -> None:
        self.market = market
        self.name_parts = []
        self.state = ScanState.IN_NAME

    def _drop_entry(self) -> None:
        if self.market is not None:
            self.discarded += 1
            logger.debug(
                f"Discarded incomplete entry {self.market} {' '.join(self.name_parts)!r} "
                f"on {self.year}-{self.month:02d}-{self.day}"
            )
        self.market = None
        self.name_parts = []
        self.state = ScanState.SEEKING_MARKET

    def _emit(self, word: str, events: list[RawEvent]) -> None:
        name = parse_utils.normalize_name(" ".join(self.name_parts))
        event_date = parse_utils.safe_date(self.year, self.month, self.day)
        if not name or event_date is None:
            self._drop_entry()
            return
        events.append(
            RawEvent(
                date=event_date,
                market_code=self.market,
                company_name=name,
                boundary_kind=_BOUNDARY_BY_WORD[word],
                source_ref=self._lookup_ref(name, word),
            )
        )
        self.market = None
        self.name_parts = []
        self.state = ScanState.SEEKING_MARKET

    def _lookup_ref(self, name: str, word: str) -> Optional[str]:
        for key in (f"{self.market} {name} [{word}]", f"{name} [{word}]", name):
            ref = self.link_refs.get(parse_utils.normalize_name(key))
            if ref:
                return ref
        return None

    @staticmethod
    def _closing_skip(tokens: list[str], idx: int) -> int:
        """Tokens to advance past a boundary word, including a detached ']'."""
        if not tokens[idx].endswith("]") and idx + 1 < len(tokens) and tokens[idx + 1] == "]":
            return 2
        return 1

    def scan(self, tokens: list[str]) -> list[RawEvent]:
        events: list[RawEvent] = []
        idx = 0
        while idx < len(tokens):
            tok = tokens[idx]

            marker = day_marker(tokens, idx)
            if marker is not None:
                if self.state in (ScanState.IN_NAME, ScanState.SEEKING_BOUNDARY):
                    self._drop_entry()
                self.day, consumed = marker
                self.state = ScanState.SEEKING_MARKET
                idx += consumed
                continue

            if self.state is ScanState.SEEKING_DAY:
                idx += 1
                continue

            if self.state is ScanState.SEEKING_BOUNDARY:
                word = tok[:-1] if tok.endswith("]") else tok
                if word in _BOUNDARY_BY_WORD:
                    self._emit(word, events)
                    idx += self._closing_skip(tokens, idx)
                else:
                    # Re-read this token outside the abandoned entry
                    self._drop_entry()
                continue

            if tok in config.MARKET_LABELS:
                if self.state is ScanState.IN_NAME:
                    self._drop_entry()
                self._open_entry(tok)
                idx += 1
                continue

            if self.state is ScanState.IN_NAME:
                boundary = _BOUNDARY_TOKEN.match(tok)
                if boundary:
                    if self.name_parts:
                        self._emit(boundary.group(1), events)
                    else:
                        self._drop_entry()
                    idx += self._closing_skip(tokens, idx)
                    continue
                if tok == "[":
                    self.state = ScanState.SEEKING_BOUNDARY
                else:
                    self.name_parts.append(tok)
            idx += 1

        if self.state in (ScanState.IN_NAME, ScanState.SEEKING_BOUNDARY):
            self._drop_entry()
        return events


def scan_text(
    text: str,
    year: int,
    month: int,
    link_refs: Optional[Mapping[str, str]] = None,
) -> list[RawEvent]:
    """Extract RawEvents from the flattened body text of one month page."""
    scanner = TokenScanner(year, month, link_refs)
    events = scanner.scan(tokenize(text))
    if scanner.discarded:
        logger.info(f"{year}-{month:02d}: discarded {scanner.discarded} incomplete calendar entries")
    return events
