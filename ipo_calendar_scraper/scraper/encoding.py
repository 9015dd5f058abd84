"""Pick the decoding of a calendar page that yields the most calendar events.

The calendar server labels its responses inconsistently: the same page may be
served as UTF-8 or EUC-KR regardless of the declared charset. Correctly
decoded Hangul produces many ``<market> <name> [<boundary>]`` matches while a
mis-decoded buffer produces none, so the match count decides.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ipo_calendar_scraper import config

EVENT_RE = re.compile(r"^(유|코|넥|기)\s+([^\[]+?)\s*\[\s*(시작|종료)\s*\]\s*$")
EVENT_RE_LOOSE = re.compile(r"(유|코|넥|기)\s*([^\[]+?)\s*\[\s*(시작|종료)\s*\]")

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([a-z0-9_\-]+)", re.I)
_KOREAN_ALIASES = ("euc-kr", "euc_kr", "euckr", "ks_c_5601", "ksc5601", "cp949", "ms949", "uhc")


@dataclass(slots=True)
class DecodedPage:
    """Decoded text plus the evidence used to choose it."""

    text: str
    charset: str
    score: int
    alt_charset: str
    alt_score: int


def extract_charset(content_type: Optional[str]) -> str:
    """Return the lowercase charset from a Content-Type header, or ''."""
    match = _CHARSET_RE.search(content_type or "")
    return match.group(1).lower() if match else ""


def is_korean_charset(charset: str) -> bool:
    cs = (charset or "").lower()
    return any(alias in cs for alias in _KOREAN_ALIASES)


def decode_as(content: bytes, charset: str) -> str:
    """Decode without ever raising; EUC-KR aliases decode as CP949."""
    codec = "cp949" if is_korean_charset(charset) else "utf-8"
    return content.decode(codec, errors="replace")


def score_events(text: str) -> int:
    """Count loose calendar-event matches in decoded text."""
    return len(EVENT_RE_LOOSE.findall(text or ""))


def pick_best_decoding(content: bytes, content_type: Optional[str] = None) -> DecodedPage:
    """Decode under the declared (or default) charset and the other candidate.

    The alternate decoding wins only with a strictly higher score, so ties
    keep the declared/default charset.
    """
    declared = extract_charset(content_type)
    if is_korean_charset(declared):
        primary_cs, alt_cs = config.ALTERNATE_CHARSET, config.DEFAULT_CHARSET
    else:
        primary_cs, alt_cs = config.DEFAULT_CHARSET, config.ALTERNATE_CHARSET

    primary = decode_as(content, primary_cs)
    primary_score = score_events(primary)
    alt = decode_as(content, alt_cs)
    alt_score = score_events(alt)

    if alt_score > primary_score:
        return DecodedPage(alt, alt_cs, alt_score, primary_cs, primary_score)
    return DecodedPage(primary, primary_cs, primary_score, alt_cs, alt_score)
