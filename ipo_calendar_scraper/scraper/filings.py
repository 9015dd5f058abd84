"""Fetch the plain text of the registration statement behind a filing reference.

A filing page (``dsaf001/main.do?rcpNo=...``) lists its documents as
``javascript:viewDoc(rcpNo, dcmNo, eleId, offset, length, dtd)`` links; the
document body itself is served by ``report/viewer.do`` with those parameters.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup

from ipo_calendar_scraper import config
from ipo_calendar_scraper.scraper import parse_utils
from ipo_calendar_scraper.scraper.encoding import decode_as, extract_charset
from ipo_calendar_scraper.scraper.parse_utils import Throttle

logger = logging.getLogger(__name__)

_VIEW_DOC_RE = re.compile(
    r"viewDoc\(\s*'?(?P<rcp_no>\d{14})'?\s*,\s*'?(?P<dcm_no>\d+)'?\s*,"
    r"\s*'?(?P<ele_id>null|\d+)?'?\s*,\s*'?(?P<offset>null|\d+)?'?\s*,"
    r"\s*'?(?P<length>null|\d+)?'?\s*,\s*'?(?P<dtd>[^'()\s]+)'?\s*\)"
)
_PREFERRED_DOC_TITLES = ("증권신고서(지분증권)", "증권신고서")


class FilingTextError(RuntimeError):
    """The filing page did not expose a readable document."""


@dataclass(slots=True)
class ViewerParams:
    rcp_no: str
    dcm_no: str
    ele_id: str = "0"
    offset: str = "0"
    length: str = "0"
    dtd: str = "dart3.xsd"
    picked_text: str = ""

    def as_query(self) -> dict[str, str]:
        return {
            "rcpNo": self.rcp_no,
            "dcmNo": self.dcm_no,
            "eleId": self.ele_id,
            "offset": self.offset,
            "length": self.length,
            "dtd": self.dtd,
        }


def extract_viewer_params(html: str) -> Optional[ViewerParams]:
    """Pick the registration-statement document link and parse its viewDoc call."""
    soup = BeautifulSoup(html or "", "lxml")
    candidates = []
    for anchor in soup.find_all("a"):
        call = " ".join(filter(None, (anchor.get("href"), anchor.get("onclick"))))
        if "viewDoc(" in call:
            candidates.append((call, parse_utils.clean_text(anchor.get_text(" "))))
    if not candidates:
        # Some filing pages only call viewDoc from inline script
        for script in soup.find_all("script"):
            text = script.string or ""
            if "viewDoc(" in text:
                candidates.append((text, ""))

    picked = None
    for title in _PREFERRED_DOC_TITLES:
        picked = next((c for c in candidates if title in c[1]), None)
        if picked:
            break
    if picked is None and candidates:
        picked = candidates[0]
    if picked is None:
        return None

    match = _VIEW_DOC_RE.search(picked[0])
    if not match:
        return None
    ele_id = match.group("ele_id")
    return ViewerParams(
        rcp_no=match.group("rcp_no"),
        dcm_no=match.group("dcm_no"),
        ele_id=ele_id if ele_id and ele_id != "null" else "0",
        dtd=match.group("dtd") or "dart3.xsd",
        picked_text=picked[1],
    )


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html or "", "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return parse_utils.clean_text(soup.get_text(" "))


class DartFilingFetcher:
    """Two-step filing text lookup with a rate cap across all lookups."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = config.HTTP_TIMEOUT,
        delay: float = config.FILING_DELAY,
    ):
        self.session = session or requests.Session()
        self.session.headers.update({**config.REQUEST_HEADERS, "Referer": config.FILING_MAIN_URL})
        self.timeout = timeout
        self.throttle = Throttle(delay)

    def _get_html(self, url: str, params: dict) -> str:
        self.throttle.wait()
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        charset = extract_charset(response.headers.get("content-type")) or config.DEFAULT_CHARSET
        return decode_as(response.content, charset)

    def fetch_text(self, rcp_no: str) -> str:
        """Return the registration statement's visible text.

        Raises ``requests.RequestException`` on transport failures and
        ``FilingTextError`` when no document link can be found.
        """
        main_html = self._get_html(config.FILING_MAIN_URL, {"rcpNo": rcp_no})
        params = extract_viewer_params(main_html)
        if params is None:
            raise FilingTextError(f"viewDoc parameters not found for rcpNo={rcp_no}")
        logger.debug(f"rcpNo={rcp_no}: reading document {params.dcm_no} ({params.picked_text!r})")
        viewer_html = self._get_html(config.FILING_VIEWER_URL, params.as_query())
        return html_to_text(viewer_html)
