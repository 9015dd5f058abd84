"""Session-based HTTP fetching of DART subscription-calendar months."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from ipo_calendar_scraper import config
from ipo_calendar_scraper.scraper.models import PageFetch, PageFetchError
from ipo_calendar_scraper.scraper.parse_utils import Throttle

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    **config.REQUEST_HEADERS,
    "Referer": config.CALENDAR_URL,
}


def build_session(headers: Optional[Dict[str, str]] = None) -> requests.Session:
    session = requests.Session()
    session.headers.update(headers or DEFAULT_HEADERS)
    return session


def build_month_form(year: int, month: int) -> Dict[str, str]:
    """Form body that switches the calendar widget to (year, month)."""
    return {
        "selectYear": str(year),
        "selectMonth": f"{month:02d}",
        "search": "검색",
    }


class DartCalendarSource:
    """Fetch calendar months over plain HTTP.

    The widget keeps the selected month in the server session, so the first
    request is a bootstrap GET that collects cookies; each month is then a
    form POST on the same session. Every request waits on a shared throttle.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = config.HTTP_TIMEOUT,
        delay: float = config.MONTH_DELAY,
    ):
        self.session = session or build_session()
        self.timeout = timeout
        self.throttle = Throttle(delay)
        self._bootstrapped = False

    def _request(self, method: str, **kwargs) -> requests.Response:
        self.throttle.wait()
        try:
            response = self.session.request(
                method, config.CALENDAR_URL, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise PageFetchError(f"{method} {config.CALENDAR_URL} failed: {e}") from e
        return response

    def bootstrap(self) -> None:
        response = self._request("GET")
        self._bootstrapped = True
        logger.info(
            f"Calendar session ready (status={response.status_code}, "
            f"cookies={sorted(self.session.cookies.keys())})"
        )

    def get_month_html(self, year: int, month: int) -> PageFetch:
        if not self._bootstrapped:
            self.bootstrap()
        response = self._request("POST", data=build_month_form(year, month))
        return PageFetch(
            content=response.content,
            content_type=response.headers.get("content-type", ""),
            status=response.status_code,
        )
