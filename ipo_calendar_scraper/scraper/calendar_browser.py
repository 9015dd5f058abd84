"""Rendered-browser fetching of calendar months via Playwright.

Used when the plain HTTP source is blocked by anti-bot checks. The page is
rendered in headless Chromium, switched to the requested month through the
widget's own form, and the resulting DOM is returned as UTF-8 bytes.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ipo_calendar_scraper import config
from ipo_calendar_scraper.scraper.models import PageFetch, PageFetchError
from ipo_calendar_scraper.scraper.parse_utils import Throttle

logger = logging.getLogger(__name__)

YEAR_SELECT_SEL = "select[name='selectYear']"
MONTH_SELECT_SEL = "select[name='selectMonth']"
SEARCH_BUTTON_SEL = "input[value='검색'], button:has-text('검색'), a:has-text('검색')"


@asynccontextmanager
async def calendar_page(headless: Optional[bool] = None, timeout_ms: float = 25_000) -> AsyncIterator[Page]:
    """Yield a fresh Korean-locale page; browser and context close on exit."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(
            headless=config.PLAYWRIGHT_HEADLESS if headless is None else headless
        )
        try:
            context = await browser.new_context(
                user_agent=config.PLAYWRIGHT_USER_AGENT,
                locale=config.PLAYWRIGHT_LOCALE,
                timezone_id=config.TZ_DISPLAY,
                viewport=config.PLAYWRIGHT_VIEWPORT,
                extra_http_headers={"Accept-Language": config.REQUEST_HEADERS["Accept-Language"]},
            )
            page = await context.new_page()
            page.set_default_timeout(timeout_ms)
            page.set_default_navigation_timeout(timeout_ms)
            yield page
        finally:
            await browser.close()


async def settle(page: Page, timeout_ms: float = 10_000) -> None:
    """Wait for the month's XHR refresh to finish."""
    try:
        await page.wait_for_load_state("networkidle", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        # Long-polling widgets never go idle; the table is usually there by now
        await asyncio.sleep(1)


async def select_month(page: Page, year: int, month: int) -> None:
    """Drive the widget's year/month selectors and submit the form."""
    await page.select_option(YEAR_SELECT_SEL, str(year))
    await page.select_option(MONTH_SELECT_SEL, f"{month:02d}")
    search = page.locator(SEARCH_BUTTON_SEL)
    if await search.count() > 0:
        await search.first.click()
    else:
        await page.eval_on_selector(YEAR_SELECT_SEL, "el => el.form && el.form.submit()")
    await settle(page)


class BrowserCalendarSource:
    """Page source that renders each month in a fresh headless browser."""

    def __init__(
        self,
        timeout: float = config.HTTP_TIMEOUT,
        delay: float = config.MONTH_DELAY,
        headless: bool | None = None,
    ):
        self.timeout_ms = timeout * 1000
        self.headless = headless
        self.throttle = Throttle(delay)

    async def _render_month(self, year: int, month: int) -> str:
        async with calendar_page(self.headless, self.timeout_ms) as page:
            response = await page.goto(config.CALENDAR_URL, wait_until="domcontentloaded")
            if response is not None and not response.ok:
                raise PageFetchError(f"GET {config.CALENDAR_URL} returned {response.status}")
            await select_month(page, year, month)
            return await page.content()

    def get_month_html(self, year: int, month: int) -> PageFetch:
        self.throttle.wait()
        try:
            html = asyncio.run(self._render_month(year, month))
        except PlaywrightError as e:
            raise PageFetchError(f"Browser render of {year}-{month:02d} failed: {e}") from e
        logger.info(f"Rendered {year}-{month:02d} in browser ({len(html)} chars)")
        return PageFetch(
            content=html.encode("utf-8"),
            content_type="text/html; charset=utf-8",
            status=200,
        )
