"""Tests for driving the calendar widget's month form in a browser page."""

from __future__ import annotations

import asyncio

from ipo_calendar_scraper.scraper import calendar_browser


class FakeLocator:
    def __init__(self, matches):
        self.matches = matches
        self.clicks = 0

    async def count(self):
        return self.matches

    @property
    def first(self):
        return self

    async def click(self):
        self.clicks += 1


class FakePage:
    def __init__(self, search_matches):
        self.search = FakeLocator(search_matches)
        self.calls = []

    async def select_option(self, selector, value):
        self.calls.append(("select", selector, value))

    def locator(self, selector):
        self.calls.append(("locator", selector))
        return self.search

    async def eval_on_selector(self, selector, expression):
        self.calls.append(("submit", selector))

    async def wait_for_load_state(self, state, timeout=None):
        self.calls.append(("wait", state))


def test_select_month_clicks_search_button():
    page = FakePage(search_matches=1)
    asyncio.run(calendar_browser.select_month(page, 2026, 3))

    assert page.calls[:2] == [
        ("select", calendar_browser.YEAR_SELECT_SEL, "2026"),
        ("select", calendar_browser.MONTH_SELECT_SEL, "03"),
    ]
    assert page.search.clicks == 1
    assert not any(call[0] == "submit" for call in page.calls)
    assert page.calls[-1] == ("wait", "networkidle")


def test_select_month_submits_form_without_button():
    page = FakePage(search_matches=0)
    asyncio.run(calendar_browser.select_month(page, 2026, 11))

    assert ("select", calendar_browser.MONTH_SELECT_SEL, "11") in page.calls
    assert ("submit", calendar_browser.YEAR_SELECT_SEL) in page.calls
    assert page.search.clicks == 0
    assert page.calls[-1] == ("wait", "networkidle")
