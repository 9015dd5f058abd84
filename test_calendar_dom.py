"""Tests for markup-based month parsing."""

from __future__ import annotations

from datetime import date

from ipo_calendar_scraper.scraper import calendar_dom
from ipo_calendar_scraper.scraper.models import BoundaryKind

ANCHOR_PAGE = """
<html><body>
<h2>2026년 03월</h2>
<table>
<tr>
<td><span class="day">2</span>
  <div><a href="/dsaf001/main.do?rcpNo=20260220000111">코 케이뱅크 [시작]</a></div></td>
<td><span class="day">3</span>
  <div><a href="/dsaf001/main.do?rcpNo=20260220000111">코 케이뱅크 [종료]</a>
  <a href="#">유 에이비씨 [시작]</a></div></td>
</tr>
</table>
</body></html>
"""

TOKEN_PAGE = """
<html><body>
<table><tr>
<td>2</td>
<td><span>코 케이뱅크</span> <span>[시작]</span></td>
<td>3</td>
<td><span>코 케이뱅크</span> <span>[종료]</span></td>
</tr></table>
<p>공시: <a href="/dsaf001/main.do?rcpNo=20260220000111">케이뱅크</a></p>
</body></html>
"""


def test_anchor_scan_infers_days_from_cells():
    parsed = calendar_dom.parse_calendar_month(ANCHOR_PAGE, 2026, 3)

    assert parsed.strategy == "anchor"
    assert parsed.anchors_total == 3
    assert parsed.anchors_matched == 3
    assert [(e.date, e.company_name, e.boundary_kind, e.source_ref) for e in parsed.events] == [
        (date(2026, 3, 2), "케이뱅크", BoundaryKind.START, "20260220000111"),
        (date(2026, 3, 3), "케이뱅크", BoundaryKind.END, "20260220000111"),
        (date(2026, 3, 3), "에이비씨", BoundaryKind.START, None),
    ]


def test_infer_day_ignores_year_and_month_numbers():
    html = "<table><tr><td><em>2026년</em> <b>4</b><div><a>코 에이 [시작]</a></div></td></tr></table>"
    soup = calendar_dom.make_soup(html)
    leaf = calendar_dom.find_event_leaves(soup)[0]
    assert calendar_dom.infer_day(leaf) == 4


def test_infer_day_gives_up_without_day_cell():
    soup = calendar_dom.make_soup("<div><p><a>코 에이 [시작]</a></p></div>")
    leaf = calendar_dom.find_event_leaves(soup)[0]
    assert calendar_dom.infer_day(leaf) is None


def test_duplicate_sightings_collapse():
    html = ANCHOR_PAGE.replace("</table>", "<tr><td>2<div><a href=\"/dsaf001/main.do?rcpNo=20260220000111\">코 케이뱅크 [시작]</a></div></td></tr></table>")
    parsed = calendar_dom.parse_calendar_month(html, 2026, 3)
    starts = [e for e in parsed.events if e.boundary_kind is BoundaryKind.START and e.company_name == "케이뱅크"]
    assert len(starts) == 1


def test_token_fallback_when_no_anchor_matches():
    parsed = calendar_dom.parse_calendar_month(TOKEN_PAGE, 2026, 3)

    assert parsed.strategy == "tokens"
    assert [(e.date.day, e.market_code, e.company_name, e.boundary_kind) for e in parsed.events] == [
        (2, "코", "케이뱅크", BoundaryKind.START),
        (3, "코", "케이뱅크", BoundaryKind.END),
    ]
    # Both entries resolve through the name-only link key
    assert [e.source_ref for e in parsed.events] == ["20260220000111", "20260220000111"]


def test_build_link_refs():
    soup = calendar_dom.make_soup(ANCHOR_PAGE)
    assert calendar_dom.build_link_refs(soup) == {
        "코 케이뱅크 [시작]": "20260220000111",
        "코 케이뱅크 [종료]": "20260220000111",
    }


def test_empty_page_yields_no_events():
    parsed = calendar_dom.parse_calendar_month("", 2026, 3)
    assert parsed.events == []
    assert parsed.strategy == "tokens"


def test_anchor_with_styled_market_code_matches():
    html = """
    <table><tr><td><b>5</b><div>
      <a href="/dsaf001/main.do?rcpNo=20260220000111">코 케이뱅크 [시작]</a>
      <a href="/dsaf001/main.do?rcpNo=20260220000222"><span class="mk">유</span> 에이비씨 [시작]</a>
      <a href="/dsaf001/main.do?rcpNo=20260220000333"><span>넥 디이에프 [종료]</span></a>
    </div></td></tr></table>
    """
    parsed = calendar_dom.parse_calendar_month(html, 2026, 3)

    assert parsed.strategy == "anchor"
    assert parsed.anchors_matched == 3
    assert [(e.date.day, e.market_code, e.company_name, e.source_ref) for e in parsed.events] == [
        (5, "코", "케이뱅크", "20260220000111"),
        (5, "유", "에이비씨", "20260220000222"),
        (5, "넥", "디이에프", "20260220000333"),
    ]


def test_entry_needs_space_after_market_code():
    soup = calendar_dom.make_soup(
        "<table><tr><td>3<div><a>코스모 [시작]</a><a>코 스모 [시작]</a></div></td></tr></table>"
    )
    leaves = calendar_dom.find_event_leaves(soup)
    assert [leaf.get_text() for leaf in leaves] == ["코 스모 [시작]"]
