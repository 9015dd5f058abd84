"""Tests for the token scanner over flattened calendar text."""

from __future__ import annotations

from datetime import date

from ipo_calendar_scraper.scraper import calendar_tokens
from ipo_calendar_scraper.scraper.models import BoundaryKind


def _summary(events):
    return [(e.date.day, e.market_code, e.company_name, e.boundary_kind) for e in events]


def test_tokenize_detaches_glued_brackets():
    assert calendar_tokens.tokenize("코 케이뱅크[시작]") == ["코", "케이뱅크", "[시작]"]
    assert calendar_tokens.tokenize("유 에이 [ 종료 ]") == ["유", "에이", "[", "종료", "]"]


def test_day_marker_consumes_zero_padded_echo():
    assert calendar_tokens.day_marker(["2", "02", "코"], 0) == (2, 2)
    assert calendar_tokens.day_marker(["1", "2"], 0) == (1, 1)
    assert calendar_tokens.day_marker(["2026년"], 0) is None
    assert calendar_tokens.day_marker(["45"], 0) is None


def test_scan_basic_month():
    text = "2026년 3월 일 월 화 1 01 2 02 코 케이뱅크 [시작] 3 03 코 케이뱅크 [종료]"
    events = calendar_tokens.scan_text(text, 2026, 3)

    assert _summary(events) == [
        (2, "코", "케이뱅크", BoundaryKind.START),
        (3, "코", "케이뱅크", BoundaryKind.END),
    ]
    assert events[0].date == date(2026, 3, 2)
    assert events[0].source_ref is None


def test_nothing_before_first_day_marker():
    events = calendar_tokens.scan_text("코 머리말 [시작] 4 04 유 본문 [시작]", 2026, 3)
    assert _summary(events) == [(4, "유", "본문", BoundaryKind.START)]


def test_several_entries_under_one_day():
    text = "9 09 코 에이 바이오 [시작] 유 비 전자 [종료] 넥 씨 [시작]"
    events = calendar_tokens.scan_text(text, 2026, 3)
    assert _summary(events) == [
        (9, "코", "에이 바이오", BoundaryKind.START),
        (9, "유", "비 전자", BoundaryKind.END),
        (9, "넥", "씨", BoundaryKind.START),
    ]


def test_incomplete_entries_are_discarded():
    scanner = calendar_tokens.TokenScanner(2026, 3)
    tokens = calendar_tokens.tokenize("5 05 유 미완성 6 06 코 완성 [종료] 기 끝없음")
    events = scanner.scan(tokens)

    assert _summary(events) == [(6, "코", "완성", BoundaryKind.END)]
    assert scanner.discarded == 2


def test_market_code_restarts_an_open_entry():
    events = calendar_tokens.scan_text("10 10 코 에이 유 비 [시작]", 2026, 3)
    assert _summary(events) == [(10, "유", "비", BoundaryKind.START)]


def test_split_boundary_brackets():
    text = "7 07 기 스플릿 [ 시작 ] 8 08 코 반쪽 [종료 ]"
    events = calendar_tokens.scan_text(text, 2026, 3)
    assert _summary(events) == [
        (7, "기", "스플릿", BoundaryKind.START),
        (8, "코", "반쪽", BoundaryKind.END),
    ]


def test_lone_bracket_without_boundary_word_drops_entry():
    events = calendar_tokens.scan_text("7 07 기 이상한 [ 기타 ] 코 정상 [시작]", 2026, 3)
    assert _summary(events) == [(7, "코", "정상", BoundaryKind.START)]


def test_impossible_date_is_skipped():
    events = calendar_tokens.scan_text("30 30 코 없는날 [시작]", 2026, 2)
    assert events == []


def test_link_refs_attach_filing_reference():
    refs = {
        "코 케이뱅크 [시작]": "20260220000111",
        "에이비씨 [종료]": "20260220000222",
    }
    text = "2 02 코 케이뱅크 [시작] 3 03 유 에이비씨 [종료] 기 무링크 [종료]"
    events = calendar_tokens.scan_text(text, 2026, 3, link_refs=refs)
    assert [e.source_ref for e in events] == ["20260220000111", "20260220000222", None]
