"""Tests for registry exclusion, offer classification and the mode filter."""

from __future__ import annotations

from datetime import date

import pytest
import requests

from ipo_calendar_scraper.filters import event_filters
from ipo_calendar_scraper.scraper.filings import FilingTextError
from ipo_calendar_scraper.scraper.models import OfferingRecord, OfferType


def _record(name, ref=None, offer_type=OfferType.UNKNOWN):
    return OfferingRecord(
        name, "코", "KOSDAQ", date(2026, 3, 2), date(2026, 3, 3), ref, offer_type
    )


def test_exclude_listed_counts_removed_records():
    records = [_record("삼성전자"), _record("케이뱅크"), _record("LG 화학")]
    kept, excluded = event_filters.exclude_listed(records, {"삼성전자", "LG 화학"})
    assert [r.company_name for r in kept] == ["케이뱅크"]
    assert excluded == 2


def test_exclude_listed_with_empty_registry_keeps_everything():
    records = [_record("가"), _record("나")]
    kept, excluded = event_filters.exclude_listed(records, set())
    assert kept == records
    assert excluded == 0


def test_assign_buckets_reports_every_match():
    text = "유상증자 결정 및 코스닥시장 상장 예정"
    assert event_filters.assign_buckets(text) == ["rights", "ipo"]
    assert event_filters.assign_buckets("") == []


def test_rights_keywords_take_priority():
    assert event_filters.classify_offer_text("주주배정 후 실권주 일반공모, 신규상장") is OfferType.RIGHTS_OR_CAPITAL_INCREASE
    assert event_filters.classify_offer_text("코스닥시장 상장 예정 공모") is OfferType.IPO
    assert event_filters.classify_offer_text("채무증권 발행") is OfferType.UNKNOWN


def test_custom_buckets():
    buckets = [event_filters.KeywordBucket("spac", ["기업인수목적"], OfferType.IPO)]
    assert event_filters.classify_offer_text("기업인수목적회사", buckets) is OfferType.IPO


def test_classifier_fetches_each_reference_once():
    calls = []

    def fetch(rcp_no):
        calls.append(rcp_no)
        return "신규상장 공모"

    classifier = event_filters.OfferClassifier(fetch)
    first = classifier.classify(_record("가", "20260220000111"))
    second = classifier.classify(_record("나", "20260220000111"))

    assert calls == ["20260220000111"]
    assert first.offer_type is OfferType.IPO
    assert second.offer_type is OfferType.IPO
    assert [entry["corp_name"] for entry in classifier.log] == ["가", "나"]


@pytest.mark.parametrize("error", [requests.ConnectionError("down"), FilingTextError("no doc")])
def test_classifier_failure_is_unknown(error):
    def fetch(rcp_no):
        raise error

    classifier = event_filters.OfferClassifier(fetch)
    record = classifier.classify(_record("가", "20260220000111"))

    assert record.offer_type is OfferType.UNKNOWN
    assert classifier.log[0]["reason"].startswith("filing lookup failed")


def test_classifier_without_reference_or_fetcher():
    classifier = event_filters.OfferClassifier(lambda rcp_no: "신규상장")
    assert classifier.classify(_record("가")).offer_type is OfferType.UNKNOWN
    assert classifier.log[-1]["reason"] == "no filing reference"

    disabled = event_filters.OfferClassifier(None)
    assert disabled.classify(_record("나", "20260220000111")).offer_type is OfferType.UNKNOWN
    assert disabled.log[-1]["reason"] == "classification disabled"


def test_mode_filter():
    records = [
        _record("ipo", offer_type=OfferType.IPO),
        _record("rights", offer_type=OfferType.RIGHTS_OR_CAPITAL_INCREASE),
        _record("unknown", offer_type=OfferType.UNKNOWN),
    ]

    kept, excluded = event_filters.filter_by_mode(records, "ipo")
    assert [r.company_name for r in kept] == ["ipo"] and excluded == 2

    kept, excluded = event_filters.filter_by_mode(records, "exrights")
    assert [r.company_name for r in kept] == ["ipo", "unknown"] and excluded == 1

    kept, excluded = event_filters.filter_by_mode(records, "all")
    assert len(kept) == 3 and excluded == 0


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        event_filters.keep_for_mode(OfferType.IPO, "bonds")
