"""Shared data models for the subscription-calendar scraper."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Protocol


class BoundaryKind(Enum):
    """Which end of a subscription window a calendar entry marks."""
    START = "시작"
    END = "종료"


class OfferType(Enum):
    """Classification of an offering based on its filing text."""
    IPO = "IPO"
    RIGHTS_OR_CAPITAL_INCREASE = "RIGHTS_OR_CAPITAL_INCREASE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class RawEvent:
    """One (day, company, market, boundary) sighting on a calendar page."""

    date: date
    market_code: str
    company_name: str
    boundary_kind: BoundaryKind
    source_ref: Optional[str] = None


@dataclass(slots=True)
class BrokerMeta:
    """Operator-maintained annotation for one company."""

    brokers: str = ""
    equal_min: str = ""
    note: str = ""


@dataclass(slots=True)
class OfferingRecord:
    """Company-level subscription window merged from raw events."""

    company_name: str
    market_code: str
    market_label: str
    subscription_start: Optional[date] = None
    subscription_end: Optional[date] = None
    source_ref: Optional[str] = None
    offer_type: OfferType = OfferType.UNKNOWN
    broker_meta: BrokerMeta = field(default_factory=BrokerMeta)


@dataclass(slots=True)
class PageFetch:
    """Raw bytes of one calendar page plus transport details."""

    content: bytes
    content_type: str = ""
    status: Optional[int] = None


@dataclass(slots=True)
class MonthParse:
    """Events extracted from one month page and how they were found."""

    events: list[RawEvent]
    strategy: str
    anchors_total: int = 0
    anchors_matched: int = 0


class PageFetchError(RuntimeError):
    """A calendar page could not be fetched (timeout, HTTP error, network)."""


class PageSource(Protocol):
    """Anything that can produce the raw bytes of one calendar month."""

    def get_month_html(self, year: int, month: int) -> PageFetch:
        ...
