"""Registry exclusion and keyword-based offering classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import requests

from ipo_calendar_scraper import config
from ipo_calendar_scraper.scraper import parse_utils
from ipo_calendar_scraper.scraper.filings import FilingTextError
from ipo_calendar_scraper.scraper.models import OfferingRecord, OfferType

logger = logging.getLogger(__name__)


@dataclass
class KeywordBucket:
    name: str
    keywords: List[str]
    offer_type: OfferType


# Order is priority: rights-issue evidence outranks listing evidence
DEFAULT_BUCKETS = [
    KeywordBucket("rights", list(config.RIGHTS_KEYWORDS), OfferType.RIGHTS_OR_CAPITAL_INCREASE),
    KeywordBucket("ipo", list(config.IPO_KEYWORDS), OfferType.IPO),
]


def assign_buckets(
    text: str,
    buckets: Iterable[KeywordBucket] = DEFAULT_BUCKETS,
) -> List[str]:
    """Return the names of every bucket with at least one keyword in `text`."""
    text = text or ""
    return [
        bucket.name
        for bucket in buckets
        if any(keyword in text for keyword in bucket.keywords)
    ]


def classify_offer_text(
    text: str,
    buckets: Sequence[KeywordBucket] = DEFAULT_BUCKETS,
) -> OfferType:
    """First matching bucket wins; no match is UNKNOWN."""
    matched = set(assign_buckets(text, buckets))
    for bucket in buckets:
        if bucket.name in matched:
            return bucket.offer_type
    return OfferType.UNKNOWN


def exclude_listed(
    records: Iterable[OfferingRecord],
    listed_names: set[str],
) -> tuple[List[OfferingRecord], int]:
    """Drop records whose normalised name is already listed.

    Name-only matching: a same-named unrelated entity is a false exclusion and
    a differently rendered legal name slips through.
    """
    kept: List[OfferingRecord] = []
    excluded = 0
    for record in records:
        if parse_utils.normalize_name(record.company_name) in listed_names:
            excluded += 1
            logger.debug(f"Excluding already listed company {record.company_name}")
            continue
        kept.append(record)
    return kept, excluded


@dataclass
class Classification:
    offer_type: OfferType
    reason: str


@dataclass
class OfferClassifier:
    """Classify records by their filing text, fetching each reference once.

    `fetch_text` raises on failure; any failure classifies as UNKNOWN. The
    cache belongs to one run and is discarded with it.
    """

    fetch_text: Optional[Callable[[str], str]]
    buckets: Sequence[KeywordBucket] = field(default_factory=lambda: list(DEFAULT_BUCKETS))
    cache: Dict[str, Classification] = field(default_factory=dict)
    log: List[dict] = field(default_factory=list)

    def classify_ref(self, rcp_no: str) -> Classification:
        if rcp_no in self.cache:
            return self.cache[rcp_no]
        try:
            text = self.fetch_text(rcp_no)
        except (requests.RequestException, FilingTextError) as e:
            logger.warning(f"Filing lookup failed for rcpNo={rcp_no}: {e}")
            result = Classification(OfferType.UNKNOWN, f"filing lookup failed: {e}")
        else:
            offer_type = classify_offer_text(text, self.buckets)
            if offer_type is OfferType.UNKNOWN:
                reason = "no decisive keywords"
            else:
                reason = f"matched {offer_type.value} keywords"
            result = Classification(offer_type, reason)
        self.cache[rcp_no] = result
        return result

    def classify(self, record: OfferingRecord) -> OfferingRecord:
        if not record.source_ref:
            result = Classification(OfferType.UNKNOWN, "no filing reference")
        elif self.fetch_text is None:
            result = Classification(OfferType.UNKNOWN, "classification disabled")
        else:
            result = self.classify_ref(record.source_ref)
        record.offer_type = result.offer_type
        self.log.append(
            {
                "corp_name": record.company_name,
                "rcp_no": record.source_ref,
                "offer_type": result.offer_type.value,
                "reason": result.reason,
            }
        )
        return record


def keep_for_mode(offer_type: OfferType, mode: str) -> bool:
    """Whether an offer type survives the operator-selected mode."""
    if mode == "all":
        return True
    if mode == "ipo":
        return offer_type is OfferType.IPO
    if mode == "exrights":
        return offer_type is not OfferType.RIGHTS_OR_CAPITAL_INCREASE
    raise ValueError(f"Unsupported offer mode: {mode}")


def filter_by_mode(
    records: Iterable[OfferingRecord],
    mode: str = config.DEFAULT_OFFER_MODE,
) -> tuple[List[OfferingRecord], int]:
    kept: List[OfferingRecord] = []
    excluded = 0
    for record in records:
        if keep_for_mode(record.offer_type, mode):
            kept.append(record)
        else:
            excluded += 1
    return kept, excluded
