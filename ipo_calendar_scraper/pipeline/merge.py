"""Fold raw calendar sightings into one record per company."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List

from ipo_calendar_scraper.scraper import parse_utils
from ipo_calendar_scraper.scraper.models import BoundaryKind, OfferingRecord, RawEvent

logger = logging.getLogger(__name__)


def filter_events_in_range(events: Iterable[RawEvent], start: date, end: date) -> List[RawEvent]:
    return [e for e in events if start <= e.date <= end]


def merge_events(events: Iterable[RawEvent]) -> Dict[str, OfferingRecord]:
    """Merge events keyed by company name.

    Conflicting sightings resolve to the earliest START and the latest END.
    A missing boundary is imputed from the other one.
    """
    records: Dict[str, OfferingRecord] = {}
    for event in events:
        key = parse_utils.normalize_name(event.company_name)
        if not key:
            continue
        record = records.get(key)
        if record is None:
            record = OfferingRecord(
                company_name=key,
                market_code=event.market_code,
                market_label=parse_utils.market_label(event.market_code),
            )
            records[key] = record
        if record.source_ref is None and event.source_ref:
            record.source_ref = event.source_ref

        if event.boundary_kind is BoundaryKind.START:
            if record.subscription_start is None or event.date < record.subscription_start:
                record.subscription_start = event.date
        else:
            if record.subscription_end is None or event.date > record.subscription_end:
                record.subscription_end = event.date

    merged: Dict[str, OfferingRecord] = {}
    for key, record in records.items():
        if record.subscription_start is None and record.subscription_end is None:
            logger.warning(f"Dropping {key}: no subscription boundary observed")
            continue
        if record.subscription_end is None:
            record.subscription_end = record.subscription_start
        if record.subscription_start is None:
            record.subscription_start = record.subscription_end
        merged[key] = record
    return merged
