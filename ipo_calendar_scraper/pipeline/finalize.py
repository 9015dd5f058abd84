"""Window filtering, per-company dedup and ordering of offering records."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List

from ipo_calendar_scraper.scraper.models import OfferingRecord


def overlaps_window(record: OfferingRecord, start: date, end: date) -> bool:
    if record.subscription_start is None or record.subscription_end is None:
        return False
    return record.subscription_end >= start and record.subscription_start <= end


def dedupe_keep_earliest(records: Iterable[OfferingRecord]) -> List[OfferingRecord]:
    by_name: Dict[str, OfferingRecord] = {}
    for record in records:
        prev = by_name.get(record.company_name)
        if prev is None or _start_key(record) < _start_key(prev):
            by_name[record.company_name] = record
    return list(by_name.values())


def _start_key(record: OfferingRecord) -> tuple:
    # Absent start sorts last
    start = record.subscription_start
    return (start is None, start or date.max)


def sort_records(records: Iterable[OfferingRecord]) -> List[OfferingRecord]:
    return sorted(records, key=lambda r: (*_start_key(r), r.company_name))


def finalize_records(
    records: Iterable[OfferingRecord],
    start: date,
    end: date,
) -> List[OfferingRecord]:
    """Keep records overlapping [start, end], one per company, date-ordered."""
    in_window = [r for r in records if overlaps_window(r, start, end)]
    return sort_records(dedupe_keep_earliest(in_window))
