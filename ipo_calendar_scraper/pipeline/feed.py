"""Assemble the persisted feed envelope from finalised records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional

import pytz

from ipo_calendar_scraper import config
from ipo_calendar_scraper.scraper.models import BrokerMeta, OfferingRecord


def attach_meta(
    records: Iterable[OfferingRecord],
    meta_map: Mapping[str, BrokerMeta],
) -> List[OfferingRecord]:
    """Copy operator annotations onto records; unknown companies get empty fields."""
    out = []
    for record in records:
        meta = meta_map.get(record.company_name)
        record.broker_meta = BrokerMeta(meta.brokers, meta.equal_min, meta.note) if meta else BrokerMeta()
        out.append(record)
    return out


def record_to_item(record: OfferingRecord) -> dict:
    item = {
        "corp_name": record.company_name,
        "market_short": record.market_code,
        "market": record.market_label,
        "sbd_start": record.subscription_start.isoformat(),
        "sbd_end": record.subscription_end.isoformat(),
    }
    if record.source_ref:
        item["rcp_no"] = record.source_ref
    item["offer_type"] = record.offer_type.value
    item["brokers"] = record.broker_meta.brokers
    item["equalMin"] = record.broker_meta.equal_min
    item["note"] = record.broker_meta.note
    return item


def assemble_feed(
    records: Iterable[OfferingRecord],
    start: date,
    end: date,
    *,
    source_label: str,
    mode: str,
    excluded_listed: int,
    excluded_non_ipo: int,
    generated_at: Optional[datetime] = None,
    diagnostics: Optional[dict] = None,
) -> dict:
    """Wrap the item list with run metadata; ``count`` always equals ``len(items)``."""
    generated_at = generated_at or datetime.now(pytz.timezone(config.TZ_DISPLAY))
    items = [record_to_item(r) for r in records]
    feed = {
        "ok": True,
        "source": source_label,
        "range": {"start": start.isoformat(), "end": end.isoformat()},
        "mode": mode,
        "last_updated_kst": generated_at.date().isoformat(),
        "generated_at": generated_at.isoformat(timespec="seconds"),
        "count": len(items),
        "excluded_listed": excluded_listed,
        "excluded_non_ipo": excluded_non_ipo,
        "items": items,
    }
    if diagnostics is not None:
        feed["diagnostics"] = diagnostics
    return feed
