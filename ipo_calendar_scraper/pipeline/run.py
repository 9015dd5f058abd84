"""One end-to-end pipeline run: months → events → records → feed."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional

from ipo_calendar_scraper import config
from ipo_calendar_scraper.filters import event_filters
from ipo_calendar_scraper.pipeline import feed as feed_builder
from ipo_calendar_scraper.pipeline.finalize import finalize_records
from ipo_calendar_scraper.pipeline.merge import filter_events_in_range, merge_events
from ipo_calendar_scraper.scraper import calendar_dom, parse_utils
from ipo_calendar_scraper.scraper.encoding import pick_best_decoding
from ipo_calendar_scraper.scraper.models import (
    BrokerMeta,
    OfferingRecord,
    PageFetchError,
    PageSource,
    RawEvent,
)

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    months: List[str] = field(default_factory=list)
    total_events: int = 0
    ranged_events: int = 0
    merged_items: int = 0
    excluded_listed: int = 0
    excluded_non_ipo: int = 0
    output_items: int = 0


class PipelineRun:
    """State for a single run.

    The accumulated events, per-month diagnostics and the classifier's
    reference cache live here and are dropped with the run.
    """

    def __init__(
        self,
        source: PageSource,
        *,
        listed_names: Optional[set[str]] = None,
        meta_map: Optional[Mapping[str, BrokerMeta]] = None,
        fetch_filing_text: Optional[Callable[[str], str]] = None,
        mode: str = config.DEFAULT_OFFER_MODE,
        source_label: str = config.SOURCE_LABELS["http"],
    ):
        if mode not in config.OFFER_MODES:
            raise ValueError(f"Unsupported offer mode: {mode}")
        self.source = source
        self.listed_names = listed_names or set()
        self.meta_map = meta_map or {}
        self.classifier = event_filters.OfferClassifier(fetch_filing_text)
        self.mode = mode
        self.source_label = source_label
        self.events: List[RawEvent] = []
        self.month_diagnostics: List[Dict] = []
        self.stats = RunStats()

    def collect_month(self, year: int, month: int) -> List[RawEvent]:
        """Fetch, decode and parse one month; failures become diagnostics."""
        label = f"{year}-{month:02d}"
        self.stats.months.append(label)
        diag: Dict = {"year": year, "month": month, "ok": False}
        self.month_diagnostics.append(diag)

        try:
            page = self.source.get_month_html(year, month)
        except PageFetchError as e:
            logger.warning(f"{label}: fetch failed: {e}")
            diag["reason"] = str(e)
            return []

        decoded = pick_best_decoding(page.content, page.content_type)
        parsed = calendar_dom.parse_calendar_month(decoded.text, year, month)
        diag.update(
            {
                "ok": True,
                "status": page.status,
                "bytes": len(page.content),
                "content_type": page.content_type,
                "decoded_charset": decoded.charset,
                "event_score": decoded.score,
                "alt_score": decoded.alt_score,
                "strategy": parsed.strategy,
                "anchors_total": parsed.anchors_total,
                "anchors_matched": parsed.anchors_matched,
                "events": len(parsed.events),
            }
        )
        if not parsed.events:
            logger.warning(f"{label}: no calendar events extracted (charset={decoded.charset})")
        self.events.extend(parsed.events)
        return parsed.events

    def collect(self, start: date, end: date) -> List[RawEvent]:
        for year, month in parse_utils.iter_months(start, end):
            self.collect_month(year, month)
        self.stats.total_events = len(self.events)
        return self.events

    def build_records(self, events: List[RawEvent], start: date, end: date) -> List[OfferingRecord]:
        """Range filter → merge → registry filter → classify/mode → finalize."""
        ranged = filter_events_in_range(events, start, end)
        self.stats.ranged_events = len(ranged)

        merged = list(merge_events(ranged).values())
        self.stats.merged_items = len(merged)

        unlisted, self.stats.excluded_listed = event_filters.exclude_listed(merged, self.listed_names)

        classified = [self.classifier.classify(r) for r in unlisted]
        kept, self.stats.excluded_non_ipo = event_filters.filter_by_mode(classified, self.mode)

        records = finalize_records(kept, start, end)
        self.stats.output_items = len(records)
        return feed_builder.attach_meta(records, self.meta_map)

    def diagnostics(self) -> dict:
        return {
            "months": self.month_diagnostics,
            "classify": self.classifier.log[: config.MAX_CLASSIFY_DIAGNOSTICS],
        }

    def run(self, start: date, end: date) -> dict:
        """Execute the full run and return the feed envelope."""
        events = self.collect(start, end)
        records = self.build_records(events, start, end)
        return feed_builder.assemble_feed(
            records,
            start,
            end,
            source_label=self.source_label,
            mode=self.mode,
            excluded_listed=self.stats.excluded_listed,
            excluded_non_ipo=self.stats.excluded_non_ipo,
            diagnostics=self.diagnostics(),
        )
