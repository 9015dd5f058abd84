"""Loader for the operator-maintained broker annotation file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from ipo_calendar_scraper.scraper import parse_utils
from ipo_calendar_scraper.scraper.models import BrokerMeta

logger = logging.getLogger(__name__)


def load_meta_map(path: Optional[Path]) -> Dict[str, BrokerMeta]:
    """Read ``{company: {brokers, equalMin, note}}``; a missing or broken file yields {}.

    The file is optional and hand-edited, so a bad file never aborts a run.
    """
    if path is None or not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable meta file {path}: {e}")
        return {}
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring meta file {path}: expected an object at the top level")
        return {}

    meta: Dict[str, BrokerMeta] = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        meta[parse_utils.normalize_name(name)] = BrokerMeta(
            brokers=str(entry.get("brokers") or ""),
            equal_min=str(entry.get("equalMin") or ""),
            note=str(entry.get("note") or ""),
        )
    logger.info(f"Loaded broker meta for {len(meta)} companies from {path}")
    return meta
