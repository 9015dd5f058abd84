"""Listed-company name registry built from the KIND corporate list download."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests
from bs4 import BeautifulSoup

from ipo_calendar_scraper import config
from ipo_calendar_scraper.scraper import parse_utils

logger = logging.getLogger(__name__)


class RegistrySanityError(RuntimeError):
    """The listed-name set is too small to trust as an exclusion filter."""


def parse_listed_names(content: bytes, encoding: str = config.KIND_LIST_ENCODING) -> set[str]:
    """Company names from the first cell of every table row."""
    html = content.decode(encoding, errors="replace")
    soup = BeautifulSoup(html, "lxml")
    names: set[str] = set()
    for tr in soup.select("table tr"):
        cell = tr.find("td")
        if cell is None:
            continue
        name = parse_utils.normalize_name(cell.get_text(" "))
        if name:
            names.add(name)
    return names


def check_sanity(names: set[str], minimum: int = config.REGISTRY_MIN_NAMES) -> set[str]:
    if len(names) < minimum:
        raise RegistrySanityError(
            f"Listed-company set too small ({len(names)} < {minimum}); "
            "the registry download was probably blocked or truncated."
        )
    return names


def fetch_listed_names(
    session: Optional[requests.Session] = None,
    timeout: float = config.HTTP_TIMEOUT,
    minimum: int = config.REGISTRY_MIN_NAMES,
) -> set[str]:
    """Download and parse the KIND listed-company list.

    Network failures and implausibly small results both raise; the run cannot
    tell IPOs from secondary offerings without this set.
    """
    session = session or requests.Session()
    try:
        response = session.get(
            config.KIND_LIST_URL,
            headers={"User-Agent": config.REQUEST_USER_AGENT},
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise RegistrySanityError(f"Listed-company download failed: {e}") from e

    names = check_sanity(parse_listed_names(response.content), minimum)
    logger.info(f"Loaded {len(names)} listed company names from KIND")
    return names


def load_listed_names_file(path: Path, minimum: int = config.REGISTRY_MIN_NAMES) -> set[str]:
    """Parse a previously downloaded KIND list from disk."""
    names = check_sanity(parse_listed_names(Path(path).read_bytes()), minimum)
    logger.info(f"Loaded {len(names)} listed company names from {path}")
    return names
