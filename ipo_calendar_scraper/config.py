"""Configuration constants for the DART subscription-calendar IPO scraper."""

from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Remote endpoints
# ---------------------------------------------------------------------------

DART_BASE_URL = "https://dart.fss.or.kr"
# Subscription calendar (equity securities)
CALENDAR_URL = f"{DART_BASE_URL}/dsac008/main.do"
FILING_MAIN_URL = f"{DART_BASE_URL}/dsaf001/main.do"
FILING_VIEWER_URL = f"{DART_BASE_URL}/report/viewer.do"

# KIND listed-company list download (served as an EUC-KR HTML table)
KIND_LIST_URL = "https://kind.krx.co.kr/corpgeneral/corpList.do?method=download"
KIND_LIST_ENCODING = "cp949"

TZ_DISPLAY = "Asia/Seoul"

# ---------------------------------------------------------------------------
# HTTP settings
# ---------------------------------------------------------------------------

REQUEST_USER_AGENT = "Mozilla/5.0 (compatible; ipo-calendar-bot/1.0)"
REQUEST_HEADERS = {
    "User-Agent": REQUEST_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.7,en;q=0.6",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

HTTP_TIMEOUT = float(os.getenv("IPO_CALENDAR_TIMEOUT", "25"))
# Seconds between calendar month requests / between filing lookups
MONTH_DELAY = float(os.getenv("IPO_CALENDAR_MONTH_DELAY", "0.9"))
FILING_DELAY = float(os.getenv("IPO_CALENDAR_FILING_DELAY", "0.4"))

# Default Playwright settings
PLAYWRIGHT_HEADLESS = True
PLAYWRIGHT_VIEWPORT = {"width": 1440, "height": 900}
PLAYWRIGHT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/123.0.0.0 Safari/537.36"
)
PLAYWRIGHT_LOCALE = "ko-KR"

# ---------------------------------------------------------------------------
# Calendar vocabulary
# ---------------------------------------------------------------------------

MARKET_LABELS = {
    "유": "KOSPI",
    "코": "KOSDAQ",
    "넥": "KONEX",
    "기": "ETC",
}
UNKNOWN_MARKET_LABEL = "UNKNOWN"

BOUNDARY_START_WORD = "시작"
BOUNDARY_END_WORD = "종료"

# Candidate decodings for calendar pages; the server mixes the two freely
DEFAULT_CHARSET = "utf-8"
ALTERNATE_CHARSET = "euc-kr"

# ---------------------------------------------------------------------------
# Classification vocabulary
# ---------------------------------------------------------------------------

RIGHTS_KEYWORDS = (
    "유상증자",
    "주주배정",
    "실권주",
    "신주인수권",
    "제3자배정",
    "제3자 배정",
    "일반공모(유상증자)",
    "주주우선공모",
)

IPO_KEYWORDS = (
    "신규상장",
    "상장예정",
    "상장 예정",
    "코스닥시장 상장",
    "유가증권시장 상장",
    "상장심사",
    "예비상장",
    "대표주관회사",
    "공모가",
    "기관투자자 수요예측",
)

# ---------------------------------------------------------------------------
# Run settings
# ---------------------------------------------------------------------------

# Fewer listed names than this means the registry download was blocked or broken
REGISTRY_MIN_NAMES = int(os.getenv("IPO_CALENDAR_REGISTRY_MIN", "500"))

DEFAULT_WINDOW_DAYS = 45
OFFER_MODES = ("ipo", "exrights", "all")
DEFAULT_OFFER_MODE = "exrights"

MAX_CLASSIFY_DIAGNOSTICS = 80

SOURCE_LABELS = {
    "http": "dart-dsac008(calendar) + kind-listed-filter + classify-by-filing(viewer.do)",
    "browser": "dart-dsac008(calendar, rendered) + kind-listed-filter + classify-by-filing(viewer.do)",
}

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

OUTPUT_PATH = Path(os.getenv("IPO_CALENDAR_OUT", "docs/data/ipo.json"))
META_PATH = Path(os.getenv("IPO_CALENDAR_META", "docs/data/ipo_meta_manual.json"))
