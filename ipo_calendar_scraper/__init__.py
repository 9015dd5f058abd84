"""
IPO subscription calendar scraper.

Scrapes the DART equity subscription calendar month by month, merges the
start/end sightings into one record per company, drops companies already on
the KIND listed-company list and rights issues, and writes a JSON feed for the
calendar/reminder front end.

CLI Usage:
    python -m ipo_calendar_scraper.main --start 2026-03-01 --end 2026-03-31 --mode exrights
"""

__version__ = "0.1.0"
