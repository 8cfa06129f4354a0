# File: src/breadpos/utils/datetime.py
"""Timezone-aware datetime utilities for the bakery's local time."""

import os
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

# Philippines: UTC+8 year-round, no DST
APP_TIMEZONE = ZoneInfo(os.getenv("APP_TIMEZONE", "Asia/Manila"))


def now_local() -> datetime:
    """Get current datetime in the bakery's timezone."""
    return datetime.now(APP_TIMEZONE)


def today_local() -> date:
    """Get today's date in the bakery's timezone."""
    return now_local().date()


def today_key() -> str:
    """Today's day-key (YYYY-MM-DD)."""
    return date_key(today_local())


def date_key(value: date) -> str:
    """Canonical day-key for a date."""
    return value.strftime("%Y-%m-%d")


def compact_date(value: date) -> str:
    """YYYYMMDD form used in human-readable sale numbers."""
    return value.strftime("%Y%m%d")


def now_utc() -> datetime:
    """Get current UTC datetime as NAIVE for database storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
