"""Process-local cache for report payloads.

Reports are keyed by a prefix plus their date range. Anything that moves
money or stock (checkout, sale edits, shift close, imports) calls
``invalidate_reports`` so the next read is rebuilt from the database.
"""

import time
from typing import Any, Optional

from breadpos.core.logging import get_logger

logger = get_logger(__name__)

REPORT_PREFIX = "report"
DEFAULT_TTL_SECONDS = 300

# key -> (monotonic deadline, payload)
_entries: dict[str, tuple[float, Any]] = {}


def make_cache_key(prefix: str, **params) -> str:
    """Build a stable key, e.g. ``report_daily|date_from:2025-03-01|date_to:2025-03-07``."""
    return "|".join([prefix, *(f"{name}:{params[name]}" for name in sorted(params))])


def get_cache(key: str) -> Optional[Any]:
    entry = _entries.get(key)
    if entry is None:
        return None
    deadline, payload = entry
    if time.monotonic() >= deadline:
        _entries.pop(key, None)
        return None
    return payload


def set_cache(key: str, value: Any, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
    _entries[key] = (time.monotonic() + ttl_seconds, value)


def clear_cache(pattern: Optional[str] = None) -> int:
    """Drop entries whose key contains ``pattern`` (all entries when None).

    Returns how many entries were removed.
    """
    if pattern is None:
        dropped = len(_entries)
        _entries.clear()
        return dropped

    stale = [key for key in _entries if pattern in key]
    for key in stale:
        del _entries[key]
    return len(stale)


def invalidate_reports(reason: str) -> None:
    """Forget every cached report after a write that changes totals."""
    dropped = clear_cache(REPORT_PREFIX)
    if dropped:
        logger.debug("cache.reports_invalidated", reason=reason, dropped=dropped)
