"""
Invalidation Policy Module

Decides whether the cache belongs to an older news cycle and has to be
wiped before new data lands. A cache is stale when the day of the incoming
index differs from the day of the last recorded sync.
"""

import time
import logging
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Optional

# Configure logging
logger = logging.getLogger(__name__)


class CacheFreshness(str, Enum):
    FRESH = "fresh"
    STALE = "stale"


def calendar_day(timestamp: float, tz: Optional[tzinfo] = None) -> date:
    """Return the calendar day of an epoch timestamp (local time unless tz is given)."""
    return datetime.fromtimestamp(timestamp, tz).date()


def should_invalidate(last_sync_timestamp: Optional[float],
                      new_timestamp: Optional[float] = None,
                      tz: Optional[tzinfo] = None) -> bool:
    """
    Check whether the incoming index belongs to a different day.

    Args:
        last_sync_timestamp: Timestamp of the cached index, or None if never synced
        new_timestamp: Timestamp of the incoming index (defaults to now)
        tz: Timezone for the day comparison (defaults to local time)

    Returns:
        True if the cache must be wiped before the new index is stored
    """
    if last_sync_timestamp is None:
        return False
    if new_timestamp is None:
        new_timestamp = time.time()

    last_day = calendar_day(last_sync_timestamp, tz)
    new_day = calendar_day(new_timestamp, tz)
    if last_day != new_day:
        logger.info(f"New day detected ({last_day.isoformat()} -> {new_day.isoformat()})")
        return True
    return False


def cache_freshness(last_sync_timestamp: Optional[float],
                    new_timestamp: Optional[float] = None,
                    tz: Optional[tzinfo] = None) -> CacheFreshness:
    if should_invalidate(last_sync_timestamp, new_timestamp, tz):
        return CacheFreshness.STALE
    return CacheFreshness.FRESH
