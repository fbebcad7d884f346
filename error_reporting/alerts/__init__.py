"""
Notification throttling and deduplication.
"""

from .throttle_store import (
    FileThrottleStore,
    TrackingRecord,
    STATE_NEW,
    STATE_THROTTLED,
    STATE_RATE_LIMITED,
    STATE_ELIGIBLE,
)

__all__ = [
    'FileThrottleStore',
    'TrackingRecord',
    'STATE_NEW',
    'STATE_THROTTLED',
    'STATE_RATE_LIMITED',
    'STATE_ELIGIBLE',
]
