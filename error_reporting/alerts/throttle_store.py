"""
File: error_reporting/alerts/throttle_store.py

File-backed throttling and deduplication of error notifications.

One JSON tracking record per error hash:
    <tracking_dir>/<hash[:2]>/error_<hash>

Decision per hash (should_notify):
    NEW           no record yet                                  -> allow
    THROTTLED     notified less than throttle_period minutes ago -> deny
    RATE_LIMITED  notification_count >= max and the period has
                  not yet elapsed                                -> deny
    ELIGIBLE      otherwise                                      -> allow

Failure policy:
    - read failures in should_notify allow the notification (fail-open)
    - write failures in record_error / mark_as_notified are logged and
      dropped; bookkeeping is best-effort

Concurrent identical errors may race on the read-modify-write of a record.
Lost updates only weaken spam reduction, so no locking is done.

Usage:
    from error_reporting.alerts import FileThrottleStore

    store = FileThrottleStore('var/error_reporting', throttle_period=60,
                              max_notifications_per_period=5)
    store.record_error(report.hash, report)
    if store.should_notify(report.hash):
        ...
        store.mark_as_notified(report.hash)
"""

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass, asdict, fields
from typing import Any, Callable, Dict, Optional

from error_reporting.exceptions import ThrottleStoreError

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000

STATE_NEW = 'new'
STATE_THROTTLED = 'throttled'
STATE_RATE_LIMITED = 'rate_limited'
STATE_ELIGIBLE = 'eligible'


@dataclass
class TrackingRecord:
    """Persistent per-hash state. Timestamps are Unix seconds."""
    error_hash: str
    error_type: str = ''
    error_message: str = ''
    error_file: str = ''
    error_line: int = 0
    severity: str = ''
    url: str = ''
    occurrence_count: int = 0
    first_seen_at: int = 0
    last_seen_at: int = 0
    notification_count: int = 0
    last_notified_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrackingRecord':
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FileThrottleStore:
    """Per-hash throttle state machine persisted as JSON files."""

    def __init__(
        self,
        tracking_dir: str,
        throttle_period: int = 60,
        max_notifications_per_period: int = 5,
        clock: Callable[[], float] = time.time,
    ):
        self.tracking_dir = tracking_dir
        self.throttle_period = throttle_period  # minutes
        self.max_notifications_per_period = max_notifications_per_period
        self.clock = clock

    def _get_record_path(self, error_hash: str) -> str:
        return os.path.join(self.tracking_dir, error_hash[:2], f"error_{error_hash}")

    def _load_record(self, error_hash: str) -> Optional[TrackingRecord]:
        """Load the tracking record; None if the hash was never seen."""
        path = self._get_record_path(error_hash)
        if not os.path.exists(path):
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected JSON object, got {type(data).__name__}")
            return TrackingRecord.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            raise ThrottleStoreError(f"Cannot read tracking record {path}: {e}") from e

    def _save_record(self, record: TrackingRecord):
        path = self._get_record_path(record.error_hash)
        directory = os.path.dirname(path)

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp_')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(record.to_dict(), f, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise ThrottleStoreError(f"Cannot write tracking record {path}: {e}") from e

    def get_record(self, error_hash: str) -> Optional[TrackingRecord]:
        """Current record for a hash, or None if missing or unreadable."""
        try:
            return self._load_record(error_hash)
        except ThrottleStoreError as e:
            logger.debug(str(e))
            return None

    def get_state(self, error_hash: str) -> str:
        """Classify the hash as new, throttled, rate_limited or eligible."""
        record = self._load_record(error_hash)
        if record is None:
            return STATE_NEW

        now = self.clock()
        last_notified_at = record.last_notified_at
        since = last_notified_at if last_notified_at else record.first_seen_at
        elapsed = now - since
        throttle_window = self.throttle_period * 60

        if last_notified_at and elapsed < throttle_window:
            return STATE_THROTTLED

        # Compares hours against period/60; kept as the original two-step check
        elapsed_hours = elapsed / 3600
        if (record.notification_count >= self.max_notifications_per_period
                and elapsed_hours < self.throttle_period / 60):
            return STATE_RATE_LIMITED

        return STATE_ELIGIBLE

    def should_notify(self, error_hash: str) -> bool:
        try:
            state = self.get_state(error_hash)
        except Exception as e:
            logger.warning(f"Throttle check failed for {error_hash[:12]}, allowing notification: {e}")
            return True

        if state in (STATE_THROTTLED, STATE_RATE_LIMITED):
            logger.debug(f"Notification for {error_hash[:12]} suppressed ({state})")
            return False
        return True

    def record_error(self, error_hash: str, report=None):
        """Count an occurrence. Called for every error, notified or not."""
        try:
            now = int(self.clock())
            record = self._load_record(error_hash)

            if record is None:
                record = TrackingRecord(error_hash=error_hash, first_seen_at=now)
                if report is not None:
                    record.error_type = report.error.type
                    record.error_message = report.error.message[:MAX_MESSAGE_LENGTH]
                    record.error_file = report.error.file
                    record.error_line = report.error.line
                    record.severity = report.error.severity

            record.occurrence_count += 1
            record.last_seen_at = now
            if report is not None and report.request.url:
                record.url = report.request.url

            self._save_record(record)
        except Exception as e:
            logger.debug(f"Failed to record occurrence of {error_hash[:12]}: {e}")

    def mark_as_notified(self, error_hash: str):
        """Count a dispatched notification. Call only after a handler succeeded."""
        try:
            now = int(self.clock())
            record = self._load_record(error_hash)
            if record is None:
                record = TrackingRecord(
                    error_hash=error_hash,
                    occurrence_count=1,
                    first_seen_at=now,
                    last_seen_at=now,
                )

            record.notification_count += 1
            record.last_notified_at = now
            self._save_record(record)
        except Exception as e:
            logger.debug(f"Failed to mark {error_hash[:12]} as notified: {e}")
