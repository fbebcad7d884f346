"""
File-backed configuration snapshot (failover source).

The snapshot is a single JSON document with one flat key per tunable plus
an ``exported_at`` Unix timestamp. It is written whenever the primary
configuration changes and read whenever the primary source is unavailable,
so error reporting keeps working even when e.g. the admin database is down.
"""

import json
import logging
import os
import tempfile
import time
from typing import Any, Callable, Dict, Optional

from error_reporting.config.settings import ErrorReportingConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = 'var/error_reporting_config.json'


class FileConfigStorage:
    """Reads and writes the configuration snapshot file."""

    def __init__(self, path: str = DEFAULT_CONFIG_FILE):
        self.path = path

    def get_config(self) -> Optional[Dict[str, Any]]:
        """Return the stored snapshot, or None if missing or unreadable."""
        try:
            if not os.path.exists(self.path):
                return None
            with open(self.path, 'r', encoding='utf-8') as fp:
                data = json.load(fp)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read error reporting config snapshot {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Config snapshot {self.path} is not a JSON object, ignoring")
            return None
        return data

    def save_config(self, config: Dict[str, Any]) -> bool:
        """Atomically write the snapshot. Returns False on any I/O failure."""
        payload = dict(config)
        payload['exported_at'] = int(time.time())

        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix='.config_', suffix='.tmp', dir=directory)
            with os.fdopen(fd, 'w', encoding='utf-8') as fp:
                json.dump(payload, fp, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
            tmp_path = None
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write error reporting config snapshot {self.path}: {e}")
            return False
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

    def has_config(self) -> bool:
        try:
            return os.path.isfile(self.path)
        except OSError:
            return False

    def export_config(self, config: ErrorReportingConfig) -> bool:
        """Snapshot a live config object."""
        try:
            data = config.to_dict()
        except Exception as e:
            logger.error(f"Failed to export error reporting configuration: {e}")
            return False
        return self.save_config(data)


def load_config(
    storage: Optional[FileConfigStorage] = None,
    source: Optional[Callable[[], Optional[ErrorReportingConfig]]] = None,
) -> ErrorReportingConfig:
    """
    Resolve the active configuration with failover.

    Order:
        1. ``source()`` (defaults to the environment when any
           ERROR_REPORTING_* variable is set)
        2. the snapshot held by ``storage``
        3. built-in defaults

    Never raises; a broken source only moves resolution down the chain.
    """
    if source is None:
        source = _env_source

    try:
        config = source()
        if config is not None:
            return config
    except Exception as e:
        logger.warning(f"Primary error reporting config unavailable, using snapshot: {e}")

    if storage is not None:
        snapshot = storage.get_config()
        if snapshot:
            logger.debug(f"Loaded error reporting config from snapshot {storage.path}")
            return ErrorReportingConfig.from_dict(snapshot)

    logger.debug("No error reporting configuration found, using defaults")
    return ErrorReportingConfig()


def _env_source() -> Optional[ErrorReportingConfig]:
    if not ErrorReportingConfig.has_env_settings():
        return None
    return ErrorReportingConfig.from_env()
