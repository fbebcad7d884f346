"""
Configuration for the error reporting pipeline.
"""

from .settings import (
    ErrorReportingConfig,
    SEVERITY_LEVELS,
    SEVERITY_WARNING,
    SEVERITY_ERROR,
    SEVERITY_CRITICAL,
)
from .config_storage import FileConfigStorage, load_config

__all__ = [
    'ErrorReportingConfig',
    'FileConfigStorage',
    'load_config',
    'SEVERITY_LEVELS',
    'SEVERITY_WARNING',
    'SEVERITY_ERROR',
    'SEVERITY_CRITICAL',
]
