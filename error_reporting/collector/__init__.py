"""
Error data collection: classification, fingerprinting and report assembly.
"""

from .severity_resolver import SeverityResolver, DEFAULT_SEVERITY_PATTERNS
from .hash_generator import ErrorHashGenerator, compute_error_hash
from .data_sanitizer import DataSanitizer, REDACTED_TEXT, parse_field_list
from .request_context import (
    RequestContext,
    detect_area,
    AREA_FRONTEND,
    AREA_ADMIN,
    AREA_API,
)
from .report import (
    ErrorReport,
    ErrorInfo,
    RequestInfo,
    ClientInfo,
    UserInfo,
    StoreInfo,
    PreviousException,
)
from .error_data_collector import AppContext, ErrorDataCollector, format_bytes

__all__ = [
    'SeverityResolver',
    'DEFAULT_SEVERITY_PATTERNS',
    'ErrorHashGenerator',
    'compute_error_hash',
    'DataSanitizer',
    'REDACTED_TEXT',
    'parse_field_list',
    'RequestContext',
    'detect_area',
    'AREA_FRONTEND',
    'AREA_ADMIN',
    'AREA_API',
    'ErrorReport',
    'ErrorInfo',
    'RequestInfo',
    'ClientInfo',
    'UserInfo',
    'StoreInfo',
    'PreviousException',
    'AppContext',
    'ErrorDataCollector',
    'format_bytes',
]
