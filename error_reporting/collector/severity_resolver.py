"""
Severity classification for captured exceptions.

Severity reflects whether the fault breaks page rendering:
- CRITICAL: faults that stop execution (type/syntax errors, fatal system
  and database failures)
- ERROR: unexpected application faults that still allow partial operation
- WARNING: expected, recoverable conditions (not found, validation)

Patterns are matched with issubclass(), so a pattern covers the class and
all of its subclasses. Buckets are checked critical -> error -> warning and
the first match wins; no match means 'error'.
"""

import importlib
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Union

from error_reporting.config.settings import (
    SEVERITY_CRITICAL,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
)

logger = logging.getLogger(__name__)

# A pattern is an exception class or a dotted import path to one
SeverityPattern = Union[type, str]

SEVERITY_ORDER = (SEVERITY_CRITICAL, SEVERITY_ERROR, SEVERITY_WARNING)

DEFAULT_SEVERITY_PATTERNS: Dict[str, List[SeverityPattern]] = {
    SEVERITY_CRITICAL: [
        # Database failures
        'sqlite3.DatabaseError',
        'sqlalchemy.exc.OperationalError',
        'sqlalchemy.exc.InterfaceError',
        'sqlalchemy.exc.ProgrammingError',
        'psycopg2.OperationalError',
        'pymysql.err.OperationalError',

        # Interpreter-level failures
        SyntaxError,
        TypeError,
        NameError,
        AttributeError,
        ImportError,
        ArithmeticError,
        RecursionError,
        MemoryError,
        SystemError,
    ],
    SEVERITY_ERROR: [
        'werkzeug.exceptions.InternalServerError',
        'requests.exceptions.RequestException',
        ConnectionError,
        TimeoutError,
        PermissionError,
        RuntimeError,
        AssertionError,
        UnicodeError,
    ],
    SEVERITY_WARNING: [
        # "Not found" conditions, expected during normal operation
        'werkzeug.exceptions.NotFound',
        'werkzeug.exceptions.MethodNotAllowed',
        'django.http.Http404',
        'django.core.exceptions.ObjectDoesNotExist',

        # Validation and user input errors
        'werkzeug.exceptions.BadRequest',
        'werkzeug.exceptions.Unauthorized',
        'werkzeug.exceptions.Forbidden',
        'django.core.exceptions.ValidationError',
        'django.core.exceptions.PermissionDenied',
        'marshmallow.exceptions.ValidationError',
    ],
}


class SeverityResolver:
    """
    Resolve an exception to 'critical', 'error' or 'warning'.

    Custom patterns are tried before the defaults of the same bucket.
    """

    def __init__(self, severity_patterns: Optional[Mapping[str, Sequence[SeverityPattern]]] = None):
        self._patterns = self._merge_patterns(severity_patterns or {})
        self._resolved: Dict[str, Optional[type]] = {}

    @staticmethod
    def _merge_patterns(custom: Mapping[str, Sequence[SeverityPattern]]) -> Dict[str, List[SeverityPattern]]:
        merged = {severity: list(patterns) for severity, patterns in DEFAULT_SEVERITY_PATTERNS.items()}
        for severity, patterns in custom.items():
            merged[severity] = list(patterns) + merged.get(severity, [])
        return merged

    def resolve(self, exception: BaseException) -> str:
        for severity in SEVERITY_ORDER:
            for pattern in self._patterns.get(severity, []):
                exception_class = self._resolve_pattern(pattern)
                if exception_class is None:
                    continue
                if isinstance(exception, exception_class):
                    return severity

        return SEVERITY_ERROR

    def patterns_for(self, severity: str) -> List[SeverityPattern]:
        return list(self._patterns.get(severity, []))

    def _resolve_pattern(self, pattern: SeverityPattern) -> Optional[type]:
        if isinstance(pattern, type):
            return pattern

        if pattern in self._resolved:
            return self._resolved[pattern]

        exception_class = _import_class(pattern)
        self._resolved[pattern] = exception_class
        return exception_class


def _import_class(dotted_path: str) -> Optional[type]:
    """Import 'package.module.ClassName'; None if the library is absent."""
    module_path, _, class_name = dotted_path.rpartition('.')
    if not module_path:
        return None
    try:
        module = importlib.import_module(module_path)
    except Exception:
        logger.debug(f"Severity pattern {dotted_path} skipped: module not importable")
        return None

    candidate = getattr(module, class_name, None)
    if isinstance(candidate, type) and issubclass(candidate, BaseException):
        return candidate
    return None
