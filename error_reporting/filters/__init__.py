"""
Report filters: blacklist, controller scoping and severity threshold.
"""

from .pattern_matcher import PatternMatcher
from .filter_context import FilterContext
from .base import ReportFilter
from .exception_filter import ExceptionFilter
from .controller_filter import ControllerFilter
from .severity_filter import SeverityFilter, meets_minimum_severity, severity_level
from .error_filter import ErrorFilter

__all__ = [
    'PatternMatcher',
    'FilterContext',
    'ReportFilter',
    'ExceptionFilter',
    'ControllerFilter',
    'SeverityFilter',
    'meets_minimum_severity',
    'severity_level',
    'ErrorFilter',
]
