"""Suppress exceptions matching the configured blacklist."""

from typing import List, Optional

from error_reporting.collector.exception_info import (
    exception_location,
    exception_message,
    exception_type_name,
)
from error_reporting.filters.base import ReportFilter
from error_reporting.filters.filter_context import FilterContext
from error_reporting.filters.pattern_matcher import PatternMatcher


class ExceptionFilter(ReportFilter):
    """Blacklist on exception type name, message and file path."""

    name = "exception"

    def __init__(self, blacklist: str = '', matcher: Optional[PatternMatcher] = None):
        self.matcher = matcher or PatternMatcher()
        self.patterns = self.matcher.parse_patterns(blacklist)

    def should_filter(self, context: FilterContext) -> bool:
        if not self.patterns:
            return False
        return self.matcher.matches_any(self.patterns, self.targets(context.exception))

    @staticmethod
    def targets(exception: BaseException) -> List[str]:
        file_path, _ = exception_location(exception)
        return [
            exception_type_name(exception),
            exception_message(exception),
            file_path,
        ]
