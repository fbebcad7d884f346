"""
Composite report filter.

A report goes out only if no registered filter wants it suppressed.
A filter that raises is logged and treated as "do not suppress".
"""

import logging
from typing import List, Optional

from error_reporting.collector.request_context import RequestContext
from error_reporting.config.settings import ErrorReportingConfig
from error_reporting.filters.base import ReportFilter
from error_reporting.filters.controller_filter import ControllerFilter
from error_reporting.filters.exception_filter import ExceptionFilter
from error_reporting.filters.filter_context import FilterContext
from error_reporting.filters.pattern_matcher import PatternMatcher
from error_reporting.filters.severity_filter import SeverityFilter

logger = logging.getLogger(__name__)


class ErrorFilter:

    def __init__(self, filters: Optional[List[ReportFilter]] = None):
        self.filters: List[ReportFilter] = list(filters or [])

    @classmethod
    def from_config(cls, config: ErrorReportingConfig) -> 'ErrorFilter':
        matcher = PatternMatcher()
        return cls([
            ExceptionFilter(config.error_blacklist, matcher=matcher),
            ControllerFilter(
                excluded=config.excluded_controllers,
                included_only=config.included_only_controllers,
                matcher=matcher,
            ),
            SeverityFilter(config.minimum_severity),
        ])

    def add_filter(self, report_filter: ReportFilter):
        self.filters.append(report_filter)

    def should_report(self, exception: BaseException, request: Optional[RequestContext],
                      severity: str) -> bool:
        context = FilterContext(exception=exception, request=request, severity=severity)

        for report_filter in self.filters:
            try:
                if report_filter.should_filter(context):
                    logger.debug(
                        f"Error suppressed by {report_filter.name or type(report_filter).__name__} filter"
                    )
                    return False
            except Exception as e:
                logger.warning(f"Filter {type(report_filter).__name__} failed, ignoring it: {e}")

        return True
