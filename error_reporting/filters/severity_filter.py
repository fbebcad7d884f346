"""Suppress errors below the configured minimum severity."""

from error_reporting.config.settings import SEVERITY_ERROR, SEVERITY_LEVELS
from error_reporting.filters.base import ReportFilter
from error_reporting.filters.filter_context import FilterContext

_DEFAULT_LEVEL = SEVERITY_LEVELS[SEVERITY_ERROR]


def severity_level(severity: str) -> int:
    """warning=1, error=2, critical=3; anything else counts as error."""
    return SEVERITY_LEVELS.get(str(severity).lower(), _DEFAULT_LEVEL)


def meets_minimum_severity(severity: str, minimum: str) -> bool:
    return severity_level(severity) >= severity_level(minimum)


class SeverityFilter(ReportFilter):

    name = "severity"

    def __init__(self, minimum_severity: str = SEVERITY_ERROR):
        self.minimum_severity = minimum_severity

    def should_filter(self, context: FilterContext) -> bool:
        return not meets_minimum_severity(context.severity, self.minimum_severity)
