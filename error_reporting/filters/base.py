"""
Base report filter.

All filters inherit from this class and implement should_filter().
"""

from abc import ABC, abstractmethod

from error_reporting.filters.filter_context import FilterContext


class ReportFilter(ABC):
    """Base class for report filters."""

    name: str = ""

    @abstractmethod
    def should_filter(self, context: FilterContext) -> bool:
        """
        Decide whether the error must be suppressed.

        Args:
            context: Exception, request and resolved severity

        Returns:
            True to suppress the report, False to let it through
        """
        pass
