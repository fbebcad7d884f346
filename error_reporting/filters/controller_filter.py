"""
Scope reporting by controller-action.

Targets for a request routed to ('checkout', 'cart', 'index') at
'/checkout/cart/?id=3':
    'checkout/cart/index', 'checkout_cart_index', '/checkout/cart/?id=3'

The include-only list and the exclude list are checked independently;
either one can suppress the report.
"""

from typing import List, Optional

from error_reporting.collector.request_context import RequestContext
from error_reporting.filters.base import ReportFilter
from error_reporting.filters.filter_context import FilterContext
from error_reporting.filters.pattern_matcher import PatternMatcher


class ControllerFilter(ReportFilter):

    name = "controller"

    def __init__(self, excluded: str = '', included_only: str = '',
                 matcher: Optional[PatternMatcher] = None):
        self.matcher = matcher or PatternMatcher()
        self.excluded = self.matcher.parse_patterns(excluded)
        self.included_only = self.matcher.parse_patterns(included_only)

    def should_filter(self, context: FilterContext) -> bool:
        if not self.excluded and not self.included_only:
            return False

        targets = self.targets(context.request)

        if self.included_only and not self.matcher.matches_any(self.included_only, targets):
            return True

        if self.excluded and self.matcher.matches_any(self.excluded, targets):
            return True

        return False

    @staticmethod
    def targets(request: Optional[RequestContext]) -> List[str]:
        if request is None:
            return []
        candidates = [
            request.full_action_name('/'),
            request.full_action_name('_'),
            request.path,
        ]
        return [target for target in candidates if target]
