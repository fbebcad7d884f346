"""Value object handed to every report filter."""

from dataclasses import dataclass
from typing import Optional

from error_reporting.collector.request_context import RequestContext


@dataclass(frozen=True)
class FilterContext:
    exception: BaseException
    request: Optional[RequestContext]
    severity: str
