"""
File: error_reporting/collector/error_data_collector.py

Assembles the full ErrorReport for a captured exception.

Always collected:
    error identity (type, message, code, file, line, hash, severity),
    timestamps, request/client/area context, store and user context.

Collected when enabled:
    include_detailed_info -> stack trace, previous exception chain,
                             runtime environment snapshot
    include_post_data     -> sanitized request body

Every sub-collector degrades to a fallback value instead of raising:
a failing store lookup falls back to request-derived values, a failing
user lookup falls back to 'guest', a failing memory probe to 'Unknown'.
"""

import logging
import platform
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import psutil

try:
    import resource
except ImportError:  # Windows
    resource = None

from error_reporting.config.settings import ErrorReportingConfig
from error_reporting.collector.data_sanitizer import DataSanitizer
from error_reporting.collector.exception_info import (
    exception_code,
    exception_location,
    exception_message,
    exception_type_name,
    format_trace,
    iter_previous_exceptions,
)
from error_reporting.collector.hash_generator import ErrorHashGenerator
from error_reporting.collector.report import (
    ClientInfo,
    ErrorInfo,
    ErrorReport,
    PreviousException,
    RequestInfo,
    StoreInfo,
    UserInfo,
)
from error_reporting.collector.request_context import (
    AREA_API,
    RequestContext,
    detect_area,
)
from error_reporting.collector.severity_resolver import SeverityResolver

logger = logging.getLogger(__name__)

UNKNOWN = 'Unknown'

StoreResolver = Callable[[Optional[RequestContext]], Union[StoreInfo, Mapping[str, Any]]]
UserResolver = Callable[[Optional[RequestContext]], Union[UserInfo, Mapping[str, Any], None]]


@dataclass
class AppContext:
    """
    Lookups supplied by the host application.

    store_resolver returns the authoritative store/tenant for the request;
    user_resolver returns the logged-in user or None for guests.
    """
    store_resolver: Optional[StoreResolver] = None
    user_resolver: Optional[UserResolver] = None


class ErrorDataCollector:
    """Build ErrorReport instances."""

    def __init__(
        self,
        config: ErrorReportingConfig,
        severity_resolver: Optional[SeverityResolver] = None,
        hash_generator: Optional[ErrorHashGenerator] = None,
        sanitizer: Optional[DataSanitizer] = None,
        app_context: Optional[AppContext] = None,
    ):
        self.config = config
        self.severity_resolver = severity_resolver or SeverityResolver()
        self.hash_generator = hash_generator or ErrorHashGenerator()
        self.sanitizer = sanitizer or DataSanitizer(config_patterns=config.sensitive_fields)
        self.app_context = app_context or AppContext()

    def collect(
        self,
        exception: BaseException,
        request: Optional[RequestContext] = None,
        app_context: Optional[AppContext] = None,
    ) -> ErrorReport:
        app_context = app_context or self.app_context
        now = datetime.now().astimezone()
        area = detect_area(request)

        report = ErrorReport(
            error=self._collect_error_info(exception),
            timestamp=now.strftime('%Y-%m-%d %H:%M:%S'),
            timestamp_formatted=now.strftime('%B %d, %Y %I:%M:%S %p %Z').strip(),
            request=self._collect_request_info(request, area),
            client=self._collect_client_info(request),
            user=self._collect_user_info(request, area, app_context),
            store=self._collect_store_info(request, app_context),
        )

        if self.config.include_detailed_info:
            report.trace = self._safe_trace(exception)
            report.previous_exceptions = self.collect_previous_exceptions(exception)
            report.environment = self.collect_environment()

        if self.config.include_post_data and request is not None and request.form is not None:
            report.post_data = self.sanitizer.sanitize(request.form)

        return report

    def _collect_error_info(self, exception: BaseException) -> ErrorInfo:
        file_path, line = exception_location(exception)
        return ErrorInfo(
            message=exception_message(exception),
            type=exception_type_name(exception),
            code=exception_code(exception),
            file=file_path,
            line=line,
            hash=self.hash_generator.generate(exception),
            severity=self.severity_resolver.resolve(exception),
        )

    @staticmethod
    def _collect_request_info(request: Optional[RequestContext], area: str) -> RequestInfo:
        if request is None:
            return RequestInfo(area=area)
        return RequestInfo(
            url=request.url,
            method=request.method,
            is_ajax=request.is_ajax,
            is_secure=request.is_secure,
            area=area,
        )

    @staticmethod
    def _collect_client_info(request: Optional[RequestContext]) -> ClientInfo:
        if request is None:
            return ClientInfo()
        return ClientInfo(
            ip=request.client_ip,
            user_agent=request.user_agent,
            referer=request.referer,
        )

    def _collect_store_info(self, request: Optional[RequestContext], app_context: AppContext) -> StoreInfo:
        # Request-derived fallback
        store = StoreInfo(
            name=request.host if request is not None else '',
            code='default',
            base_url=request.base_url if request is not None else '',
        )
        if request is not None and request.params.get('store'):
            store.code = str(request.params['store'])

        if app_context.store_resolver is None:
            return store

        try:
            resolved = app_context.store_resolver(request)
        except Exception as e:
            logger.debug(f"Store lookup failed, using request-derived store: {e}")
            return store

        if isinstance(resolved, StoreInfo):
            return resolved
        if isinstance(resolved, Mapping):
            return StoreInfo(
                name=str(resolved.get('name') or store.name),
                code=str(resolved.get('code') or store.code),
                base_url=str(resolved.get('base_url') or store.base_url),
            )
        return store

    def _collect_user_info(self, request: Optional[RequestContext], area: str,
                           app_context: AppContext) -> UserInfo:
        # API calls have no interactive session
        if area == AREA_API or app_context.user_resolver is None:
            return UserInfo()

        try:
            resolved = app_context.user_resolver(request)
        except Exception as e:
            logger.debug(f"User lookup failed, reporting as guest: {e}")
            return UserInfo()

        if isinstance(resolved, UserInfo):
            return resolved
        if isinstance(resolved, Mapping) and resolved.get('id') is not None:
            return UserInfo(
                type='authenticated',
                id=str(resolved.get('id')),
                name=resolved.get('name'),
                email=resolved.get('email'),
            )
        return UserInfo()

    @staticmethod
    def _safe_trace(exception: BaseException) -> Optional[str]:
        try:
            return format_trace(exception)
        except Exception as e:
            logger.debug(f"Could not format stack trace: {e}")
            return None

    @staticmethod
    def collect_previous_exceptions(exception: BaseException) -> List[PreviousException]:
        """Walk the cause chain; index 0 is the direct cause."""
        chain = []
        for index, previous in enumerate(iter_previous_exceptions(exception)):
            file_path, line = exception_location(previous)
            chain.append(PreviousException(
                index=index,
                type=exception_type_name(previous),
                message=exception_message(previous),
                file=file_path,
                line=line,
            ))
        return chain

    @staticmethod
    def collect_environment() -> Dict[str, str]:
        environment = {
            'python_version': platform.python_version(),
            'memory_usage': UNKNOWN,
            'memory_peak': UNKNOWN,
            'memory_limit': UNKNOWN,
        }

        try:
            environment['memory_usage'] = format_bytes(psutil.Process().memory_info().rss)
        except Exception as e:
            logger.debug(f"Could not read memory usage: {e}")

        if resource is not None:
            try:
                # ru_maxrss is KiB on Linux, bytes on macOS
                peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
                if platform.system() != 'Darwin':
                    peak *= 1024
                environment['memory_peak'] = format_bytes(peak)
            except Exception as e:
                logger.debug(f"Could not read peak memory: {e}")

            try:
                soft_limit, _ = resource.getrlimit(resource.RLIMIT_AS)
                environment['memory_limit'] = (
                    'unlimited' if soft_limit == resource.RLIM_INFINITY else format_bytes(soft_limit)
                )
            except Exception as e:
                logger.debug(f"Could not read memory limit: {e}")

        return environment


def format_bytes(num_bytes: int) -> str:
    """Format a byte count as '%.2f <unit>' with B/KB/MB/GB units."""
    units = ['B', 'KB', 'MB', 'GB']
    value = float(num_bytes)
    power = 0
    while value >= 1024 and power < len(units) - 1:
        value /= 1024
        power += 1
    return f"{value:.2f} {units[power]}"
