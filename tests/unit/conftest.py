# tests/unit/conftest.py
"""
Shared pytest configuration for unit tests.

Puts the project root at the front of sys.path so the error_reporting
package imports from the working tree, and provides the fixtures most
test modules need (config, captured exception, request, report).
"""
import sys
import os

# Add project root to path FIRST to ensure proper import resolution
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root in sys.path:
    sys.path.remove(project_root)
sys.path.insert(0, project_root)

import pytest

from error_reporting.collector.report import (
    ClientInfo,
    ErrorInfo,
    ErrorReport,
    RequestInfo,
    StoreInfo,
    UserInfo,
)
from error_reporting.collector.request_context import RequestContext
from error_reporting.config.settings import ErrorReportingConfig


def capture(exception):
    """Raise and catch ``exception`` so it carries a real traceback."""
    try:
        raise exception
    except BaseException as e:
        return e


@pytest.fixture
def raise_and_catch():
    return capture


@pytest.fixture
def config(tmp_path):
    """Enabled config with file state under tmp_path and every channel off."""
    return ErrorReportingConfig(
        enabled=True,
        tracking_dir=str(tmp_path / 'tracking'),
        include_detailed_info=False,
    )


@pytest.fixture
def captured_exception():
    return capture(RuntimeError("Payment gateway timed out"))


@pytest.fixture
def request_context():
    return RequestContext.from_url(
        'https://shop.example.com/checkout/cart/index?id=3',
        method='POST',
        route=('checkout', 'cart', 'index'),
        client_ip='203.0.113.7',
        user_agent='Mozilla/5.0 (pytest)',
        referer='https://shop.example.com/catalog',
        form={'email': 'buyer@example.com', 'password': 'hunter2', 'qty': '2'},
    )


@pytest.fixture
def make_report():
    """Factory for ErrorReport instances with sensible defaults."""
    def _make(severity='error', message='Something broke', error_hash='ab' + 'c' * 62, **overrides):
        report = ErrorReport(
            error=ErrorInfo(
                message=message,
                type='RuntimeError',
                code=0,
                file='/srv/app/checkout/views.py',
                line=42,
                hash=error_hash,
                severity=severity,
            ),
            timestamp='2026-10-19 12:00:00',
            timestamp_formatted='October 19, 2026 12:00:00 PM UTC',
            request=RequestInfo(
                url='https://shop.example.com/checkout/cart/index?id=3',
                method='POST',
                is_secure=True,
                area='frontend',
            ),
            client=ClientInfo(ip='203.0.113.7', user_agent='Mozilla/5.0 (pytest)'),
            user=UserInfo(),
            store=StoreInfo(name='Main Store', code='default', base_url='https://shop.example.com'),
        )
        for key, value in overrides.items():
            setattr(report, key, value)
        return report

    return _make
