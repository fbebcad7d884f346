"""
Unit tests for ErrorDataCollector and the request context helpers.

Tests:
- Identity block, timestamps, request/client/store/user context
- Optional detailed info (trace, previous chain, environment)
- Optional sanitized POST data
- Fallbacks when store/user lookups or memory probes fail

Related: error_reporting/collector/error_data_collector.py
"""

import re
from unittest.mock import patch

from error_reporting.collector import (
    REDACTED_TEXT,
    AppContext,
    ErrorDataCollector,
    ErrorHashGenerator,
    RequestContext,
    StoreInfo,
    UserInfo,
    detect_area,
    format_bytes,
)
from error_reporting.config.settings import ErrorReportingConfig


def _chained_failure():
    try:
        try:
            raise KeyError('sku-1')
        except KeyError as e:
            raise ValueError('bad sku') from e
    except ValueError as e:
        raise RuntimeError('checkout failed') from e


def _capture_chained():
    try:
        _chained_failure()
    except RuntimeError as e:
        return e


class TestCollectBasics:

    def test_identity_block(self, config, captured_exception, request_context):
        report = ErrorDataCollector(config).collect(captured_exception, request_context)

        assert report.error.type == 'RuntimeError'
        assert report.error.message == 'Payment gateway timed out'
        assert report.error.file.endswith('conftest.py')
        assert report.error.line > 0
        assert report.error.code == 0
        assert report.error.severity == 'error'
        assert report.hash == ErrorHashGenerator().generate(captured_exception)

    def test_timestamps(self, config, captured_exception):
        report = ErrorDataCollector(config).collect(captured_exception)

        assert re.match(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$', report.timestamp)
        assert re.match(r'^[A-Z][a-z]+ \d{2}, \d{4} \d{2}:\d{2}:\d{2} (AM|PM)', report.timestamp_formatted)

    def test_request_and_client_context(self, config, captured_exception, request_context):
        report = ErrorDataCollector(config).collect(captured_exception, request_context)

        assert report.request.url == 'https://shop.example.com/checkout/cart/index?id=3'
        assert report.request.method == 'POST'
        assert report.request.is_secure is True
        assert report.area == 'frontend'
        assert report.client.ip == '203.0.113.7'
        assert report.client.user_agent == 'Mozilla/5.0 (pytest)'
        assert report.client.referer == 'https://shop.example.com/catalog'

    def test_store_falls_back_to_request(self, config, captured_exception, request_context):
        report = ErrorDataCollector(config).collect(captured_exception, request_context)

        assert report.store == StoreInfo(
            name='shop.example.com',
            code='default',
            base_url='https://shop.example.com',
        )

    def test_no_request(self, config, captured_exception):
        report = ErrorDataCollector(config).collect(captured_exception, None)

        assert report.request.url == ''
        assert report.area == 'frontend'
        assert report.user.is_guest
        assert report.client.ip is None

    def test_detailed_info_disabled(self, config, captured_exception):
        report = ErrorDataCollector(config).collect(captured_exception)

        assert report.trace is None
        assert report.previous_exceptions == []
        assert report.environment is None


class TestLookups:

    def test_store_resolver_mapping(self, config, captured_exception, request_context):
        app_context = AppContext(store_resolver=lambda request: {'name': 'EU Store', 'code': 'eu'})
        report = ErrorDataCollector(config, app_context=app_context).collect(captured_exception, request_context)

        assert report.store.name == 'EU Store'
        assert report.store.code == 'eu'
        assert report.store.base_url == 'https://shop.example.com'

    def test_store_resolver_failure_falls_back(self, config, captured_exception, request_context):
        def broken(request):
            raise LookupError("store table unavailable")

        collector = ErrorDataCollector(config, app_context=AppContext(store_resolver=broken))
        report = collector.collect(captured_exception, request_context)

        assert report.store.name == 'shop.example.com'
        assert report.store.code == 'default'

    def test_user_resolver_authenticated(self, config, captured_exception, request_context):
        app_context = AppContext(user_resolver=lambda request: {
            'id': 17, 'name': 'Jane Buyer', 'email': 'jane@example.com'})
        report = ErrorDataCollector(config, app_context=app_context).collect(captured_exception, request_context)

        assert report.user == UserInfo(type='authenticated', id='17', name='Jane Buyer', email='jane@example.com')
        assert report.user.display_name() == 'Jane Buyer (#17)'

    def test_user_resolver_failure_is_guest(self, config, captured_exception, request_context):
        def broken(request):
            raise RuntimeError("session storage down")

        report = ErrorDataCollector(config, app_context=AppContext(user_resolver=broken)).collect(
            captured_exception, request_context)

        assert report.user.is_guest
        assert report.user.display_name() == 'Guest'

    def test_api_requests_are_always_guest(self, config, captured_exception):
        request = RequestContext.from_url('https://shop.example.com/rest/V1/orders')
        app_context = AppContext(user_resolver=lambda request: {'id': 1, 'name': 'Admin'})

        report = ErrorDataCollector(config, app_context=app_context).collect(captured_exception, request)

        assert report.area == 'api'
        assert report.user.is_guest

    def test_call_level_app_context_overrides(self, config, captured_exception, request_context):
        collector = ErrorDataCollector(config)
        report = collector.collect(
            captured_exception, request_context,
            AppContext(store_resolver=lambda request: StoreInfo(name='Outlet', code='outlet')),
        )

        assert report.store.code == 'outlet'


class TestDetailedInfo:

    def test_trace_and_previous_chain(self, tmp_path):
        config = ErrorReportingConfig(include_detailed_info=True, tracking_dir=str(tmp_path))
        report = ErrorDataCollector(config).collect(_capture_chained())

        assert 'RuntimeError: checkout failed' in report.trace
        assert [(p.index, p.type, p.message) for p in report.previous_exceptions] == [
            (0, 'ValueError', 'bad sku'),
            (1, 'KeyError', "'sku-1'"),
        ]
        assert all(p.line > 0 for p in report.previous_exceptions)

    def test_environment_snapshot(self, tmp_path, captured_exception):
        config = ErrorReportingConfig(include_detailed_info=True, tracking_dir=str(tmp_path))
        report = ErrorDataCollector(config).collect(captured_exception)

        assert set(report.environment) == {'python_version', 'memory_usage', 'memory_peak', 'memory_limit'}
        assert re.match(r'^\d+\.\d{2} (B|KB|MB|GB)$', report.environment['memory_usage'])

    def test_memory_probe_failure_is_unknown(self):
        with patch('error_reporting.collector.error_data_collector.psutil.Process',
                   side_effect=OSError("no /proc")):
            environment = ErrorDataCollector.collect_environment()

        assert environment['memory_usage'] == 'Unknown'
        assert environment['python_version']


class TestPostData:

    def test_post_data_is_sanitized(self, tmp_path, captured_exception, request_context):
        config = ErrorReportingConfig(include_post_data=True, tracking_dir=str(tmp_path))
        report = ErrorDataCollector(config).collect(captured_exception, request_context)

        assert report.post_data == {
            'email': 'buyer@example.com',
            'password': REDACTED_TEXT,
            'qty': '2',
        }

    def test_post_data_disabled(self, config, captured_exception, request_context):
        report = ErrorDataCollector(config).collect(captured_exception, request_context)
        assert report.post_data is None

    def test_configured_sensitive_fields(self, tmp_path, captured_exception, request_context):
        config = ErrorReportingConfig(include_post_data=True, sensitive_fields='qty',
                                      tracking_dir=str(tmp_path))
        report = ErrorDataCollector(config).collect(captured_exception, request_context)

        assert report.post_data['qty'] == REDACTED_TEXT


class TestHelpers:

    def test_detect_area(self):
        assert detect_area(RequestContext(path='/admin/sales/order')) == 'admin'
        assert detect_area(RequestContext(path='/backend/dashboard')) == 'admin'
        assert detect_area(RequestContext(path='/graphql')) == 'api'
        assert detect_area(RequestContext(path='/api/v2/orders')) == 'api'
        assert detect_area(RequestContext(path='/soap/default')) == 'api'
        assert detect_area(RequestContext(path='/catalog/product/view')) == 'frontend'
        assert detect_area(RequestContext(path='/api/v2/orders', area='admin')) == 'admin'
        assert detect_area(None) == 'frontend'

    def test_format_bytes(self):
        assert format_bytes(512) == '512.00 B'
        assert format_bytes(1536) == '1.50 KB'
        assert format_bytes(256 * 1024 * 1024) == '256.00 MB'
        assert format_bytes(5 * 1024 ** 3) == '5.00 GB'
        assert format_bytes(4096 * 1024 ** 3) == '4096.00 GB'

    def test_request_context_from_url(self):
        request = RequestContext.from_url('http://shop.example.com/catalog?q=shoes', route=('catalog', 'search'))

        assert request.host == 'shop.example.com'
        assert request.path == '/catalog?q=shoes'
        assert request.is_secure is False
        assert request.url == 'http://shop.example.com/catalog?q=shoes'
        assert request.full_action_name('_') == 'catalog_search'


class TestReportSerialization:

    def test_to_dict_is_plain_nested_data(self, tmp_path, captured_exception, request_context):
        config = ErrorReportingConfig(include_detailed_info=True, tracking_dir=str(tmp_path))
        report = ErrorDataCollector(config).collect(captured_exception, request_context)

        data = report.to_dict()

        assert data['error']['type'] == 'RuntimeError'
        assert data['error']['hash'] == report.hash
        assert data['request']['area'] == 'frontend'
        assert data['store']['name'] == 'shop.example.com'
        assert data['user']['type'] == 'guest'
        assert set(data['environment']) == {'python_version', 'memory_usage', 'memory_peak', 'memory_limit'}
        assert isinstance(data['previous_exceptions'], list)
