"""
File: error_reporting/integrations/flask.py

Flask glue: report every unhandled request exception.

Usage:
    from flask import Flask
    from error_reporting.integrations.flask import init_app

    app = Flask(__name__)
    init_app(app)

init_app() subscribes to Flask's got_request_exception signal, so the
application's own error handling and response are left untouched. One
ReportScope is kept per request on flask.g.

App config keys:
    ERROR_REPORTING_CONFIG_FILE  snapshot path used for config failover
"""

import logging
from typing import Optional

from flask import Flask, g, got_request_exception, request as flask_request

from error_reporting.collector.request_context import RequestContext
from error_reporting.config.config_storage import DEFAULT_CONFIG_FILE, FileConfigStorage, load_config
from error_reporting.reporter import ErrorReporter, ReportScope

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'error_reporting'
_SCOPE_ATTR = 'error_reporting_scope'


def init_app(app: Flask, reporter: Optional[ErrorReporter] = None) -> ErrorReporter:
    """Attach error reporting to a Flask app and return the reporter."""
    if reporter is None:
        storage = FileConfigStorage(app.config.get('ERROR_REPORTING_CONFIG_FILE', DEFAULT_CONFIG_FILE))
        reporter = ErrorReporter.from_config(load_config(storage), storage=storage)

    app.extensions[EXTENSION_KEY] = reporter
    got_request_exception.connect(_on_request_exception, app, weak=False)

    logger.info(f"Error reporting attached to Flask app '{app.name}': enabled={reporter.config.enabled}")
    return reporter


def _on_request_exception(sender: Flask, exception: BaseException = None, **extra):
    reporter = sender.extensions.get(EXTENSION_KEY)
    if reporter is None or exception is None:
        return

    try:
        context = request_context_from_flask(flask_request)
    except Exception as e:
        logger.warning(f"Could not build request context for error report: {e}")
        context = None

    scope = g.get(_SCOPE_ATTR)
    if scope is None:
        scope = ReportScope()
        setattr(g, _SCOPE_ATTR, scope)

    reporter.report(exception, context, scope)


def request_context_from_flask(request) -> RequestContext:
    """Map a Flask/Werkzeug request onto a RequestContext."""
    endpoint = request.endpoint or ''
    route = tuple(part for part in endpoint.split('.') if part)

    forwarded_for = request.headers.get('X-Forwarded-For', '')
    client_ip = forwarded_for.split(',')[0].strip() if forwarded_for else request.remote_addr

    form = None
    if request.form:
        form = request.form.to_dict()
    else:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            form = body

    return RequestContext(
        method=request.method,
        scheme=request.scheme,
        host=request.host,
        path=request.full_path.rstrip('?'),
        route=route,
        is_ajax=request.headers.get('X-Requested-With') == 'XMLHttpRequest',
        client_ip=client_ip,
        user_agent=request.headers.get('User-Agent'),
        referer=request.headers.get('Referer'),
        form=form,
        params=request.args.to_dict(),
    )
