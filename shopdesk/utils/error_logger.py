"""
Error Logger Utility
Captures application errors to the database with request context.
"""

import json
import logging
import traceback

from flask import request, has_request_context

from shopdesk.utils.helpers import now

logger = logging.getLogger(__name__)

# Keys to redact from request data
SENSITIVE_KEYS = {
    'password', 'token', 'csrf_token', 'secret', 'api_key',
    'authorization', 'cookie', 'session'
}


def _sanitize_data(data):
    """Redact sensitive keys from a dict."""
    if not isinstance(data, dict):
        return data
    sanitized = {}
    for key, value in data.items():
        if any(s in key.lower() for s in SENSITIVE_KEYS):
            sanitized[key] = '[REDACTED]'
        elif isinstance(value, dict):
            sanitized[key] = _sanitize_data(value)
        else:
            sanitized[key] = str(value)[:500]  # Truncate long values
    return sanitized


def _request_data():
    raw_data = {}
    if request.args:
        raw_data['args'] = dict(request.args)
    payload = request.get_json(silent=True) if request.is_json else None
    if payload:
        raw_data['json'] = payload if isinstance(payload, dict) else {'body': payload}
    if not raw_data:
        return None
    return json.dumps(_sanitize_data(raw_data))[:4000]


def log_error(error, status_code=500):
    """
    Log an error to the database.

    Safe to call from error handlers: internal failures are logged and
    swallowed so the original error response still goes out.

    Args:
        error: The exception or error object
        status_code: HTTP status code (default 500)
    """
    from shopdesk.models import db, ErrorLog

    try:
        tb = traceback.format_exc()
        error_log = ErrorLog(
            timestamp=now(),
            error_type=type(error).__name__,
            error_message=str(error)[:2000],
            traceback=None if tb == 'NoneType: None\n' else tb,
            status_code=status_code,
            is_resolved=False
        )

        if has_request_context():
            error_log.request_url = request.url[:512]
            error_log.request_method = request.method
            error_log.ip_address = request.remote_addr
            error_log.user_agent = str(request.user_agent)[:512] if request.user_agent else None
            error_log.blueprint = request.blueprints[0] if request.blueprints else None
            error_log.endpoint = request.endpoint
            error_log.request_data = _request_data()

        db.session.add(error_log)
        db.session.commit()
        return error_log

    except Exception as e:
        # Never let the error logger crash the app
        logger.warning(f"Could not record error log: {e}")
        db.session.rollback()
        return None
