import hmac
from functools import wraps

from flask import current_app, jsonify, request


def _bearer_token():
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(fn):
    """
    Usage: @require_admin
    Admin sessions are issued elsewhere; this service only checks the shared token.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_TOKEN")
        if not expected:
            return jsonify(error="Admin access is not configured"), 503

        token = _bearer_token()
        if token is None:
            return jsonify(error="Authentication required"), 401
        if not hmac.compare_digest(token, expected):
            return jsonify(error="Forbidden"), 403

        return fn(*args, **kwargs)
    return wrapper
