from functools import wraps

from flask import current_app, g, jsonify, request

from security.errors import AuthError
from security.rate_limit import client_ip
from utils.audit import log_event

BASIC_REALM = 'Basic realm="Admin Area"'


def get_authenticator():
    return current_app.extensions["admin_auth"]


def auth_error_response(error: AuthError):
    resp = jsonify(error.to_dict())
    resp.status_code = error.status_code
    if error.status_code == 401:
        resp.headers["WWW-Authenticate"] = BASIC_REALM
    return resp


def require_admin(fn):
    """
    Usage: @require_admin on any admin-only route. Sets g.admin_username.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            g.admin_username = get_authenticator().authenticate(
                request.headers.get("Authorization"),
                client_ip(request),
            )
        except AuthError as err:
            log_event("ADMIN_AUTH_DENIED", metadata={"reason": type(err).__name__, "path": request.path})
            return auth_error_response(err)
        return fn(*args, **kwargs)
    return wrapper
