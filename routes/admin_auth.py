from flask import Blueprint, current_app, g, jsonify, request

from security.accounts import change_password as change_admin_password
from security.accounts import create_admin
from security.errors import AccountLocked, AuthError, BadRequest, RateLimited
from security.rate_limit import client_ip
from utils.audit import log_event
from utils.auth_context import get_authenticator, require_admin


admin_auth_bp = Blueprint("admin_auth", __name__, url_prefix="/api/admin")


def _str_field(data: dict, name: str) -> str:
    value = data.get(name)
    return value if isinstance(value, str) else ""


def _login_event(err: AuthError) -> str:
    if isinstance(err, RateLimited):
        return "LOGIN_RATE_LIMIT"
    if isinstance(err, AccountLocked):
        return "LOGIN_LOCKED"
    return "LOGIN_FAIL"


@admin_auth_bp.post("/auth")
def login():
    auth = get_authenticator()
    ip = client_ip(request)
    data = request.get_json(silent=True) or {}
    username = _str_field(data, "username")
    password = _str_field(data, "password")

    try:
        auth.check_rate_limit(ip)

        if not username or not password:
            auth.rate_limiter.record_failure(ip)
            raise BadRequest("Username and password are required")

        auth.verify(username, password, ip)
    except AuthError as err:
        log_event(_login_event(err), username=username or None, metadata={"reason": type(err).__name__})
        raise

    log_event("LOGIN_SUCCESS", username=username)
    return jsonify(success=True), 200


@admin_auth_bp.post("/change-password")
def change_password():
    auth = get_authenticator()
    ip = client_ip(request)
    data = request.get_json(silent=True) or {}
    username = _str_field(data, "username")

    try:
        auth.check_rate_limit(ip)
        change_admin_password(
            auth,
            username,
            _str_field(data, "currentPassword"),
            _str_field(data, "newPassword"),
            ip,
            rounds=current_app.config.get("BCRYPT_ROUNDS"),
        )
    except AuthError as err:
        log_event("PASSWORD_CHANGE_FAIL", username=username or None, metadata={"reason": type(err).__name__})
        raise

    log_event("PASSWORD_CHANGED", username=username)
    return jsonify(success=True, message="Password changed successfully"), 200


@admin_auth_bp.post("/setup")
def setup():
    auth = get_authenticator()
    data = request.get_json(silent=True) or {}
    username = _str_field(data, "username")

    try:
        account = create_admin(
            auth.store if auth.uses_database else None,
            username,
            _str_field(data, "password"),
            rounds=current_app.config.get("BCRYPT_ROUNDS"),
        )
    except AuthError as err:
        log_event("ADMIN_SETUP_FAIL", username=username or None, metadata={"reason": type(err).__name__})
        raise

    log_event("ADMIN_SETUP", username=username)
    return jsonify(success=True, message="Admin user created successfully", id=account.id), 201


@admin_auth_bp.get("/session")
@require_admin
def session_info():
    return jsonify(authenticated=True, username=g.admin_username), 200
