import logging

from security.errors import (
    AccountExists,
    BadRequest,
    DatabaseFeatureUnavailable,
    DatabaseRequired,
    InvalidCredentials,
    WeakPassword,
)
from security.password import hash_password, is_same_password, verify_password
from security.password_policy import validate_password
from utils.clock import utcnow
from utils.validation import validate_username

logger = logging.getLogger(__name__)


def create_admin(store, username: str, password: str, rounds: int = None):
    """
    One-time creation of an admin account. A second call for the same
    username raises AccountExists and leaves the stored hash untouched.
    """
    if store is None:
        raise DatabaseRequired()

    if not username or not password:
        raise BadRequest("Username and password are required")

    valid, error = validate_username(username)
    if not valid:
        raise BadRequest(error)

    valid, errors = validate_password(password)
    if not valid:
        raise WeakPassword(errors)

    if store.find_account_by_username(username) is not None:
        raise AccountExists()

    account = store.create_account(username, hash_password(password, rounds))
    logger.info("Admin account %s created", username)
    return account


def change_password(authenticator, username: str, current_password: str, new_password: str, ip: str, rounds: int = None):
    """
    Replace an admin's password after re-verifying the current one.
    The caller is expected to have checked the rate limit already.
    """
    if not current_password or not new_password or not username:
        raise BadRequest("Current password, new password, and username are required")

    valid, errors = validate_password(new_password)
    if not valid:
        raise WeakPassword(errors)

    if is_same_password(current_password, new_password):
        raise BadRequest("New password must be different from current password")

    if not authenticator.uses_database:
        raise DatabaseFeatureUnavailable(
            "Password change requires database setup. Set up an admin account in the "
            "database or change ADMIN_PASS manually.",
            requiresDatabase=True,
        )

    store = authenticator.store
    account = store.find_account_by_username(username)
    if account is None:
        authenticator.rate_limiter.record_failure(ip)
        raise InvalidCredentials()

    authenticator.ensure_not_locked(account)

    if not verify_password(current_password, account.password_hash):
        authenticator.rate_limiter.record_failure(ip)
        raise InvalidCredentials()

    store.update_account(
        account.id,
        password_hash=hash_password(new_password, rounds),
        last_password_change=utcnow(),
        failed_login_attempts=0,
        locked_until=None,
    )
    logger.info("Password changed for admin %s", username)
    return account


def unlock_admin(store, username: str) -> bool:
    if store is None:
        raise DatabaseRequired()

    account = store.find_account_by_username(username)
    if account is None:
        return False
    store.update_account(account.id, failed_login_attempts=0, locked_until=None)
    return True
