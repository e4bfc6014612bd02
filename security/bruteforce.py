import logging
import math
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

MAX_LOGIN_ATTEMPTS = 5
LOCKOUT_MINUTES = 15


def lock_status(account, now: datetime) -> tuple[bool, int]:
    """
    Returns (locked, minutes_remaining)
    """
    if account.locked_until is None or account.locked_until <= now:
        return False, 0

    minutes = math.ceil((account.locked_until - now).total_seconds() / 60)
    return True, max(minutes, 1)

def register_failure(
    store,
    account,
    now: datetime,
    max_attempts: int = MAX_LOGIN_ATTEMPTS,
    lockout_minutes: int = LOCKOUT_MINUTES,
) -> tuple[int, bool]:
    """
    Increments the account's failure counter. Returns (fail_count, locked_now)
    """
    fail_count = (account.failed_login_attempts or 0) + 1

    locked_now = fail_count >= max_attempts
    locked_until = now + timedelta(minutes=lockout_minutes) if locked_now else None

    store.update_account(
        account.id,
        failed_login_attempts=fail_count,
        locked_until=locked_until,
    )
    if locked_now:
        logger.warning(
            "Admin account %s locked for %d minutes after %d failed attempts",
            account.username, lockout_minutes, fail_count,
        )
    return fail_count, locked_now

def reset_attempts(store, account) -> None:
    """
    Clears failure counter and lock after a successful login.
    """
    if not account.failed_login_attempts and account.locked_until is None:
        return
    store.update_account(account.id, failed_login_attempts=0, locked_until=None)
