"""
Admin authentication.

Two strategies share one decision order:

1. per-IP rate limit (checked before anything else)
2. ``Authorization: Basic`` header parsing
3. database accounts, with per-account lockout (``DatabaseBackedAuth`` only)
4. the ``ADMIN_USER`` / ``ADMIN_PASS`` pair from the environment

``build_authenticator`` picks the strategy once, when the app is created.
Every outcome other than success is raised as an ``AuthError``.
"""
import base64
import binascii
import hmac
import logging
from datetime import datetime
from functools import lru_cache
from typing import Callable, Tuple

from security.bruteforce import (
    LOCKOUT_MINUTES,
    MAX_LOGIN_ATTEMPTS,
    lock_status,
    register_failure,
    reset_attempts,
)
from security.errors import (
    AccountLocked,
    InvalidCredentials,
    InvalidFormat,
    MissingCredentials,
    RateLimited,
    ServerMisconfigured,
    StoreUnavailable,
)
from security.password import DEFAULT_ROUNDS, hash_password, verify_password
from security.rate_limit import RateLimiter
from utils.clock import utcnow

logger = logging.getLogger(__name__)


def parse_basic_auth(header: str) -> Tuple[str, str]:
    if not header or not header.startswith("Basic "):
        raise MissingCredentials()

    try:
        decoded = base64.b64decode(header[6:].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise MissingCredentials()

    username, _, password = decoded.partition(":")
    if not username or not password:
        raise InvalidFormat()
    return username, password


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    return hash_password("not-an-admin-password", rounds)


def _secret_equals(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


class _Authenticator:
    uses_database = False

    def __init__(self, rate_limiter: RateLimiter, admin_user: str = None, admin_pass: str = None):
        self.rate_limiter = rate_limiter
        self.admin_user = admin_user
        self.admin_pass = admin_pass

    def check_rate_limit(self, ip: str) -> None:
        status = self.rate_limiter.check(ip)
        if not status.allowed:
            raise RateLimited(status.retry_after_seconds)

    def authenticate(self, header: str, ip: str) -> str:
        """Authenticate a request's Authorization header. Returns the username."""
        self.check_rate_limit(ip)
        username, password = parse_basic_auth(header)
        return self.verify(username, password, ip)

    def verify(self, username: str, password: str, ip: str) -> str:
        raise NotImplementedError

    @property
    def env_configured(self) -> bool:
        return bool(self.admin_user and self.admin_pass)

    def _verify_env(self, username: str, password: str, ip: str) -> str:
        if not self.env_configured:
            logger.error("Admin credentials not configured")
            raise ServerMisconfigured()

        # evaluate both so a wrong username costs the same as a wrong password
        user_ok = _secret_equals(username, self.admin_user)
        pass_ok = _secret_equals(password, self.admin_pass)
        if not (user_ok and pass_ok):
            self.rate_limiter.record_failure(ip)
            raise InvalidCredentials()

        self.rate_limiter.clear(ip)
        return username


class EnvBackedAuth(_Authenticator):
    """Single admin from ADMIN_USER / ADMIN_PASS, no database."""

    def verify(self, username: str, password: str, ip: str) -> str:
        return self._verify_env(username, password, ip)


class DatabaseBackedAuth(_Authenticator):
    """
    Accounts from the credential store, falling back to the environment
    pair for usernames the store does not know.
    """

    uses_database = True

    def __init__(
        self,
        store,
        rate_limiter: RateLimiter,
        admin_user: str = None,
        admin_pass: str = None,
        allow_env_fallback: bool = True,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        lockout_minutes: int = LOCKOUT_MINUTES,
        password_rounds: int = DEFAULT_ROUNDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(rate_limiter, admin_user, admin_pass)
        self.store = store
        self.allow_env_fallback = allow_env_fallback
        self.max_attempts = max_attempts
        self.lockout_minutes = lockout_minutes
        self.password_rounds = password_rounds
        self._clock = clock

    def verify(self, username: str, password: str, ip: str) -> str:
        try:
            account = self.store.find_account_by_username(username)
        except StoreUnavailable:
            if not self.allow_env_fallback:
                logger.exception("Database auth error, environment fallback disabled")
                raise ServerMisconfigured()
            logger.exception("Database auth error, trying environment credentials")
            return self._verify_env(username, password, ip)

        if account is not None:
            return self.verify_account(account, password, ip)

        # unknown usernames pay for a bcrypt compare like known ones
        verify_password(password, _dummy_hash(self.password_rounds))

        if self.allow_env_fallback and self.env_configured:
            return self._verify_env(username, password, ip)

        self.rate_limiter.record_failure(ip)
        raise InvalidCredentials()

    def ensure_not_locked(self, account) -> None:
        locked, minutes = lock_status(account, self._clock())
        if locked:
            raise AccountLocked(minutes)

    def verify_account(self, account, password: str, ip: str) -> str:
        # a locked account is refused before any hash comparison
        self.ensure_not_locked(account)

        if verify_password(password, account.password_hash):
            try:
                reset_attempts(self.store, account)
            except StoreUnavailable:
                logger.exception("Could not reset failed attempts for %s", account.username)
            self.rate_limiter.clear(ip)
            return account.username

        self.rate_limiter.record_failure(ip)
        try:
            _, locked_now = register_failure(
                self.store,
                account,
                self._clock(),
                max_attempts=self.max_attempts,
                lockout_minutes=self.lockout_minutes,
            )
        except StoreUnavailable:
            logger.exception("Could not record failed attempt for %s", account.username)
            locked_now = False

        if locked_now:
            raise AccountLocked(self.lockout_minutes)
        raise InvalidCredentials()


def build_authenticator(config, store, rate_limiter: RateLimiter, clock: Callable[[], datetime] = utcnow):
    admin_user = config.get("ADMIN_USER")
    admin_pass = config.get("ADMIN_PASS")

    if store is None:
        if not (admin_user and admin_pass):
            logger.warning("No database and no ADMIN_USER/ADMIN_PASS: every admin login will fail")
        return EnvBackedAuth(rate_limiter, admin_user, admin_pass)

    return DatabaseBackedAuth(
        store,
        rate_limiter,
        admin_user=admin_user,
        admin_pass=admin_pass,
        allow_env_fallback=config.get("ALLOW_ENV_FALLBACK", True),
        max_attempts=config.get("MAX_LOGIN_ATTEMPTS", MAX_LOGIN_ATTEMPTS),
        lockout_minutes=config.get("LOCKOUT_MINUTES", LOCKOUT_MINUTES),
        password_rounds=config.get("BCRYPT_ROUNDS", DEFAULT_ROUNDS),
        clock=clock,
    )
