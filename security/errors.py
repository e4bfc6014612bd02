"""
Closed set of denials the auth layer hands back to request handlers.

Each error knows the HTTP status it maps to and the short, human readable
message shown to the caller. Internal failures (``StoreUnavailable``) never
reach a response body.
"""


class AuthError(Exception):
    status_code = 401
    message = "Unauthorized"

    def __init__(self, message=None, **payload):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.payload = payload

    def to_dict(self) -> dict:
        body = {"error": self.message}
        body.update(self.payload)
        return body


class MissingCredentials(AuthError):
    message = "Missing or invalid authorization header"


class InvalidFormat(AuthError):
    message = "Invalid credentials format"


class InvalidCredentials(AuthError):
    # Same message for unknown user and wrong password
    message = "Invalid username or password"


class AccountLocked(AuthError):
    status_code = 423

    def __init__(self, retry_minutes: int):
        super().__init__(
            f"Account locked due to too many failed attempts. Try again in {retry_minutes} minutes.",
            retryAfterMinutes=retry_minutes,
        )
        self.retry_minutes = retry_minutes


class RateLimited(AuthError):
    status_code = 429

    def __init__(self, retry_after_seconds: int):
        minutes = -(-retry_after_seconds // 60)
        super().__init__(
            f"Too many failed attempts. Please try again in {minutes} minutes.",
            retryAfterMinutes=minutes,
        )
        self.retry_after_seconds = retry_after_seconds


class WeakPassword(AuthError):
    status_code = 400

    def __init__(self, errors: list[str]):
        super().__init__("Password validation failed", details=list(errors))
        self.errors = list(errors)


class BadRequest(AuthError):
    status_code = 400
    message = "Bad request"


class AccountExists(AuthError):
    status_code = 409
    message = "Admin user already exists. Use change password instead."


class ServerMisconfigured(AuthError):
    status_code = 500
    message = "Server configuration error. Please contact administrator."


class DatabaseRequired(AuthError):
    status_code = 503
    message = "Database not configured. Please set up database and run migrations first."


class StoreUnavailable(Exception):
    """The credential store failed. Internal only."""


class DatabaseFeatureUnavailable(AuthError):
    status_code = 501
    message = "This operation requires a database."
