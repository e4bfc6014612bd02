import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # Optional. Without a database only the ADMIN_USER/ADMIN_PASS pair can log in.
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bootstrap / legacy admin credentials
    ADMIN_USER = os.getenv("ADMIN_USER")
    ADMIN_PASS = os.getenv("ADMIN_PASS")

    # Fall back to ADMIN_USER/ADMIN_PASS when a username is not in the database
    ALLOW_ENV_FALLBACK = os.getenv("ALLOW_ENV_FALLBACK", "true").lower() == "true"

    # bcrypt work factor
    BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 12)

    # Account lockout
    MAX_LOGIN_ATTEMPTS = 5
    LOCKOUT_MINUTES = 15

    # Per-IP fixed window on failed attempts
    LOGIN_RATE_WINDOW_SECONDS = 15 * 60
    LOGIN_RATE_MAX_ATTEMPTS = 5

    # Password policy
    PASSWORD_MIN_LEN = 8
    PASSWORD_MAX_LEN = 128

    DEBUG = False
