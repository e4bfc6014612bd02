import re
from typing import List, Tuple

from flask import current_app

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SYMBOL = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

COMMON_PASSWORDS = {
    "password",
    "12345678",
    "admin123",
    "password123",
    "qwerty123",
}

_DEFAULTS = {
    "PASSWORD_MIN_LEN": 8,
    "PASSWORD_MAX_LEN": 128,
}


def _cfg(name: str):
    try:
        return current_app.config.get(name, _DEFAULTS[name])
    except RuntimeError:
        # outside an app context (CLI helpers, unit tests)
        return _DEFAULTS[name]

def validate_password(pw: str) -> Tuple[bool, List[str]]:
    errors: List[str] = []

    if not isinstance(pw, str):
        return False, ["Password must be a string"]

    min_len = int(_cfg("PASSWORD_MIN_LEN"))
    max_len = int(_cfg("PASSWORD_MAX_LEN"))

    if len(pw) < min_len:
        errors.append(f"Password must be at least {min_len} characters long")
    if len(pw) > max_len:
        errors.append(f"Password must be at most {max_len} characters long")

    if not _UPPER.search(pw):
        errors.append("Password must contain at least one uppercase letter")
    if not _LOWER.search(pw):
        errors.append("Password must contain at least one lowercase letter")
    if not _DIGIT.search(pw):
        errors.append("Password must contain at least one number")
    if not _SYMBOL.search(pw):
        errors.append("Password must contain at least one special character")

    if pw.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common. Please choose a stronger password")

    return (len(errors) == 0), errors
