import re

_USERNAME = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_username(username: str) -> tuple[bool, str]:
    """
    Returns (valid, error). error is None when valid.
    """
    if not isinstance(username, str) or not username.strip():
        return False, "Username is required"
    if len(username) < 3:
        return False, "Username must be at least 3 characters"
    if len(username) > 50:
        return False, "Username must be less than 50 characters"
    if not _USERNAME.match(username):
        return False, "Username can only contain letters, numbers, underscore, and hyphen"
    return True, None
