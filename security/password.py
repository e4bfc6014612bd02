import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt ignores everything past 72 bytes; newer releases refuse longer input
_BCRYPT_MAX_BYTES = 72


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain_password: str, rounds: int = None) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    salt = bcrypt.gensalt(rounds=rounds or DEFAULT_ROUNDS)
    hashed = bcrypt.hashpw(_encode(plain_password), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            _encode(plain_password),
            password_hash.encode("utf-8")
        )
    except (ValueError, TypeError):
        # malformed hash
        return False


def is_same_password(first: str, second: str) -> bool:
    """True when bcrypt cannot tell the two passwords apart."""
    return _encode(first) == _encode(second)
