"""Password hashing for local accounts."""

import bcrypt


def hash_password(password: str) -> str:
    """Return a bcrypt hash suitable for ``User.password_hash``."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a login attempt against a stored bcrypt hash.

    Malformed hashes count as a mismatch rather than an error so a
    corrupted row cannot turn a login into a 500.
    """
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
