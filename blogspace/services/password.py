"""Password hashing helpers."""

import bcrypt


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    A malformed hash raises ``ValueError`` from bcrypt; that is a data problem,
    not a wrong password, so it is left to propagate.
    """
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
