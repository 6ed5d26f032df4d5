"""PIN hashing utilities using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0). A 4-digit PIN has only 10k
possible values, so the hash alone is no protection; the login lockout is
what makes brute force impractical.
"""

import bcrypt

from config.settings import settings


def hash_pin(plain: str) -> str:
    """Hash a plain-text PIN with bcrypt. Returns a utf-8 hash string."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_pin(plain: str, hashed: str) -> bool:
    """Verify a plain-text PIN against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False
