"""
RondaGuard Backend - Secret Hashing
===================================

What:  bcrypt hashing and verification of user secrets.
How:   Secrets are hashed when a user is written and checked at login; the
       plain secret is never stored or logged.
"""

import bcrypt

from rondaguard.config import settings
from rondaguard.exceptions import ValidationError
from rondaguard.schemas.users import MAX_SECRET_BYTES


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """
    Hash a plain-text secret with bcrypt (cost from settings.bcrypt_rounds).

    Raises:
        ValidationError: the secret is longer than bcrypt's 72-byte input
    """
    secret = plain_password.encode("utf-8")
    if len(secret) > MAX_SECRET_BYTES:
        raise ValidationError(
            message=f"password must be at most {MAX_SECRET_BYTES} bytes in UTF-8",
            field="password",
        )
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(secret, salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    """Check a plain-text secret against a stored bcrypt hash."""
    if not password_hash:
        return False
    secret = plain_password.encode("utf-8")
    if len(secret) > MAX_SECRET_BYTES:
        # No stored hash can match a secret that was never hashable
        return False
    try:
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
