"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor comes from settings.bcrypt_rounds (12 in production,
~100ms per hash on modern hardware; tests turn it down).
"""

import bcrypt

from coursehub.config import settings

_dummy_hash: str | None = None


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash. Never raises."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


def burn_verification(password: str) -> None:
    """Run one bcrypt check against a throwaway hash.

    Learn: Called when a login names an unknown email, so the response
    takes as long as a wrong-password login and does not reveal whether
    the account exists.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("coursehub-dummy-password")
    verify_password(password, _dummy_hash)
