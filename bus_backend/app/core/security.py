"""
Password hashing helpers (Argon2).
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

password_hasher = PasswordHasher(encoding="utf-8")


def get_password_hash(password: str) -> str:
    """Hash a plain-text password."""
    return password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain-text password against a stored hash.

    Returns False for a mismatch or a stored value that is not an Argon2 hash.
    """
    if not hashed_password:
        return False
    try:
        return password_hasher.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHashError):
        return False
