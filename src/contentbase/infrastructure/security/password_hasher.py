"""Hashing of password field values using Argon2.

Password fields never store or return plaintext: values are hashed on
write and read back as an empty string.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

_hasher = PasswordHasher()

ARGON2_PREFIX = "$argon2"


def hash_password(password: str) -> str:
    """Hash a password field value using Argon2id.

    Example:
        >>> hash_password("s3cret").startswith("$argon2id$")
        True
    """
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a plaintext value against a stored hash."""
    try:
        _hasher.verify(hashed, password)
        return True
    except (VerifyMismatchError, InvalidHashError):
        return False


def is_password_hash(value: str) -> bool:
    """Whether a value is already an Argon2 hash (e.g. from an export)."""
    return value.startswith(ARGON2_PREFIX)
