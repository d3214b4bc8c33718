"""Password hashing for password field values and delete confirmation."""

from contentbase.infrastructure.security.password_confirmation import PasswordConfirmation
from contentbase.infrastructure.security.password_hasher import (
    hash_password,
    is_password_hash,
    verify_password,
)

__all__ = ["PasswordConfirmation", "hash_password", "is_password_hash", "verify_password"]
