"""Re-entered password check guarding destructive bulk operations."""

from contentbase.core.logging import get_logger
from contentbase.infrastructure.security.password_hasher import verify_password

logger = get_logger(__name__)


class PasswordConfirmation:
    """Checks a re-entered password against the configured Argon2 hash.

    Without a configured hash every password is rejected, so permanent
    bulk deletion stays disabled until an operator sets one.
    """

    def __init__(self, password_hash: str | None) -> None:
        self.password_hash = password_hash

    def verify(self, password: str | None, actor: str | None = None) -> bool:
        if not password or not self.password_hash:
            return False
        if verify_password(password, self.password_hash):
            return True
        logger.warning("Password confirmation failed", actor=actor)
        return False
