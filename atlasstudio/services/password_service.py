"""
Password hashing for local accounts.
"""
from passlib.context import CryptContext

from atlasstudio.config import settings

# bcrypt only hashes the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordService:
    """Hashes and verifies local account passwords."""

    def __init__(self, rounds: int | None = None):
        self.context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds or settings.BCRYPT_ROUNDS,
        )

    @staticmethod
    def is_too_long(password: str) -> bool:
        """True when bcrypt would silently drop part of password."""
        return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Return True when password matches; a missing hash or an over-long password never matches."""
        if not password_hash or self.is_too_long(password):
            return False
        return self.context.verify(password, password_hash)


password_service = PasswordService()
