"""Password hashing with bcrypt."""

from functools import cached_property

import bcrypt

from app.config import get_settings

# bcrypt only looks at the first 72 bytes and newer releases reject longer input.
BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted adaptive hashing for stored passwords."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh salt. Two calls never return the same string."""
        return bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """Check a password against a stored hash. Malformed hashes verify as False."""
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_encode(plaintext), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    @cached_property
    def _dummy_hash(self) -> str:
        return self.hash("dummy-password-for-timing")

    def verify_dummy(self, plaintext: str) -> bool:
        """Spend the same work as a real verification and fail.

        Used when the username does not exist, so that lookup misses take
        about as long as wrong passwords.
        """
        self.verify(plaintext, self._dummy_hash)
        return False


_password_hasher: PasswordHasher | None = None


def get_password_hasher() -> PasswordHasher:
    """Get singleton password hasher instance."""
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = PasswordHasher(rounds=get_settings().BCRYPT_WORK_FACTOR)
    return _password_hasher
