"""Password and token hashing helpers."""

import hashlib
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timezone

import bcrypt

from ideaportal.core.config import settings

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class PasswordHasher(ABC):
    """Strategy for one-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return a salted hash of the password."""

    @abstractmethod
    def verify(self, password: str, hashed: str) -> bool:
        """Check a password against a stored hash."""


class BcryptPasswordHasher(PasswordHasher):
    """bcrypt with a fixed cost factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        pwd_bytes = password.encode("utf-8")
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(pwd_bytes, salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        pwd_bytes = password.encode("utf-8")
        if len(pwd_bytes) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(pwd_bytes, hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False


password_hasher: PasswordHasher = BcryptPasswordHasher(rounds=settings.BCRYPT_ROUNDS)


def generate_token(nbytes: int = 32) -> str:
    """Return a URL-safe random token built from ``nbytes`` random bytes."""
    return secrets.token_urlsafe(nbytes)


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a token; only this is ever persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def tokens_match(token: str, token_hash: str) -> bool:
    """Constant-time comparison of a raw token against a stored hash."""
    return secrets.compare_digest(hash_token(token), token_hash)


def utc_now() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
