"""Password hashing utilities."""

from typing import Iterable, Optional

from passlib.context import CryptContext

from ..config import get_settings


def build_context(schemes: Optional[Iterable[str]] = None) -> CryptContext:
    """Create a hashing context for the given passlib schemes (settings by default).

    The first scheme hashes new passwords; the others are only verified and
    reported as needing an update.
    """
    return CryptContext(schemes=list(schemes or get_settings().password_schemes), deprecated="auto")


def hash_password(password: str, context: CryptContext) -> str:
    """Hash a password."""
    return context.hash(password)


def verify_password(plain_password: str, hashed_password: str, context: CryptContext) -> bool:
    """Verify a password against its hash."""
    return context.verify(plain_password, hashed_password)


def needs_update(hashed_password: str, context: CryptContext) -> bool:
    """Check if password hash needs updating."""
    return context.needs_update(hashed_password)
