"""Security utilities."""

from .password import build_context, hash_password, needs_update, verify_password

__all__ = [
    "build_context",
    "hash_password",
    "verify_password",
    "needs_update",
]
