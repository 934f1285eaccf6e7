"""
Exception hierarchy for NoteSync.

Remote failures never crash the client: subscription and decode errors are
published to error listeners, write and auth errors are raised to the caller.
"""

from typing import Any, Dict, Optional


class NoteSyncError(Exception):
    """Base class for all NoteSync errors."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StoreError(NoteSyncError):
    """Raised by document/profile store backends when an operation is rejected."""


class SubscriptionError(NoteSyncError):
    """The live query failed. The previous projection stays visible."""


class DecodeError(NoteSyncError):
    """A single record could not be decoded into a note."""

    def __init__(self, message: str, *, record_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record_id = record_id


class WriteError(NoteSyncError):
    """A create, update or delete was rejected."""

    def __init__(self, message: str, *, operation: str, note_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.note_id = note_id


class UnauthenticatedError(NoteSyncError):
    """A write was attempted while no identity is active."""


class AuthenticationError(NoteSyncError):
    """Sign-in, sign-up or profile handling failed."""


class ProfileNotFoundError(AuthenticationError):
    """The identity signed in but has no stored profile."""
