"""
Pydantic schemas for notes, identities and the sign-in/registration flows.
"""

from .auth import Identity, Profile, RegisterRequest, SignInRequest, SignInResult
from .notes import Note, NoteRecord

__all__ = [
    # Note schemas
    "Note",
    "NoteRecord",
    # Auth schemas
    "Identity",
    "Profile",
    "SignInRequest",
    "RegisterRequest",
    "SignInResult",
]
