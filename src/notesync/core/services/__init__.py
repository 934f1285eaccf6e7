"""
Service layer: collaborator interfaces and the services built on them.
"""

from .interfaces import (
    DocumentSnapshot,
    IAuthService,
    IDocumentStore,
    IIdentityProvider,
    INoteSynchronizer,
    IProfileStore,
    ISessionGate,
    ISubscription,
)

from .auth_service import AuthService
from .note_synchronizer import NoteSynchronizer
from .session_gate import GateState, SessionGate

__all__ = [
    # Collaborator interfaces
    "DocumentSnapshot",
    "IDocumentStore",
    "IIdentityProvider",
    "IProfileStore",
    "ISubscription",

    # Service interfaces
    "IAuthService",
    "INoteSynchronizer",
    "ISessionGate",

    # Implementations
    "AuthService",
    "NoteSynchronizer",
    "SessionGate",
    "GateState",
]
