"""
Service interfaces for NoteSync.

The first group describes the external collaborators (identity provider,
document store, profile store); the second the services built on top of them.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

from ..schemas.auth import Identity, RegisterRequest, SignInRequest, SignInResult
from ..schemas.notes import Note
from ..state import Unsubscribe


class DocumentSnapshot(NamedTuple):
    """One document as delivered by a live query."""

    id: str
    data: Mapping[str, Any]


# listener(documents, error): exactly one of the two is set
SnapshotListener = Callable[[Optional[List[DocumentSnapshot]], Optional[Exception]], None]
IdentityListener = Callable[[Optional[Identity]], None]


class ISubscription(ABC):
    """Handle on a live query."""

    @abstractmethod
    def close(self) -> None:
        """Stop delivery. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        pass


class IDocumentStore(ABC):
    """Managed document store with real-time queries."""

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> ISubscription:
        """Open a live query; the listener gets every matching snapshot until closed."""
        pass

    @abstractmethod
    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        """Add a document and return the id minted for it."""
        pass

    @abstractmethod
    async def set(self, collection: str, doc_id: str, record: Dict[str, Any]) -> None:
        """Overwrite the whole document at doc_id."""
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document."""
        pass


class IProfileStore(ABC):
    """Keyed profile records, read at sign-in and written at registration."""

    @abstractmethod
    async def get(self, uid: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def put(self, uid: str, data: Dict[str, Any]) -> None:
        pass


class IIdentityProvider(ABC):
    """Third-party authentication service."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in; raises AuthenticationError on bad credentials."""
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Identity:
        """Create an account and sign it in."""
        pass

    @abstractmethod
    def sign_out(self) -> None:
        pass

    @abstractmethod
    def current_identity(self) -> Optional[Identity]:
        pass

    @abstractmethod
    def add_identity_listener(self, listener: IdentityListener) -> Unsubscribe:
        """Register for identity changes; returns the unregister callable."""
        pass


class INoteSynchronizer(ABC):
    """Live projection of one identity's notes."""

    @property
    @abstractmethod
    def notes(self) -> Tuple[Note, ...]:
        """Current projected list, newest first."""
        pass

    @abstractmethod
    def start(self, owner_id: str) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    async def save(self, note: Note) -> str:
        """Create or overwrite a note; returns its id."""
        pass

    @abstractmethod
    async def delete(self, note_id: str) -> None:
        pass


class ISessionGate(ABC):
    """Drives the synchronizer from identity changes."""

    @abstractmethod
    def open(self) -> None:
        pass

    @abstractmethod
    def on_identity_changed(self, identity: Optional[Identity]) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class IAuthService(ABC):
    """Sign-in and registration flows."""

    @abstractmethod
    async def sign_in(self, request: SignInRequest) -> SignInResult:
        pass

    @abstractmethod
    async def register(self, request: RegisterRequest) -> Identity:
        pass

    @abstractmethod
    def sign_out(self) -> None:
        pass
