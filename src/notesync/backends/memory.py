"""
In-memory backends for the identity provider, document store and profile store.

They behave like the managed services closely enough for local runs, demos
and tests: live queries deliver an initial snapshot and one snapshot per
mutation, asynchronously and in order, on the running event loop.
"""

import asyncio
import copy
from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from ..config import Settings, get_settings
from ..core.exceptions import AuthenticationError, StoreError
from ..core.logging import get_logger
from ..core.schemas.auth import Identity
from ..core.services.interfaces import (
    DocumentSnapshot,
    IDocumentStore,
    IdentityListener,
    IIdentityProvider,
    IProfileStore,
    ISubscription,
    SnapshotListener,
)
from ..core.state import EventStream, Unsubscribe
from ..security import build_context, hash_password, needs_update, verify_password

logger = get_logger("backends.memory")


class _FailureInjection:
    """Queue of one-shot failures per operation name."""

    def __init__(self):
        self._failures: Dict[str, Deque[Exception]] = defaultdict(deque)

    def fail_next(self, operation: str, error: Optional[Exception] = None) -> None:
        """Make the next call of ``operation`` raise ``error``."""
        self._failures[operation].append(error or StoreError(f"Injected {operation} failure"))

    def _maybe_fail(self, operation: str) -> None:
        queue = self._failures.get(operation)
        if queue:
            raise queue.popleft()


def _order_key(value: Any) -> Tuple[int, Any]:
    # Numbers sort before strings, like the managed store's cross-type ordering
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))


class MemorySubscription(ISubscription):
    """Live query over one collection of an InMemoryDocumentStore."""

    def __init__(
        self,
        store: "InMemoryDocumentStore",
        collection: str,
        listener: SnapshotListener,
        filters: Mapping[str, Any],
        order_by: Optional[str],
        descending: bool,
    ):
        self.store = store
        self.collection = collection
        self.listener = listener
        self.filters = dict(filters)
        self.order_by = order_by
        self.descending = descending
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.store._detach(self)

    def query(self, documents: Mapping[str, Dict[str, Any]]) -> List[DocumentSnapshot]:
        """Evaluate the filter and ordering against the current documents."""
        matched = [
            (doc_id, data)
            for doc_id, data in documents.items()
            if all(data.get(field) == expected for field, expected in self.filters.items())
        ]
        if self.order_by is not None:
            # Documents without the ordering field are not part of an ordered query
            matched = [(doc_id, data) for doc_id, data in matched if self.order_by in data]
            matched.sort(key=lambda item: _order_key(item[1][self.order_by]), reverse=self.descending)
        return [DocumentSnapshot(doc_id, copy.deepcopy(data)) for doc_id, data in matched]

    def deliver(self, documents: Optional[List[DocumentSnapshot]], error: Optional[Exception]) -> None:
        if self._closed:
            return
        try:
            self.listener(documents, error)
        except Exception:
            logger.exception("Snapshot listener raised", extra={"collection": self.collection})


class InMemoryDocumentStore(_FailureInjection, IDocumentStore):
    """Collections of dict documents with real-time queries.

    Requires a running asyncio loop for subscriptions.
    """

    def __init__(self):
        super().__init__()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self._subscriptions: Dict[str, List[MemorySubscription]] = defaultdict(list)

    def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> MemorySubscription:
        self._maybe_fail("subscribe")
        self._loop()
        subscription = MemorySubscription(self, collection, listener, filters or {}, order_by, descending)
        self._subscriptions[collection].append(subscription)
        self._schedule(subscription)
        logger.debug("Subscription opened", extra={"collection": collection, "filters": subscription.filters})
        return subscription

    def _detach(self, subscription: MemorySubscription) -> None:
        try:
            self._subscriptions[subscription.collection].remove(subscription)
        except ValueError:
            pass

    def _loop(self) -> asyncio.AbstractEventLoop:
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise StoreError("InMemoryDocumentStore needs a running event loop") from e

    def _schedule(self, subscription: MemorySubscription) -> None:
        # Evaluated now, delivered later: each snapshot reflects the store at mutation time
        documents = subscription.query(self._collections[subscription.collection])
        self._loop().call_soon(subscription.deliver, documents, None)

    def _notify(self, collection: str) -> None:
        for subscription in list(self._subscriptions[collection]):
            self._schedule(subscription)

    def fail_subscriptions(self, error: Optional[Exception] = None, collection: Optional[str] = None) -> None:
        """Deliver an error event to the open subscriptions (of one collection, or all)."""
        error = error or StoreError("Injected subscription failure")
        loop = self._loop()
        for name, subscriptions in list(self._subscriptions.items()):
            if collection is not None and name != collection:
                continue
            for subscription in list(subscriptions):
                loop.call_soon(subscription.deliver, None, error)

    def subscription_count(self, collection: str) -> int:
        return len(self._subscriptions[collection])

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Read one document directly (not part of the live API)."""
        data = self._collections[collection].get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def put_raw(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Store a document body as-is, without validation, and notify subscribers."""
        self._collections[collection][doc_id] = data
        self._notify(collection)

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        self._maybe_fail("create")
        doc_id = uuid4().hex
        self._collections[collection][doc_id] = copy.deepcopy(record)
        self._notify(collection)
        return doc_id

    async def set(self, collection: str, doc_id: str, record: Dict[str, Any]) -> None:
        self._maybe_fail("set")
        if not doc_id:
            raise StoreError("Document id is required")
        self._collections[collection][doc_id] = copy.deepcopy(record)
        self._notify(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        self._maybe_fail("delete")
        documents = self._collections[collection]
        if doc_id not in documents:
            raise StoreError(f"No document {doc_id} in {collection}")
        del documents[doc_id]
        self._notify(collection)


class InMemoryProfileStore(_FailureInjection, IProfileStore):
    """Profiles keyed by uid."""

    def __init__(self):
        super().__init__()
        self._profiles: Dict[str, Dict[str, Any]] = {}

    async def get(self, uid: str) -> Optional[Dict[str, Any]]:
        self._maybe_fail("get")
        data = self._profiles.get(uid)
        return copy.deepcopy(data) if data is not None else None

    async def put(self, uid: str, data: Dict[str, Any]) -> None:
        self._maybe_fail("put")
        self._profiles[uid] = copy.deepcopy(data)


class InMemoryIdentityProvider(_FailureInjection, IIdentityProvider):
    """Email/password accounts with hashed passwords and a single current session."""

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()
        self.settings = settings or get_settings()
        self._context = build_context(self.settings.password_schemes)
        # email -> (uid, password hash)
        self._accounts: Dict[str, Tuple[str, str]] = {}
        self._current: Optional[Identity] = None
        self._listeners: EventStream[Optional[Identity]] = EventStream(name="identity")

    @staticmethod
    def _normalize(email: str) -> str:
        return email.strip().lower()

    def _set_current(self, identity: Optional[Identity]) -> None:
        self._current = identity
        self._listeners.emit(identity)

    async def sign_in(self, email: str, password: str) -> Identity:
        self._maybe_fail("sign_in")
        account = self._accounts.get(self._normalize(email))
        if account is None or not verify_password(password, account[1], self._context):
            raise AuthenticationError("Invalid email or password")

        if needs_update(account[1], self._context):
            # Hashed under a scheme the settings no longer prefer
            account = (account[0], hash_password(password, self._context))
            self._accounts[self._normalize(email)] = account
            logger.debug("Password hash upgraded", extra={"uid": account[0]})

        identity = Identity(uid=account[0], email=self._normalize(email))
        self._set_current(identity)
        return identity

    async def sign_up(self, email: str, password: str) -> Identity:
        self._maybe_fail("sign_up")
        key = self._normalize(email)
        if not key:
            raise AuthenticationError("Email is required")
        if key in self._accounts:
            raise AuthenticationError("Email address is already in use")
        if len(password) < self.settings.min_password_length:
            raise AuthenticationError(
                f"Password should be at least {self.settings.min_password_length} characters"
            )

        uid = uuid4().hex
        self._accounts[key] = (uid, hash_password(password, self._context))
        logger.debug("Account created", extra={"uid": uid})

        # Creating an account signs it in
        identity = Identity(uid=uid, email=key)
        self._set_current(identity)
        return identity

    def sign_out(self) -> None:
        if self._current is not None:
            self._set_current(None)

    def current_identity(self) -> Optional[Identity]:
        return self._current

    def add_identity_listener(self, listener: IdentityListener) -> Unsubscribe:
        unsubscribe = self._listeners.subscribe(listener)
        # Registration reports the current state right away
        listener(self._current)
        return unsubscribe

    @property
    def listener_count(self) -> int:
        return self._listeners.listener_count
