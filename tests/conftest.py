"""Shared pytest fixtures: fake collaborators recording every call."""

import logging

import pytest

from notesync.config import Settings
from notesync.core.exceptions import StoreError
from notesync.core.services.interfaces import (
    DocumentSnapshot,
    IDocumentStore,
    IIdentityProvider,
    IProfileStore,
    ISubscription,
)
from notesync.core.services.note_synchronizer import NoteSynchronizer

# Keep passlib's backend probing out of the test output
logging.getLogger("passlib").setLevel(logging.WARNING)

FIXED_NOW = 1_700_000_000_000


def docs(*records):
    """Build a snapshot from dicts carrying their own "id" key."""
    out = []
    for r in records:
        body = dict(r)
        doc_id = body.pop("id")
        out.append(DocumentSnapshot(doc_id, body))
    return out


class FakeSubscription(ISubscription):
    def __init__(self, collection, listener, filters, order_by, descending):
        self.collection = collection
        self.listener = listener
        self.filters = filters
        self.order_by = order_by
        self.descending = descending
        self.close_calls = 0

    @property
    def closed(self):
        return self.close_calls > 0

    def close(self):
        self.close_calls += 1

    # Test helpers: push events regardless of closed state, like a late callback would
    def push(self, documents):
        self.listener(documents, None)

    def fail(self, error):
        self.listener(None, error)


class FakeDocumentStore(IDocumentStore):
    def __init__(self):
        self.subscriptions = []
        self.created = []
        self.sets = []
        self.deleted = []
        self.fail_with = {}
        self.next_id = 0

    @property
    def current(self):
        return self.subscriptions[-1]

    def subscribe(self, collection, listener, *, filters=None, order_by=None, descending=False):
        if "subscribe" in self.fail_with:
            raise self.fail_with["subscribe"]
        sub = FakeSubscription(collection, listener, filters, order_by, descending)
        self.subscriptions.append(sub)
        return sub

    async def create(self, collection, record):
        if "create" in self.fail_with:
            raise self.fail_with["create"]
        self.next_id += 1
        doc_id = f"new-{self.next_id}"
        self.created.append((collection, doc_id, record))
        return doc_id

    async def set(self, collection, doc_id, record):
        if "set" in self.fail_with:
            raise self.fail_with["set"]
        self.sets.append((collection, doc_id, record))

    async def delete(self, collection, doc_id):
        if "delete" in self.fail_with:
            raise self.fail_with["delete"]
        self.deleted.append((collection, doc_id))


class FakeIdentityProvider(IIdentityProvider):
    def __init__(self, current=None):
        self.current = current
        self.listeners = []
        self.sign_in_result = None
        self.sign_up_result = None
        self.error = None
        self.calls = []

    async def sign_in(self, email, password):
        self.calls.append(("sign_in", email, password))
        if self.error:
            raise self.error
        return self.sign_in_result

    async def sign_up(self, email, password):
        self.calls.append(("sign_up", email, password))
        if self.error:
            raise self.error
        return self.sign_up_result

    def sign_out(self):
        self.calls.append(("sign_out",))
        self.emit(None)

    def current_identity(self):
        return self.current

    def add_identity_listener(self, listener):
        self.listeners.append(listener)
        listener(self.current)

        def unregister():
            self.listeners.remove(listener)

        return unregister

    def emit(self, identity):
        self.current = identity
        for listener in list(self.listeners):
            listener(identity)


class FakeProfileStore(IProfileStore):
    def __init__(self, profiles=None):
        self.profiles = dict(profiles or {})
        self.gets = []
        self.puts = []
        self.error = None

    async def get(self, uid):
        self.gets.append(uid)
        if self.error:
            raise self.error
        return self.profiles.get(uid)

    async def put(self, uid, data):
        if self.error:
            raise self.error
        self.puts.append((uid, data))
        self.profiles[uid] = data


class FakeSynchronizer:
    """Records start/stop calls made by the session gate."""

    def __init__(self):
        self.calls = []

    def start(self, owner_id):
        self.calls.append(("start", owner_id))

    def stop(self):
        self.calls.append(("stop",))


@pytest.fixture
def test_settings():
    return Settings(debug=True, log_level="DEBUG", environment="test")


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def synchronizer(store, test_settings):
    return NoteSynchronizer(store, test_settings, clock=lambda: FIXED_NOW)


@pytest.fixture
def store_error():
    return StoreError("permission denied")
