"""Backend implementations of the identity, document and profile store interfaces."""

from .memory import (
    InMemoryDocumentStore,
    InMemoryIdentityProvider,
    InMemoryProfileStore,
    MemorySubscription,
)

__all__ = [
    "InMemoryDocumentStore",
    "InMemoryIdentityProvider",
    "InMemoryProfileStore",
    "MemorySubscription",
]
