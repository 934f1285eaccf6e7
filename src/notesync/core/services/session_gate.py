"""Session gate: turns identity changes into synchronizer start/stop calls."""

from enum import Enum
from typing import Callable, Optional, Tuple

from ..logging import get_logger
from ..schemas.auth import Identity
from ..state import EventStream, Unsubscribe
from .interfaces import IIdentityProvider, INoteSynchronizer, ISessionGate

logger = get_logger("session")

Transition = Tuple[Optional[Identity], Optional[Identity]]


class GateState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionGate(ISessionGate):
    """Two-state machine (anonymous / authenticated) driven by the identity provider.

    Only a change of uid reaches the synchronizer; repeated notifications for
    the same identity are ignored.
    """

    def __init__(self, identity_provider: IIdentityProvider, synchronizer: INoteSynchronizer):
        self.identity_provider = identity_provider
        self.synchronizer = synchronizer
        self._identity: Optional[Identity] = None
        self._unregister: Optional[Unsubscribe] = None
        self._transitions: EventStream[Transition] = EventStream(name="identity-transitions")

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def state(self) -> GateState:
        return GateState.AUTHENTICATED if self._identity is not None else GateState.ANONYMOUS

    @property
    def is_open(self) -> bool:
        return self._unregister is not None

    def add_transition_listener(self, listener: Callable[[Transition], None]) -> Unsubscribe:
        """Observe (previous, current) identity pairs on every real transition."""
        return self._transitions.subscribe(listener)

    def open(self) -> None:
        """Start listening to the identity provider."""
        if self._unregister is not None:
            return
        logger.debug("Session gate opened")
        # The provider may call back immediately with the current identity
        self._unregister = self.identity_provider.add_identity_listener(self.on_identity_changed)

    def on_identity_changed(self, identity: Optional[Identity]) -> None:
        previous = self._identity

        if identity is not None:
            if previous is not None and previous.uid == identity.uid:
                return
            self._identity = identity
            logger.info("Identity acquired", extra={"uid": identity.uid})
            self.synchronizer.start(identity.uid)
        else:
            if previous is None:
                return
            self._identity = None
            logger.info("Identity lost", extra={"uid": previous.uid})
            self.synchronizer.stop()

        self._transitions.emit((previous, identity))

    def close(self) -> None:
        """Unregister from the provider and stop the synchronizer. Idempotent."""
        unregister, self._unregister = self._unregister, None
        if unregister is not None:
            unregister()
            logger.debug("Session gate closed")

        previous, self._identity = self._identity, None
        self.synchronizer.stop()
        if previous is not None:
            self._transitions.emit((previous, None))
