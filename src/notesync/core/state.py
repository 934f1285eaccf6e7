"""Observable holders used to expose client state to the UI layer."""

import logging
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class EventStream(Generic[T]):
    """Fan-out of events to registered listeners.

    A failing listener is logged and skipped; it never breaks delivery to the
    others or the code that emitted the event.
    """

    def __init__(self, name: str = "events"):
        self.name = name
        self._listeners: List[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # already removed

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, event: T) -> None:
        # Snapshot the list so listeners may unsubscribe while being called
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener on %s raised", self.name)


class ObservableState(EventStream[T]):
    """A current value plus change notifications (a StateFlow, in UI terms).

    Assignment replaces the value in one step, so readers only ever see a
    complete old value or a complete new one.
    """

    def __init__(self, initial: T, name: str = "state"):
        super().__init__(name)
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self.emit(value)

    def subscribe(self, listener: Callable[[T], None], *, replay: bool = False) -> Unsubscribe:
        """Register a listener; with ``replay`` it is called with the current value first."""
        unsubscribe = super().subscribe(listener)
        if replay:
            try:
                listener(self._value)
            except Exception:
                logger.exception("Listener on %s raised", self.name)
        return unsubscribe
