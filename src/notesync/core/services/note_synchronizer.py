"""Live note projection over the document store."""

import time
from typing import Callable, List, Optional, Tuple

from ...config import Settings, get_settings
from ..exceptions import (
    DecodeError,
    NoteSyncError,
    SubscriptionError,
    UnauthenticatedError,
    WriteError,
)
from ..logging import get_logger
from ..schemas.notes import Note
from ..state import EventStream, ObservableState, Unsubscribe
from .interfaces import DocumentSnapshot, IDocumentStore, INoteSynchronizer, ISubscription

logger = get_logger("sync")

OWNER_FIELD = "userId"
ORDER_FIELD = "createdAt"


def now_millis() -> int:
    return int(time.time() * 1000)


class NoteSynchronizer(INoteSynchronizer):
    """Owns one live query for the active owner and the list projected from it.

    The projected list is only ever replaced by the snapshot path and by
    ``stop()``. Writes go to the store and come back through the subscription;
    their completion never touches the list.
    """

    def __init__(
        self,
        store: IDocumentStore,
        settings: Optional[Settings] = None,
        *,
        clock: Callable[[], int] = now_millis,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.collection = self.settings.notes_collection
        self._clock = clock

        self._notes: ObservableState[Tuple[Note, ...]] = ObservableState((), name="notes")
        self._errors: EventStream[NoteSyncError] = EventStream(name="note-errors")

        self._subscription: Optional[ISubscription] = None
        self._owner_id: Optional[str] = None
        # Bumped on every start/stop; snapshots tagged with an older value are dropped
        self._generation = 0

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def notes(self) -> Tuple[Note, ...]:
        return self._notes.value

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    @property
    def is_active(self) -> bool:
        return self._subscription is not None and not self._subscription.closed

    def add_listener(self, listener: Callable[[Tuple[Note, ...]], None], *, replay: bool = False) -> Unsubscribe:
        """Observe the projected list. Every call receives a complete list."""
        return self._notes.subscribe(listener, replay=replay)

    def add_error_listener(self, listener: Callable[[NoteSyncError], None]) -> Unsubscribe:
        """Observe subscription and decode errors."""
        return self._errors.subscribe(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, owner_id: str) -> None:
        """Open the live query for owner_id, replacing any current one."""
        if not owner_id:
            raise ValueError("owner_id is required")

        previous_owner = self._owner_id
        self._close_subscription()
        self._generation += 1
        generation = self._generation
        self._owner_id = owner_id

        # Never show one owner's notes while waiting for another's first snapshot
        if previous_owner is not None and previous_owner != owner_id and self._notes.value:
            self._notes.set(())

        def on_snapshot(documents: Optional[List[DocumentSnapshot]], error: Optional[Exception]) -> None:
            self._handle_snapshot(generation, documents, error)

        logger.info("Opening notes subscription", extra={"owner_id": owner_id, "generation": generation})
        try:
            self._subscription = self.store.subscribe(
                self.collection,
                on_snapshot,
                filters={OWNER_FIELD: owner_id},
                order_by=ORDER_FIELD,
                descending=True,
            )
        except Exception as e:
            self._subscription = None
            self._report(
                SubscriptionError(
                    f"Failed to open notes subscription: {e}",
                    details={"owner_id": owner_id},
                ),
                exc_info=e,
            )

    def stop(self) -> None:
        """Close the live query and clear the projection. Idempotent."""
        self._generation += 1
        was_running = self._subscription is not None or self._owner_id is not None
        self._close_subscription()
        self._owner_id = None

        if self._notes.value:
            self._notes.set(())
        if was_running:
            logger.info("Notes subscription stopped")

    def _close_subscription(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is None:
            return
        try:
            subscription.close()
        except Exception as e:
            # The old handle is already fenced off by the generation bump
            logger.warning(f"Failed to close notes subscription: {e}")

    # ------------------------------------------------------------------
    # Snapshot handling
    # ------------------------------------------------------------------

    def _handle_snapshot(
        self,
        generation: int,
        documents: Optional[List[DocumentSnapshot]],
        error: Optional[Exception],
    ) -> None:
        if generation != self._generation:
            logger.debug(
                "Dropping snapshot from superseded subscription",
                extra={"generation": generation, "current_generation": self._generation},
            )
            return

        if error is not None:
            # Keep the last good projection on screen
            self._report(
                SubscriptionError(
                    f"Notes subscription failed: {error}",
                    details={"owner_id": self._owner_id},
                ),
                exc_info=error,
            )
            return

        notes: List[Note] = []
        for doc in documents or ():
            try:
                notes.append(Note.from_record(doc.id, doc.data))
            except DecodeError as e:
                self._report(e, level="warning")

        # The query already orders by createdAt; a stable re-sort keeps store order for ties
        notes.sort(key=lambda n: n.created_at, reverse=True)
        self._notes.set(tuple(notes))
        logger.debug("Applied notes snapshot", extra={"count": len(notes), "generation": generation})

    def _report(self, error: NoteSyncError, *, level: str = "error", exc_info: Optional[BaseException] = None) -> None:
        log = logger.warning if level == "warning" else logger.error
        log(error.message, extra={"error_type": type(error).__name__, **error.details}, exc_info=exc_info)
        self._errors.emit(error)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _require_owner(self, operation: str) -> str:
        if not self._owner_id:
            logger.warning("Unauthenticated write ignored", extra={"operation": operation})
            raise UnauthenticatedError(f"Cannot {operation} note: no signed-in user")
        return self._owner_id

    def _find(self, note_id: str) -> Optional[Note]:
        return next((n for n in self._notes.value if n.id == note_id), None)

    async def save(self, note: Note) -> str:
        """Create the note if it has no id, otherwise overwrite it.

        The owner is always the active identity. On update, owner and creation
        time come from the projected original, not from ``note``.
        """
        owner_id = self._require_owner("save")

        if not note.id:
            record = Note(
                title=note.title,
                content=note.content,
                owner_id=owner_id,
                created_at=note.created_at or self._clock(),
            ).to_record()
            try:
                doc_id = await self.store.create(self.collection, record)
            except Exception as e:
                logger.error("Failed to create note", extra={"owner_id": owner_id}, exc_info=e)
                raise WriteError(f"Failed to create note: {e}", operation="create") from e
            logger.info("Note created", extra={"note_id": doc_id})
            return doc_id

        original = self._find(note.id)
        if original is None:
            raise WriteError(
                f"Note {note.id} is not among the current user's notes",
                operation="update",
                note_id=note.id,
            )

        # Full overwrite, not a merge
        record = Note(
            title=note.title,
            content=note.content,
            owner_id=original.owner_id,
            created_at=original.created_at,
        ).to_record()
        try:
            await self.store.set(self.collection, note.id, record)
        except Exception as e:
            logger.error("Failed to update note", extra={"note_id": note.id}, exc_info=e)
            raise WriteError(f"Failed to update note: {e}", operation="update", note_id=note.id) from e
        logger.info("Note updated", extra={"note_id": note.id})
        return note.id

    async def delete(self, note_id: str) -> None:
        """Delete a note. The projection changes only when the next snapshot arrives."""
        self._require_owner("delete")
        try:
            await self.store.delete(self.collection, note_id)
        except Exception as e:
            logger.error("Failed to delete note", extra={"note_id": note_id}, exc_info=e)
            raise WriteError(f"Failed to delete note: {e}", operation="delete", note_id=note_id) from e
        logger.info("Note deleted", extra={"note_id": note_id})
