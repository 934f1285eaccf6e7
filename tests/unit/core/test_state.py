"""Unit tests for observable holders (src/notesync/core/state.py)."""

from notesync.core.state import EventStream, ObservableState


class TestEventStream:
    def test_emit_reaches_all_listeners_in_order(self):
        stream = EventStream()
        seen = []
        stream.subscribe(lambda e: seen.append(("a", e)))
        stream.subscribe(lambda e: seen.append(("b", e)))

        stream.emit(1)

        assert seen == [("a", 1), ("b", 1)]

    def test_unsubscribe_twice_is_harmless(self):
        stream = EventStream()
        unsubscribe = stream.subscribe(lambda e: None)

        unsubscribe()
        unsubscribe()

        assert stream.listener_count == 0

    def test_listener_may_unsubscribe_during_emit(self):
        stream = EventStream()
        seen = []
        holder = {}

        def once(event):
            seen.append(event)
            holder["unsub"]()

        holder["unsub"] = stream.subscribe(once)
        stream.emit(1)
        stream.emit(2)

        assert seen == [1]

    def test_failing_listener_is_skipped(self, caplog):
        stream = EventStream(name="notes")
        seen = []

        def broken(_):
            raise ValueError("boom")

        stream.subscribe(broken)
        stream.subscribe(seen.append)

        stream.emit("x")

        assert seen == ["x"]
        assert "Listener on notes raised" in caplog.text


class TestObservableState:
    def test_value_and_notifications(self):
        state = ObservableState((), name="notes")
        seen = []
        state.subscribe(seen.append)

        state.set((1, 2))

        assert state.value == (1, 2)
        assert seen == [(1, 2)]

    def test_replay_delivers_current_value(self):
        state = ObservableState("initial")
        seen = []

        state.subscribe(seen.append, replay=True)

        assert seen == ["initial"]


def test_unsubscribe_alias_is_shared_with_interfaces():
    from notesync.core.services import interfaces
    from notesync.core import state

    assert interfaces.Unsubscribe is state.Unsubscribe
