"""Unit tests for SessionGate (src/notesync/core/services/session_gate.py)."""

from conftest import FakeIdentityProvider, FakeSynchronizer
from notesync.core.schemas.auth import Identity
from notesync.core.services.session_gate import GateState, SessionGate

ALICE = Identity(uid="alice", email="alice@example.com")
BOB = Identity(uid="bob", email="bob@example.com")


def make_gate(current=None):
    provider = FakeIdentityProvider(current=current)
    sync = FakeSynchronizer()
    return SessionGate(provider, sync), provider, sync


class TestSessionGate:
    def test_open_registers_once(self):
        gate, provider, sync = make_gate()

        gate.open()
        gate.open()

        assert len(provider.listeners) == 1
        assert gate.is_open is True
        # anonymous initial report: nothing to stop
        assert sync.calls == []
        assert gate.state is GateState.ANONYMOUS

    def test_open_with_signed_in_user_starts_sync(self):
        gate, provider, sync = make_gate(current=ALICE)

        gate.open()

        assert sync.calls == [("start", "alice")]
        assert gate.state is GateState.AUTHENTICATED
        assert gate.identity == ALICE

    def test_repeated_identity_does_not_restart(self):
        gate, provider, sync = make_gate()
        gate.open()

        provider.emit(ALICE)
        provider.emit(ALICE)
        provider.emit(Identity(uid="alice", email="changed@example.com"))

        assert sync.calls == [("start", "alice")]

    def test_identity_change_restarts_for_new_uid(self):
        gate, provider, sync = make_gate()
        gate.open()

        provider.emit(ALICE)
        provider.emit(BOB)

        assert sync.calls == [("start", "alice"), ("start", "bob")]
        assert gate.identity == BOB

    def test_sign_out_stops_once(self):
        gate, provider, sync = make_gate()
        gate.open()

        provider.emit(ALICE)
        provider.emit(None)
        provider.emit(None)

        assert sync.calls == [("start", "alice"), ("stop",)]
        assert gate.state is GateState.ANONYMOUS

    def test_sign_back_in_after_sign_out(self):
        gate, provider, sync = make_gate()
        gate.open()

        provider.emit(ALICE)
        provider.emit(None)
        provider.emit(ALICE)

        assert sync.calls == [("start", "alice"), ("stop",), ("start", "alice")]

    def test_transitions_are_published(self):
        gate, provider, sync = make_gate()
        transitions = []
        gate.add_transition_listener(transitions.append)
        gate.open()

        provider.emit(ALICE)
        provider.emit(ALICE)
        provider.emit(BOB)
        provider.emit(None)

        assert transitions == [(None, ALICE), (ALICE, BOB), (BOB, None)]

    def test_close_unregisters_and_stops(self):
        gate, provider, sync = make_gate(current=ALICE)
        gate.open()

        gate.close()

        assert provider.listeners == []
        assert sync.calls == [("start", "alice"), ("stop",)]
        assert gate.is_open is False
        assert gate.state is GateState.ANONYMOUS

        # notifications after teardown reach nobody
        provider.emit(BOB)
        assert sync.calls == [("start", "alice"), ("stop",)]

    def test_close_is_idempotent(self):
        gate, provider, sync = make_gate()
        gate.open()

        gate.close()
        gate.close()

        assert provider.listeners == []
        assert sync.calls == [("stop",), ("stop",)]

    def test_close_without_open(self):
        gate, provider, sync = make_gate()

        gate.close()

        assert sync.calls == [("stop",)]
