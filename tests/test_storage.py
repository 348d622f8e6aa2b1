"""Tests for the JSON ledger snapshot."""

import json
import tempfile
from pathlib import Path

import pytest

from helpers import T0, FakeClock

from kudos.config import Settings
from kudos.errors import InvalidRecipient
from kudos.ledger.models import EPOCH, LedgerState
from kudos.ledger.service import ComplimentLedger
from kudos.storage import LedgerStore


def _open(tmpdir: str, clock: FakeClock) -> ComplimentLedger:
    return ComplimentLedger.open(Settings(owner="owner", home=tmpdir), clock=clock)


def test_load_empty_store():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = LedgerStore(tmpdir)
        state = store.load("owner")
        assert state.owner == "owner"
        assert state.next_id == 1
        assert state.compliments == {}
        assert not store.path.exists()


def test_ledger_survives_reopen():
    with tempfile.TemporaryDirectory() as tmpdir:
        clock = FakeClock()
        ledger = _open(tmpdir, clock)
        ledger.give("A", "B", "persisted")
        ledger.give("A", "C", "deactivated")
        ledger.like("C", 1)
        ledger.add_moderator("owner", "mod")
        ledger.blacklist_user("mod", "troll")
        ledger.deactivate_compliment("mod", 2)
        ledger.approve("A", "D", 3)

        reopened = _open(tmpdir, clock)
        assert reopened.get_total_compliments() == 2
        first = reopened.get_compliment(1)
        assert first.message == "persisted"
        assert first.like_count == 1
        assert first.created_at == T0
        assert reopened.get_compliment(2).active is False
        assert reopened.has_liked(1, "C")
        assert reopened.get_user_stats("mod").is_moderator
        assert reopened.get_user_stats("troll").is_blacklisted
        assert reopened.get_user_stats("A").rate_window_count == 2
        assert reopened.balance_of("A") == 20
        assert reopened.total_supply() == 31
        assert reopened.allowance("A", "D") == 3
        assert reopened.give("A", "E", "next") == 3


def test_failed_call_is_not_persisted():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = _open(tmpdir, FakeClock())
        ledger.give("A", "B", "hi")
        before = Path(tmpdir, "ledger.json").read_text()
        with pytest.raises(InvalidRecipient):
            ledger.give("A", "A", "self")
        assert Path(tmpdir, "ledger.json").read_text() == before


def test_snapshot_shape():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = LedgerStore(tmpdir)
        state = LedgerState(owner="owner")
        state.likes.add((1, "c"))
        state.allowances[("a", "b")] = 4
        store.save(state)

        data = json.loads(store.path.read_text())
        assert data["version"] == 1
        assert data["likes"] == [[1, "c"]]
        assert data["allowances"] == [{"owner": "a", "spender": "b", "amount": 4}]


def test_corrupt_snapshot_loads_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = LedgerStore(tmpdir)
        store.path.write_text("{not json")
        state = store.load("owner")
        assert state.owner == "owner"
        assert state.total_issued == 0


def test_missing_window_start_defaults_to_epoch():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = LedgerStore(tmpdir)
        store.path.write_text(json.dumps({"owner": "o", "users": [{"identity": "a"}]}))
        state = store.load()
        assert state.users["a"].rate_window_start == EPOCH
        assert state.next_id == 1


def test_failed_save_rolls_back_memory():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = _open(tmpdir, FakeClock())
        ledger.give("A", "B", "kept")
        seen = []
        ledger.bus.subscribe_all(seen.append)

        def broken_save(state):
            raise OSError("disk full")

        real_save = ledger.store.save
        ledger.store.save = broken_save
        with pytest.raises(OSError):
            ledger.give("A", "C", "lost")
        with pytest.raises(OSError):
            ledger.like("C", 1)

        assert ledger.get_total_compliments() == 1
        assert ledger.total_supply() == 15
        assert ledger.balance_of("A") == 10
        assert ledger.balance_of("C") == 0
        assert ledger.get_user_stats("A").given == 1
        assert ledger.get_user_stats("A").rate_window_count == 1
        assert ledger.get_compliment(1).like_count == 0
        assert not ledger.has_liked(1, "C")
        assert "C" not in ledger.state.users
        assert seen == []

        ledger.store.save = real_save
        assert ledger.give("A", "C", "retry") == 2
        reopened = _open(tmpdir, FakeClock())
        assert reopened.get_total_compliments() == 2
        assert reopened.balance_of("A") == 20
