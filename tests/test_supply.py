"""Tests for the capped supply ledger."""

import pytest

from kudos.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidArgument,
    SupplyCapExceeded,
)
from kudos.events import EventBus
from kudos.ledger.models import LedgerState
from kudos.ledger.supply import SupplyLedger


def _supply(max_supply: int = 100) -> tuple[SupplyLedger, LedgerState]:
    state = LedgerState(owner="owner")
    return SupplyLedger(state, max_supply, EventBus()), state


def test_mint_within_cap():
    supply, state = _supply()
    assert supply.mint("alice", 40) is True
    assert supply.balance_of("alice") == 40
    assert state.total_issued == 40


def test_mint_up_to_exact_cap():
    supply, _ = _supply(50)
    assert supply.mint("alice", 50) is True
    assert supply.total_issued == 50


def test_mint_over_cap_is_skipped():
    supply, state = _supply(50)
    supply.mint("alice", 45)
    assert supply.mint("bob", 10) is False
    assert supply.balance_of("bob") == 0
    assert state.total_issued == 45


def test_mint_batch_is_all_or_nothing():
    supply, _ = _supply(20)
    supply.mint("alice", 8)
    # 8 + 10 + 5 > 20 even though the 5 alone would fit
    assert supply.mint_batch([("alice", 10), ("bob", 5)]) is False
    assert supply.balance_of("alice") == 8
    assert supply.balance_of("bob") == 0

    assert supply.mint_batch([("alice", 7), ("bob", 5)]) is True
    assert supply.balance_of("alice") == 15
    assert supply.balance_of("bob") == 5
    assert supply.total_issued == 20


def test_mint_strict_raises_on_cap():
    supply, _ = _supply(10)
    with pytest.raises(SupplyCapExceeded):
        supply.mint_strict("alice", 11)
    assert supply.total_issued == 0


def test_invalid_amounts_rejected():
    supply, _ = _supply()
    for amount in (0, -5, True, 1.5):
        with pytest.raises(InvalidArgument):
            supply.mint("alice", amount)


def test_burn_reduces_balance_and_supply():
    supply, _ = _supply()
    supply.mint("alice", 30)
    supply.burn("alice", 12)
    assert supply.balance_of("alice") == 18
    assert supply.total_issued == 18


def test_burn_more_than_balance_fails():
    supply, _ = _supply()
    supply.mint("alice", 5)
    with pytest.raises(InsufficientBalance):
        supply.burn("alice", 6)
    assert supply.balance_of("alice") == 5
    assert supply.total_issued == 5


def test_burn_frees_room_under_cap():
    supply, _ = _supply(10)
    supply.mint("alice", 10)
    assert supply.mint("bob", 1) is False
    supply.burn("alice", 3)
    assert supply.mint("bob", 3) is True


def test_burn_from_uses_allowance():
    supply, _ = _supply()
    supply.mint("alice", 20)
    supply.approve("alice", "bob", 8)

    supply.burn_from("bob", "alice", 5)
    assert supply.balance_of("alice") == 15
    assert supply.allowance("alice", "bob") == 3

    with pytest.raises(InsufficientAllowance):
        supply.burn_from("bob", "alice", 4)


def test_burn_from_keeps_allowance_when_balance_short():
    supply, _ = _supply()
    supply.mint("alice", 2)
    supply.approve("alice", "bob", 10)
    with pytest.raises(InsufficientBalance):
        supply.burn_from("bob", "alice", 5)
    assert supply.allowance("alice", "bob") == 10


def test_transfer_and_transfer_from():
    supply, state = _supply()
    supply.mint("alice", 20)
    supply.transfer("alice", "bob", 7)
    assert supply.balance_of("alice") == 13
    assert supply.balance_of("bob") == 7

    supply.approve("bob", "carol", 5)
    supply.transfer_from("carol", "bob", "dave", 5)
    assert supply.balance_of("bob") == 2
    assert supply.balance_of("dave") == 5
    assert supply.allowance("bob", "carol") == 0
    assert sum(state.balances.values()) == state.total_issued


def test_transfer_insufficient_balance():
    supply, _ = _supply()
    with pytest.raises(InsufficientBalance):
        supply.transfer("alice", "bob", 1)
