"""Capped fungible supply with balances and allowances.

Reward mints are best-effort: a mint that would push ``total_issued`` past
the cap is skipped entirely and reported as ``False``. Only
:meth:`SupplyLedger.mint_strict` turns a cap miss into an error.
"""

from __future__ import annotations

from typing import Iterable

from kudos.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidArgument,
    SupplyCapExceeded,
)
from kudos.events import (
    ALLOWANCE_APPROVED,
    TOKENS_BURNED,
    TOKENS_MINTED,
    TOKENS_TRANSFERRED,
    EventBus,
)
from kudos.ledger.models import LedgerState
from kudos.utils.logger import get_logger

logger = get_logger(__name__)


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidArgument(f"Amount must be a positive integer, got {amount!r}")


class SupplyLedger:
    """Mint/burn primitives plus the standard balance table."""

    def __init__(self, state: LedgerState, max_supply: int, bus: EventBus) -> None:
        self._state = state
        self.max_supply = max_supply
        self._bus = bus

    # -- reads ---------------------------------------------------------------

    @property
    def total_issued(self) -> int:
        return self._state.total_issued

    def balance_of(self, identity: str) -> int:
        return self._state.balances.get(identity, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._state.allowances.get((owner, spender), 0)

    def can_issue(self, amount: int) -> bool:
        return self._state.total_issued + amount <= self.max_supply

    # -- minting -------------------------------------------------------------

    def mint(self, identity: str, amount: int) -> bool:
        """Mint *amount* to *identity* unless it would exceed the cap."""
        return self.mint_batch([(identity, amount)])

    def mint_batch(self, grants: Iterable[tuple[str, int]]) -> bool:
        """Mint every grant, or none of them if their sum exceeds the cap."""
        grants = list(grants)
        for _, amount in grants:
            _check_amount(amount)
        total = sum(amount for _, amount in grants)
        if not self.can_issue(total):
            logger.warning(
                "Reward mint of %d skipped: supply %d/%d",
                total, self._state.total_issued, self.max_supply,
            )
            return False
        for identity, amount in grants:
            self._credit(identity, amount)
        return True

    def mint_strict(self, identity: str, amount: int, actor: str = "") -> None:
        """Mint or raise ``SupplyCapExceeded``. *actor* is recorded on the event."""
        _check_amount(amount)
        if not self.can_issue(amount):
            raise SupplyCapExceeded(
                f"Minting {amount} would exceed max supply {self.max_supply}"
            )
        self._credit(identity, amount, actor=actor)

    def _credit(self, identity: str, amount: int, actor: str = "") -> None:
        self._state.total_issued += amount
        self._state.balances[identity] = self.balance_of(identity) + amount
        payload = {"to": identity, "amount": amount}
        if actor:
            payload["actor"] = actor
        self._bus.emit(TOKENS_MINTED, payload)

    # -- burning -------------------------------------------------------------

    def burn(self, identity: str, amount: int) -> None:
        _check_amount(amount)
        balance = self.balance_of(identity)
        if balance < amount:
            raise InsufficientBalance(
                f"{identity} holds {balance}, cannot burn {amount}"
            )
        self._state.balances[identity] = balance - amount
        self._state.total_issued -= amount
        self._bus.emit(TOKENS_BURNED, {"from": identity, "amount": amount})

    def burn_from(self, spender: str, owner: str, amount: int) -> None:
        """Burn from *owner*'s balance using *spender*'s allowance."""
        _check_amount(amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{spender} may spend {allowed} of {owner}'s balance, not {amount}"
            )
        self.burn(owner, amount)
        self._state.allowances[(owner, spender)] = allowed - amount

    # -- transfers -----------------------------------------------------------

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        _check_amount(amount)
        if not recipient:
            raise InvalidArgument("Recipient must not be empty")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(
                f"{sender} holds {balance}, cannot transfer {amount}"
            )
        self._state.balances[sender] = balance - amount
        self._state.balances[recipient] = self.balance_of(recipient) + amount
        self._bus.emit(
            TOKENS_TRANSFERRED, {"from": sender, "to": recipient, "amount": amount}
        )

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidArgument(f"Allowance must be a non-negative integer, got {amount!r}")
        self._state.allowances[(owner, spender)] = amount
        self._bus.emit(
            ALLOWANCE_APPROVED, {"owner": owner, "spender": spender, "amount": amount}
        )

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        _check_amount(amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{spender} may spend {allowed} of {owner}'s balance, not {amount}"
            )
        self.transfer(owner, recipient, amount)
        self._state.allowances[(owner, spender)] = allowed - amount
