"""ComplimentLedger — the boundary every caller goes through.

Caller identity is supplied by whoever authenticated the request; the ledger
trusts it. Time comes from an injectable clock. Every mutating call runs as
one transaction under the state lock and is persisted (when a store is
attached) before the lock is released. A failed snapshot write rolls the
in-memory change back. Notifications go out only after the lock is released.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from kudos.config import Settings
from kudos.errors import InvalidArgument, Unauthorized
from kudos.events import (
    COMPLIMENT_DEACTIVATED,
    MODERATOR_ADDED,
    MODERATOR_REMOVED,
    OWNERSHIP_TRANSFERRED,
    USER_BLACKLISTED,
    USER_WHITELISTED,
    EventBus,
)
from kudos.ledger.compliments import ComplimentStore
from kudos.ledger.likes import LikeRegistry
from kudos.ledger.models import Compliment, LedgerState, UserStats
from kudos.ledger.processor import ActionProcessor, is_null_identity
from kudos.ledger.supply import SupplyLedger
from kudos.ledger.users import UserRegistry
from kudos.utils.logger import get_logger

if TYPE_CHECKING:
    from kudos.storage import LedgerStore

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ComplimentLedger:
    """Facade over the ledger components.

    Parameters
    ----------
    settings:
        Limits, rewards and the initial owner.
    state:
        Existing state to operate on; a fresh one owned by ``settings.owner``
        when omitted.
    bus:
        Notification bus consumers subscribe to.
    store:
        Optional snapshot store written after every successful mutation.
    clock:
        Source of "now" for rate limits and timestamps.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        state: Optional[LedgerState] = None,
        bus: Optional[EventBus] = None,
        store: Optional[LedgerStore] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.settings = settings or Settings()
        self.state = state if state is not None else LedgerState(owner=self.settings.owner)
        if not self.state.owner:
            self.state.owner = self.settings.owner
        self.bus = bus or EventBus()
        self.store = store
        self.clock = clock

        self.supply = SupplyLedger(self.state, self.settings.max_supply, self.bus)
        self.users = UserRegistry(self.state, self.settings.rate_window, self.bus)
        self.compliments = ComplimentStore(self.state, self.settings.max_page_size)
        self.likes = LikeRegistry(self.state, self.compliments)
        self.processor = ActionProcessor(
            self.state,
            self.settings,
            self.bus,
            self.supply,
            self.users,
            self.compliments,
            self.likes,
        )

    @classmethod
    def open(cls, settings: Settings, **kwargs) -> ComplimentLedger:
        """Load the ledger persisted under ``settings.home``."""
        from kudos.storage import LedgerStore

        store = LedgerStore(settings.home)
        return cls(settings=settings, state=store.load(settings.owner), store=store, **kwargs)

    @property
    def owner(self) -> str:
        return self.state.owner

    # ------------------------------------------------------------------
    # Transactions and authorization
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        with self.state.lock, self.bus.deferred(publish=False):
            saved = self.state.clone() if self.store is not None else None
            yield
            if saved is not None:
                try:
                    self.store.save(self.state)
                except Exception:
                    logger.error("Snapshot write failed; rolling back the call")
                    self.state.restore(saved)
                    raise
        self.bus.flush()

    def _require_owner(self, caller: str) -> None:
        if caller != self.state.owner:
            raise Unauthorized(f"{caller} is not the owner")

    def _require_moderator(self, caller: str) -> None:
        if caller != self.state.owner and not self.users.is_moderator(caller):
            raise Unauthorized(f"{caller} is not a moderator")

    def require_owner(self, caller: str) -> None:
        """Raise ``Unauthorized`` unless *caller* owns the ledger."""
        with self.state.lock:
            self._require_owner(caller)

    @staticmethod
    def _require_identity(identity: str) -> None:
        if is_null_identity(identity):
            raise InvalidArgument("Identity must not be null")

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def give(self, caller: str, recipient: str, message: str) -> int:
        with self._transaction():
            return self.processor.give(caller, recipient, message, self.clock())

    def like(self, caller: str, compliment_id: int) -> int:
        with self._transaction():
            return self.processor.like(caller, compliment_id, self.clock())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_compliment(self, compliment_id: int) -> Compliment:
        with self.state.lock:
            return self.compliments.get(compliment_id).copy()

    def query_by_giver(self, identity: str, offset: int = 0, limit: int = 10) -> list[Compliment]:
        with self.state.lock:
            return self.compliments.query_by_giver(identity, offset, limit)

    def query_by_recipient(
        self, identity: str, offset: int = 0, limit: int = 10
    ) -> list[Compliment]:
        with self.state.lock:
            return self.compliments.query_by_recipient(identity, offset, limit)

    def count_by_giver(self, identity: str) -> int:
        with self.state.lock:
            return self.compliments.count_by_giver(identity)

    def count_by_recipient(self, identity: str) -> int:
        with self.state.lock:
            return self.compliments.count_by_recipient(identity)

    def query_recent(self, limit: int = 10) -> list[Compliment]:
        with self.state.lock:
            return self.compliments.query_recent(limit)

    def get_user_stats(self, identity: str) -> UserStats:
        with self.state.lock:
            return self.users.snapshot(identity)

    def get_total_compliments(self) -> int:
        return self.compliments.total

    def total_supply(self) -> int:
        return self.supply.total_issued

    def balance_of(self, identity: str) -> int:
        return self.supply.balance_of(identity)

    def allowance(self, owner: str, spender: str) -> int:
        return self.supply.allowance(owner, spender)

    def has_liked(self, compliment_id: int, identity: str) -> bool:
        return self.likes.has_liked(compliment_id, identity)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def add_moderator(self, caller: str, identity: str) -> None:
        with self._transaction():
            self._require_owner(caller)
            self._require_identity(identity)
            self.users.set_moderator(identity, True)
            self.bus.emit(MODERATOR_ADDED, {"identity": identity, "actor": caller})
        logger.info("Moderator added: %s", identity)

    def remove_moderator(self, caller: str, identity: str) -> None:
        with self._transaction():
            self._require_owner(caller)
            self.users.set_moderator(identity, False)
            self.bus.emit(MODERATOR_REMOVED, {"identity": identity, "actor": caller})
        logger.info("Moderator removed: %s", identity)

    def blacklist_user(self, caller: str, identity: str) -> None:
        with self._transaction():
            self._require_moderator(caller)
            self._require_identity(identity)
            self.users.set_blacklisted(identity, True)
            self.bus.emit(USER_BLACKLISTED, {"identity": identity, "actor": caller})
        logger.info("User blacklisted by %s: %s", caller, identity)

    def whitelist_user(self, caller: str, identity: str) -> None:
        with self._transaction():
            self._require_moderator(caller)
            self.users.set_blacklisted(identity, False)
            self.bus.emit(USER_WHITELISTED, {"identity": identity, "actor": caller})
        logger.info("User whitelisted by %s: %s", caller, identity)

    def deactivate_compliment(self, caller: str, compliment_id: int) -> None:
        with self._transaction():
            self._require_moderator(caller)
            self.compliments.deactivate(compliment_id)
            self.bus.emit(COMPLIMENT_DEACTIVATED, {"id": compliment_id, "actor": caller})
        logger.info("Compliment %d deactivated by %s", compliment_id, caller)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._transaction():
            self._require_owner(caller)
            self._require_identity(new_owner)
            self.state.owner = new_owner
            self.bus.emit(
                OWNERSHIP_TRANSFERRED,
                {"previous": caller, "owner": new_owner, "actor": caller},
            )
        logger.info("Ownership transferred from %s to %s", caller, new_owner)

    def emergency_mint(self, caller: str, identity: str, amount: int) -> None:
        with self._transaction():
            self._require_owner(caller)
            self._require_identity(identity)
            self.supply.mint_strict(identity, amount, actor=caller)
        logger.info("Emergency mint of %d to %s", amount, identity)

    # ------------------------------------------------------------------
    # Token operations
    # ------------------------------------------------------------------

    def burn(self, caller: str, amount: int) -> None:
        with self._transaction():
            self.supply.burn(caller, amount)

    def burn_from(self, caller: str, owner: str, amount: int) -> None:
        with self._transaction():
            self.supply.burn_from(caller, owner, amount)

    def transfer(self, caller: str, recipient: str, amount: int) -> None:
        with self._transaction():
            self._require_identity(recipient)
            self.supply.transfer(caller, recipient, amount)

    def approve(self, caller: str, spender: str, amount: int) -> None:
        with self._transaction():
            self._require_identity(spender)
            self.supply.approve(caller, spender, amount)

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> None:
        with self._transaction():
            self._require_identity(recipient)
            self.supply.transfer_from(caller, owner, recipient, amount)
