"""The two compound user actions: giving and liking a compliment.

Each action validates everything it can before touching state, then applies
its mutations under the ledger lock. Notifications are held until the action
commits and are published only after the lock is released. The reward mint
is the only step that can come up short, and it skips rather than fails.
"""

from __future__ import annotations

from datetime import datetime, timezone

from kudos.config import ZERO_ADDRESS, Settings
from kudos.errors import Blacklisted, InvalidMessage, InvalidRecipient, RateLimitExceeded
from kudos.events import COMPLIMENT_GIVEN, COMPLIMENT_LIKED, EventBus
from kudos.ledger.compliments import ComplimentStore
from kudos.ledger.likes import LikeRegistry
from kudos.ledger.models import LedgerState
from kudos.ledger.supply import SupplyLedger
from kudos.ledger.users import UserRegistry
from kudos.utils.logger import get_logger

logger = get_logger(__name__)


def is_null_identity(identity: str | None) -> bool:
    return not identity or identity.lower() == ZERO_ADDRESS


def as_utc(now: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


class ActionProcessor:
    """Orchestrates ``give`` and ``like`` across the ledger components."""

    def __init__(
        self,
        state: LedgerState,
        settings: Settings,
        bus: EventBus,
        supply: SupplyLedger,
        users: UserRegistry,
        compliments: ComplimentStore,
        likes: LikeRegistry,
    ) -> None:
        self.state = state
        self.settings = settings
        self.bus = bus
        self.supply = supply
        self.users = users
        self.compliments = compliments
        self.likes = likes

    def give(self, caller: str, recipient: str, message: str, now: datetime) -> int:
        """Post a compliment from *caller* to *recipient*; return its id."""
        now = as_utc(now)
        s = self.settings
        with self.state.lock, self.bus.deferred(publish=False):
            if self.users.is_blacklisted(caller) or self.users.is_blacklisted(recipient):
                raise Blacklisted("Giver or recipient is blacklisted")
            if is_null_identity(recipient) or recipient == caller:
                raise InvalidRecipient("Recipient must be another, non-null identity")
            size = len(message.encode("utf-8"))
            if size == 0 or size > s.max_message_bytes:
                raise InvalidMessage(
                    f"Message must be 1-{s.max_message_bytes} bytes, got {size}"
                )
            if self.users.touch_rate_window(caller, now) >= s.daily_limit:
                raise RateLimitExceeded(
                    f"{caller} already gave {s.daily_limit} compliments in this window"
                )

            compliment_id = self.compliments.create(caller, recipient, message, now)

            self.users.record_give(caller)
            self.users.record_receive(recipient)
            self.users.add_reputation(caller, s.giver_reputation)
            self.users.add_reputation(recipient, s.recipient_reputation)

            self._issue_give_rewards(caller, recipient)

            self.bus.emit(
                COMPLIMENT_GIVEN,
                {
                    "id": compliment_id,
                    "giver": caller,
                    "recipient": recipient,
                    "message": message,
                    "timestamp": now.isoformat(),
                },
                timestamp=now,
            )
        self.bus.flush()
        logger.info("Compliment %d: %s -> %s", compliment_id, caller, recipient)
        return compliment_id

    def _issue_give_rewards(self, caller: str, recipient: str) -> None:
        grants = [
            (caller, self.settings.compliment_reward),
            (recipient, self.settings.recipient_bonus),
        ]
        grants = [(who, amount) for who, amount in grants if amount > 0]
        if self.settings.coupled_rewards:
            self.supply.mint_batch(grants)
        else:
            for who, amount in grants:
                self.supply.mint(who, amount)

    def like(self, caller: str, compliment_id: int, now: datetime) -> int:
        """Like a compliment; return its new like count."""
        now = as_utc(now)
        with self.state.lock, self.bus.deferred(publish=False):
            if self.users.is_blacklisted(caller):
                raise Blacklisted(f"{caller} is blacklisted")

            compliment = self.likes.like(compliment_id, caller)
            like_count = compliment.like_count

            self.users.add_reputation(compliment.giver, self.settings.like_reputation)
            if self.settings.like_reward > 0:
                self.supply.mint(caller, self.settings.like_reward)

            self.bus.emit(
                COMPLIMENT_LIKED,
                {
                    "id": compliment_id,
                    "liker": caller,
                    "like_count": like_count,
                },
                timestamp=now,
            )
        self.bus.flush()
        logger.info("Compliment %d liked by %s", compliment_id, caller)
        return like_count
