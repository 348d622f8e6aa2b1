"""Per-identity stats, moderator flags and the blacklist."""

from __future__ import annotations

from datetime import datetime, timedelta

from kudos.events import REPUTATION_UPDATED, EventBus
from kudos.ledger.models import LedgerState, UserStats


class UserRegistry:
    """Lazily-allocated ``UserStats`` records keyed by identity."""

    def __init__(self, state: LedgerState, rate_window: timedelta, bus: EventBus) -> None:
        self._state = state
        self._rate_window = rate_window
        self._bus = bus

    def get(self, identity: str) -> UserStats:
        """Return the stored record, or a zero-valued one without storing it."""
        return self._state.users.get(identity) or UserStats(identity=identity)

    def get_or_create(self, identity: str) -> UserStats:
        stats = self._state.users.get(identity)
        if stats is None:
            stats = UserStats(identity=identity)
            self._state.users[identity] = stats
        return stats

    def snapshot(self, identity: str) -> UserStats:
        """Return a detached copy with the blacklist flag filled in."""
        stats = self.get(identity).copy()
        stats.is_blacklisted = self.is_blacklisted(identity)
        return stats

    # -- rate limiting -------------------------------------------------------

    def touch_rate_window(self, identity: str, now: datetime) -> int:
        """Roll the window over if a full window has passed; return its count."""
        stats = self.get_or_create(identity)
        if now >= stats.rate_window_start + self._rate_window:
            stats.rate_window_count = 0
            stats.rate_window_start = now
        return stats.rate_window_count

    # -- counters ------------------------------------------------------------

    def record_give(self, identity: str) -> None:
        stats = self.get_or_create(identity)
        stats.given += 1
        stats.rate_window_count += 1

    def record_receive(self, identity: str) -> None:
        self.get_or_create(identity).received += 1

    def add_reputation(self, identity: str, points: int) -> int:
        stats = self.get_or_create(identity)
        stats.reputation += points
        self._bus.emit(
            REPUTATION_UPDATED,
            {"identity": identity, "reputation": stats.reputation, "points": points},
        )
        return stats.reputation

    # -- administrative flags ------------------------------------------------

    def is_moderator(self, identity: str) -> bool:
        return self.get(identity).is_moderator

    def set_moderator(self, identity: str, flag: bool) -> None:
        self.get_or_create(identity).is_moderator = flag

    def is_blacklisted(self, identity: str) -> bool:
        return identity in self._state.blacklist

    def set_blacklisted(self, identity: str, flag: bool) -> None:
        if flag:
            self._state.blacklist.add(identity)
        else:
            self._state.blacklist.discard(identity)
