"""Ledger data models: compliments, per-user stats and the shared state."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class Compliment:
    """A single giver -> recipient text record."""

    id: int
    giver: str
    recipient: str
    message: str
    created_at: datetime
    like_count: int = 0
    active: bool = True  # False once deactivated; never flips back

    def copy(self) -> Compliment:
        return replace(self)


@dataclass
class UserStats:
    """Per-identity counters, reputation and rate-limit window."""

    identity: str
    given: int = 0
    received: int = 0
    reputation: int = 0
    rate_window_start: datetime = EPOCH
    rate_window_count: int = 0
    is_moderator: bool = False
    is_blacklisted: bool = False  # filled from the blacklist set on snapshots

    def copy(self) -> UserStats:
        return replace(self)


@dataclass
class LedgerState:
    """Process-wide ledger tables.

    Components never keep their own copies; they all read and write through
    one ``LedgerState`` under ``lock``.
    """

    owner: str = ""
    compliments: dict[int, Compliment] = field(default_factory=dict)
    next_id: int = 1
    users: dict[str, UserStats] = field(default_factory=dict)
    likes: set[tuple[int, str]] = field(default_factory=set)
    blacklist: set[str] = field(default_factory=set)
    total_issued: int = 0
    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)
    lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False
    )

    def clone(self) -> LedgerState:
        """Detached copy of every table, with its own lock."""
        return LedgerState(
            owner=self.owner,
            compliments={cid: c.copy() for cid, c in self.compliments.items()},
            next_id=self.next_id,
            users={identity: u.copy() for identity, u in self.users.items()},
            likes=set(self.likes),
            blacklist=set(self.blacklist),
            total_issued=self.total_issued,
            balances=dict(self.balances),
            allowances=dict(self.allowances),
        )

    def restore(self, saved: LedgerState) -> None:
        """Put the tables of *saved* back in place, keeping this lock."""
        self.owner = saved.owner
        self.compliments = saved.compliments
        self.next_id = saved.next_id
        self.users = saved.users
        self.likes = saved.likes
        self.blacklist = saved.blacklist
        self.total_issued = saved.total_issued
        self.balances = saved.balances
        self.allowances = saved.allowances
