"""In-process notification bus.

Consumers subscribe to named events (or to all of them) and are called
synchronously in publish order. Delivery is fire-and-forget: a consumer that
raises is logged and skipped, and never affects ledger state.
"""

from __future__ import annotations

import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional

from kudos.utils.logger import get_logger

logger = get_logger(__name__)

# All event names published by the ledger
COMPLIMENT_GIVEN = "compliment.given"
COMPLIMENT_LIKED = "compliment.liked"
COMPLIMENT_DEACTIVATED = "compliment.deactivated"
REPUTATION_UPDATED = "reputation.updated"
USER_BLACKLISTED = "user.blacklisted"
USER_WHITELISTED = "user.whitelisted"
MODERATOR_ADDED = "moderator.added"
MODERATOR_REMOVED = "moderator.removed"
TOKENS_MINTED = "tokens.minted"
TOKENS_BURNED = "tokens.burned"
TOKENS_TRANSFERRED = "tokens.transferred"
ALLOWANCE_APPROVED = "allowance.approved"
OWNERSHIP_TRANSFERRED = "ownership.transferred"

LEDGER_EVENTS = [
    COMPLIMENT_GIVEN,
    COMPLIMENT_LIKED,
    COMPLIMENT_DEACTIVATED,
    REPUTATION_UPDATED,
    USER_BLACKLISTED,
    USER_WHITELISTED,
    MODERATOR_ADDED,
    MODERATOR_REMOVED,
    TOKENS_MINTED,
    TOKENS_BURNED,
    TOKENS_TRANSFERRED,
    ALLOWANCE_APPROVED,
    OWNERSHIP_TRANSFERRED,
]


@dataclass
class Notification:
    """A single published event."""

    event: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()


Handler = Callable[[Notification], None]


class EventBus:
    """Synchronous publish/subscribe bus with transactional buffering.

    Inside :meth:`deferred`, emitted notifications are held back per thread
    and dropped if the block raises. When the outermost block exits cleanly
    they join a shared outbox in commit order. With ``publish=False`` the
    caller drains the outbox later with :meth:`flush`, typically after
    releasing the lock it committed under.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._wildcard: list[Handler] = []
        self._local = threading.local()
        self._outbox: deque[Notification] = deque()
        self._publish_lock = threading.RLock()

    # -- subscriptions -------------------------------------------------------

    def subscribe(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def subscribe_all(self, handler: Handler) -> None:
        self._wildcard.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        for handlers in self._handlers.values():
            if handler in handlers:
                handlers.remove(handler)
        if handler in self._wildcard:
            self._wildcard.remove(handler)

    # -- publishing ----------------------------------------------------------

    def emit(
        self,
        event: str,
        payload: dict[str, Any],
        timestamp: Optional[datetime] = None,
    ) -> Notification:
        """Create a notification and publish it (or buffer it when deferred)."""
        notification = Notification(
            event=event,
            payload=payload,
            timestamp=timestamp.isoformat() if timestamp else "",
        )
        buffer = getattr(self._local, "buffer", None)
        if buffer is not None:
            buffer.append(notification)
        else:
            self._outbox.append(notification)
            self.flush()
        return notification

    def publish(self, notification: Notification) -> None:
        handlers = self._handlers.get(notification.event, []) + self._wildcard
        for handler in list(handlers):
            try:
                handler(notification)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on %s", handler, notification.event
                )

    def flush(self) -> None:
        """Publish every committed notification, oldest first.

        A no-op inside a deferred block; the outermost caller drains.
        """
        if getattr(self._local, "depth", 0):
            return
        with self._publish_lock:
            while self._outbox:
                self.publish(self._outbox.popleft())

    @contextmanager
    def deferred(self, publish: bool = True) -> Iterator[None]:
        """Buffer notifications until the outermost block succeeds."""
        local = self._local
        depth = getattr(local, "depth", 0)
        if depth == 0:
            local.buffer = []
        local.depth = depth + 1
        try:
            yield
        except BaseException:
            local.depth -= 1
            if local.depth == 0:
                local.buffer = None
            raise
        local.depth -= 1
        if local.depth == 0:
            pending, local.buffer = local.buffer or [], None
            self._outbox.extend(pending)
            if publish:
                self.flush()
