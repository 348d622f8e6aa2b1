"""Append-only compliment records with soft deletion.

Records are keyed by a strictly increasing id starting at 1; id 0 is never
allocated and always means "not found". Deactivation flips ``active`` off and
leaves the record in place, and every listing skips inactive records.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from kudos.errors import InvalidArgument, NotFound
from kudos.ledger.models import Compliment, LedgerState


class ComplimentStore:
    """Compliment table with filtered, paginated reads."""

    def __init__(self, state: LedgerState, max_page_size: int = 50) -> None:
        self._state = state
        self.max_page_size = max_page_size

    @property
    def total(self) -> int:
        """Number of compliments ever created, active or not."""
        return self._state.next_id - 1

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, giver: str, recipient: str, message: str, now: datetime) -> int:
        compliment_id = self._state.next_id
        self._state.compliments[compliment_id] = Compliment(
            id=compliment_id,
            giver=giver,
            recipient=recipient,
            message=message,
            created_at=now,
        )
        self._state.next_id = compliment_id + 1
        return compliment_id

    def deactivate(self, compliment_id: int) -> Compliment:
        """Deactivate a record. Deactivating twice is a no-op."""
        compliment = self.get(compliment_id)
        compliment.active = False
        return compliment

    def increment_likes(self, compliment_id: int) -> int:
        compliment = self.get_active(compliment_id)
        compliment.like_count += 1
        return compliment.like_count

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, compliment_id: int) -> Compliment:
        """Return the stored record, active or not."""
        compliment = self._state.compliments.get(compliment_id)
        if compliment is None:
            raise NotFound(f"Compliment {compliment_id} does not exist")
        return compliment

    def get_active(self, compliment_id: int) -> Compliment:
        compliment = self.get(compliment_id)
        if not compliment.active:
            raise NotFound(f"Compliment {compliment_id} has been deactivated")
        return compliment

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def count_by_giver(self, identity: str) -> int:
        return self._count(lambda c: c.giver == identity)

    def count_by_recipient(self, identity: str) -> int:
        return self._count(lambda c: c.recipient == identity)

    def query_by_giver(self, identity: str, offset: int, limit: int) -> list[Compliment]:
        return self._paginate(lambda c: c.giver == identity, offset, limit)

    def query_by_recipient(self, identity: str, offset: int, limit: int) -> list[Compliment]:
        return self._paginate(lambda c: c.recipient == identity, offset, limit)

    def query_recent(self, limit: int) -> list[Compliment]:
        """Up to *limit* active records, newest first."""
        self._check_limit(limit)
        results: list[Compliment] = []
        compliment_id = self._state.next_id - 1
        while compliment_id > 0 and len(results) < limit:
            compliment = self._state.compliments.get(compliment_id)
            if compliment is not None and compliment.active:
                results.append(compliment.copy())
            compliment_id -= 1
        return results

    def _check_limit(self, limit: int) -> None:
        if limit < 0:
            raise InvalidArgument(f"Limit must not be negative, got {limit}")
        if limit > self.max_page_size:
            raise InvalidArgument(
                f"Limit {limit} exceeds the maximum page size of {self.max_page_size}"
            )

    def _ascending(self):
        for compliment_id in range(1, self._state.next_id):
            compliment = self._state.compliments.get(compliment_id)
            if compliment is not None:
                yield compliment

    def _count(self, match: Callable[[Compliment], bool]) -> int:
        return sum(1 for c in self._ascending() if c.active and match(c))

    def _paginate(
        self, match: Callable[[Compliment], bool], offset: int, limit: int
    ) -> list[Compliment]:
        """Count matches, then re-scan collecting ``[offset, offset + limit)``."""
        self._check_limit(limit)
        if offset < 0:
            raise InvalidArgument(f"Offset must not be negative, got {offset}")

        total = self._count(match)
        if limit == 0 or offset >= total:
            return []

        end = min(offset + limit, total)
        results: list[Compliment] = []
        index = 0
        for compliment in self._ascending():
            if not (compliment.active and match(compliment)):
                continue
            if index >= end:
                break
            if index >= offset:
                results.append(compliment.copy())
            index += 1
        return results
