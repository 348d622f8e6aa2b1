"""Like set: at most one like per (compliment, liker), never cleared."""

from __future__ import annotations

from kudos.errors import AlreadyLiked, SelfLike
from kudos.ledger.compliments import ComplimentStore
from kudos.ledger.models import Compliment, LedgerState


class LikeRegistry:
    def __init__(self, state: LedgerState, compliments: ComplimentStore) -> None:
        self._state = state
        self._compliments = compliments

    def has_liked(self, compliment_id: int, liker: str) -> bool:
        return (compliment_id, liker) in self._state.likes

    def like(self, compliment_id: int, liker: str) -> Compliment:
        """Record the like and bump the like count; return the compliment."""
        compliment = self._compliments.get_active(compliment_id)
        # SelfLike before AlreadyLiked; a giver can never hold a like on their own post
        if compliment.giver == liker:
            raise SelfLike("Cannot like your own compliment")
        if self.has_liked(compliment_id, liker):
            raise AlreadyLiked(f"{liker} already liked compliment {compliment_id}")

        self._state.likes.add((compliment_id, liker))
        self._compliments.increment_likes(compliment_id)
        return compliment
