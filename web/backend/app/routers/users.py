"""Users router -- reputation and counters.

Prefix: ``/api/users``
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from kudos.ledger.service import ComplimentLedger
from web.backend.app.middleware.auth import get_caller, get_ledger
from web.backend.app.models.api import UserStatsResponse

router = APIRouter(prefix="/api/users", tags=["users"])


def _stats_response(ledger: ComplimentLedger, identity: str) -> UserStatsResponse:
    s = ledger.get_user_stats(identity)
    return UserStatsResponse(
        identity=s.identity,
        given=s.given,
        received=s.received,
        reputation=s.reputation,
        rate_window_start=s.rate_window_start,
        rate_window_count=s.rate_window_count,
        is_moderator=s.is_moderator,
        is_blacklisted=s.is_blacklisted,
        balance=ledger.balance_of(identity),
    )


@router.get("/me", response_model=UserStatsResponse)
async def my_stats(
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    return _stats_response(ledger, caller)


@router.get("/{identity}", response_model=UserStatsResponse)
async def user_stats(identity: str, ledger: ComplimentLedger = Depends(get_ledger)):
    """Stats snapshot for any identity; unknown identities read as all zeros."""
    return _stats_response(ledger, identity)
