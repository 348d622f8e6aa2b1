"""Compliments router -- give, like and list compliments.

Prefix: ``/api/compliments``
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from kudos.ledger.models import Compliment
from kudos.ledger.service import ComplimentLedger
from web.backend.app.middleware.auth import get_caller, get_ledger
from web.backend.app.models.api import (
    ComplimentPageResponse,
    ComplimentResponse,
    GiveRequest,
    GiveResponse,
    LikeResponse,
)

router = APIRouter(prefix="/api/compliments", tags=["compliments"])


def _compliment_response(c: Compliment) -> ComplimentResponse:
    return ComplimentResponse(
        id=c.id,
        giver=c.giver,
        recipient=c.recipient,
        message=c.message,
        created_at=c.created_at,
        like_count=c.like_count,
        active=c.active,
    )


@router.post("", response_model=GiveResponse, status_code=201)
async def give_compliment(
    req: GiveRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    """Give a compliment from the caller to ``req.recipient``."""
    compliment_id = ledger.give(caller, req.recipient, req.message)
    return GiveResponse(id=compliment_id, balance=ledger.balance_of(caller))


@router.get("/recent", response_model=list[ComplimentResponse])
async def recent_compliments(
    limit: int = Query(10, ge=0),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    """Most recent active compliments, newest first."""
    return [_compliment_response(c) for c in ledger.query_recent(limit)]


@router.get("/count")
async def total_compliments(ledger: ComplimentLedger = Depends(get_ledger)):
    """Number of compliments ever created."""
    return {"total": ledger.get_total_compliments()}


@router.get("/by-giver/{identity}", response_model=ComplimentPageResponse)
async def compliments_by_giver(
    identity: str,
    offset: int = Query(0, ge=0),
    limit: int = Query(10, ge=0),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    items = ledger.query_by_giver(identity, offset, limit)
    return ComplimentPageResponse(
        items=[_compliment_response(c) for c in items],
        total_count=ledger.count_by_giver(identity),
        offset=offset,
        limit=limit,
    )


@router.get("/by-recipient/{identity}", response_model=ComplimentPageResponse)
async def compliments_by_recipient(
    identity: str,
    offset: int = Query(0, ge=0),
    limit: int = Query(10, ge=0),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    items = ledger.query_by_recipient(identity, offset, limit)
    return ComplimentPageResponse(
        items=[_compliment_response(c) for c in items],
        total_count=ledger.count_by_recipient(identity),
        offset=offset,
        limit=limit,
    )


@router.get("/{compliment_id}", response_model=ComplimentResponse)
async def get_compliment(
    compliment_id: int,
    ledger: ComplimentLedger = Depends(get_ledger),
):
    """Fetch one compliment, including deactivated ones."""
    return _compliment_response(ledger.get_compliment(compliment_id))


@router.post("/{compliment_id}/like", response_model=LikeResponse)
async def like_compliment(
    compliment_id: int,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    like_count = ledger.like(caller, compliment_id)
    return LikeResponse(id=compliment_id, like_count=like_count)
