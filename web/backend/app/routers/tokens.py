"""Tokens router -- supply, balances, transfers and burns.

Prefix: ``/api/tokens``
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from kudos.ledger.service import ComplimentLedger
from web.backend.app.middleware.auth import get_caller, get_ledger
from web.backend.app.models.api import (
    AmountRequest,
    ApproveRequest,
    BalanceResponse,
    BurnFromRequest,
    SupplyResponse,
    TransferFromRequest,
    TransferRequest,
)

router = APIRouter(prefix="/api/tokens", tags=["tokens"])


@router.get("/supply", response_model=SupplyResponse)
async def supply(ledger: ComplimentLedger = Depends(get_ledger)):
    return SupplyResponse(
        total_issued=ledger.total_supply(),
        max_supply=ledger.settings.max_supply,
        total_compliments=ledger.get_total_compliments(),
    )


@router.get("/balance/{identity}", response_model=BalanceResponse)
async def balance(identity: str, ledger: ComplimentLedger = Depends(get_ledger)):
    return BalanceResponse(identity=identity, balance=ledger.balance_of(identity))


@router.post("/transfer", response_model=BalanceResponse)
async def transfer(
    req: TransferRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.transfer(caller, req.recipient, req.amount)
    return BalanceResponse(identity=caller, balance=ledger.balance_of(caller))


@router.post("/approve")
async def approve(
    req: ApproveRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.approve(caller, req.spender, req.amount)
    return {"owner": caller, "spender": req.spender, "allowance": req.amount}


@router.post("/transfer-from", response_model=BalanceResponse)
async def transfer_from(
    req: TransferFromRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.transfer_from(caller, req.owner, req.recipient, req.amount)
    return BalanceResponse(identity=req.owner, balance=ledger.balance_of(req.owner))


@router.post("/burn", response_model=BalanceResponse)
async def burn(
    req: AmountRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.burn(caller, req.amount)
    return BalanceResponse(identity=caller, balance=ledger.balance_of(caller))


@router.post("/burn-from", response_model=BalanceResponse)
async def burn_from(
    req: BurnFromRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.burn_from(caller, req.owner, req.amount)
    return BalanceResponse(identity=req.owner, balance=ledger.balance_of(req.owner))
