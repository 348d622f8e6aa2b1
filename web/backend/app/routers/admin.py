"""Admin router -- moderators, blacklist, deactivation, emergency mint, audit.

Prefix: ``/api/admin``

Authorization (owner vs. moderator) is enforced by the ledger itself; a
caller without the right role gets ``403``.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kudos.ledger.service import ComplimentLedger
from kudos.security.audit_log import AuditLogger
from web.backend.app.middleware.auth import get_audit, get_caller, get_ledger
from web.backend.app.models.api import (
    AuditEntryResponse,
    AuditExportResponse,
    IdentityRequest,
    MintRequest,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/moderators")
async def add_moderator(
    req: IdentityRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.add_moderator(caller, req.identity)
    return {"detail": f"{req.identity} is now a moderator"}


@router.delete("/moderators/{identity}")
async def remove_moderator(
    identity: str,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.remove_moderator(caller, identity)
    return {"detail": f"{identity} is no longer a moderator"}


@router.post("/blacklist")
async def blacklist_user(
    req: IdentityRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.blacklist_user(caller, req.identity)
    return {"detail": f"{req.identity} blacklisted"}


@router.delete("/blacklist/{identity}")
async def whitelist_user(
    identity: str,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.whitelist_user(caller, identity)
    return {"detail": f"{identity} whitelisted"}


@router.post("/compliments/{compliment_id}/deactivate")
async def deactivate_compliment(
    compliment_id: int,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.deactivate_compliment(caller, compliment_id)
    return {"detail": f"Compliment {compliment_id} deactivated"}


@router.post("/mint")
async def emergency_mint(
    req: MintRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.emergency_mint(caller, req.identity, req.amount)
    return {"identity": req.identity, "balance": ledger.balance_of(req.identity)}


@router.post("/ownership")
async def transfer_ownership(
    req: IdentityRequest,
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
):
    ledger.transfer_ownership(caller, req.identity)
    return {"owner": ledger.owner}


@router.get("/audit", response_model=list[AuditEntryResponse])
async def list_audit_events(
    actor: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=10000),
    audit: AuditLogger = Depends(get_audit),
):
    """List administrative audit entries, newest first."""
    return [
        AuditEntryResponse(**asdict(e))
        for e in audit.get_events(actor=actor, action=action, limit=limit)
    ]


@router.get("/audit/export", response_model=AuditExportResponse)
async def export_audit_log(
    format: str = Query("json", pattern="^(json|csv)$"),
    actor: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    audit: AuditLogger = Depends(get_audit),
):
    """Export the audit log as JSON or CSV."""
    content = audit.export_events(format, actor=actor, action=action)
    events = audit.get_events(actor=actor, action=action, limit=10000)
    return AuditExportResponse(format=format, content=content, record_count=len(events))
