"""Request-scoped dependencies: the shared ledger, its consumers and the caller.

Authentication happens upstream (gateway or signature check); by the time a
request reaches the API the caller's identity is carried in the
``X-Kudos-Identity`` header and is trusted as-is.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from kudos.bootstrap import build_ledger
from kudos.ledger.service import ComplimentLedger
from kudos.security.audit_log import AuditLogger
from kudos.security.webhook_manager import WebhookManager

# Shared ledger instance
_ledger: Optional[ComplimentLedger] = None


def get_ledger() -> ComplimentLedger:
    """Return the singleton ComplimentLedger instance."""
    global _ledger
    if _ledger is None:
        _ledger = build_ledger()
    return _ledger


def get_audit(ledger: ComplimentLedger = Depends(get_ledger)) -> AuditLogger:
    """Audit trail stored under the ledger's home directory."""
    return AuditLogger(ledger.settings.home / "audit_logs")


def get_webhooks(ledger: ComplimentLedger = Depends(get_ledger)) -> WebhookManager:
    """Webhook registry shared on disk with the manager attached to the ledger."""
    return WebhookManager(ledger.settings.home / "webhooks")


async def get_caller(
    x_kudos_identity: Optional[str] = Header(None, alias="X-Kudos-Identity"),
) -> str:
    """FastAPI dependency returning the calling identity.

    Raises ``401 Unauthorized`` when the header is missing or blank.
    """
    if not x_kudos_identity or not x_kudos_identity.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Kudos-Identity header",
        )
    return x_kudos_identity.strip()


async def get_owner(
    caller: str = Depends(get_caller),
    ledger: ComplimentLedger = Depends(get_ledger),
) -> str:
    """Like :func:`get_caller`, but only the ledger owner gets through (403 otherwise)."""
    ledger.require_owner(caller)
    return caller
