"""Webhooks router -- register and manage outbound notification webhooks.

Prefix: ``/api/webhooks``

Every endpoint is owner-only.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from kudos.security.audit_log import AuditLogger
from kudos.security.webhook_manager import Webhook, WebhookManager
from web.backend.app.middleware.auth import get_audit, get_owner, get_webhooks
from web.backend.app.models.api import (
    CreateWebhookRequest,
    ToggleWebhookRequest,
    WebhookDeliveryResponse,
    WebhookResponse,
)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


def _webhook_to_response(w: Webhook) -> WebhookResponse:
    return WebhookResponse(
        id=w.id,
        url=w.url,
        events=w.events,
        active=w.active,
        created_at=w.created_at,
    )


@router.post("", response_model=WebhookResponse, status_code=201)
async def create_webhook(
    req: CreateWebhookRequest,
    owner: str = Depends(get_owner),
    webhooks: WebhookManager = Depends(get_webhooks),
    audit: AuditLogger = Depends(get_audit),
):
    """Register a new webhook."""
    try:
        wh = webhooks.register_webhook(url=req.url, events=req.events, secret=req.secret)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    audit.log_event(
        actor=owner,
        action="webhook.create",
        resource_type="webhook",
        resource_id=wh.id,
        details={"url": wh.url, "events": wh.events},
    )
    return _webhook_to_response(wh)


@router.get("", response_model=list[WebhookResponse])
async def list_webhooks(
    owner: str = Depends(get_owner),
    webhooks: WebhookManager = Depends(get_webhooks),
):
    return [_webhook_to_response(w) for w in webhooks.list_webhooks()]


@router.put("/{webhook_id}/toggle", response_model=WebhookResponse)
async def toggle_webhook(
    webhook_id: str,
    req: ToggleWebhookRequest,
    owner: str = Depends(get_owner),
    webhooks: WebhookManager = Depends(get_webhooks),
):
    """Enable or disable a webhook."""
    try:
        wh = webhooks.toggle_webhook(webhook_id, req.active)
    except ValueError:
        raise HTTPException(status_code=404, detail="Webhook not found")
    return _webhook_to_response(wh)


@router.delete("/{webhook_id}")
async def delete_webhook(
    webhook_id: str,
    owner: str = Depends(get_owner),
    webhooks: WebhookManager = Depends(get_webhooks),
    audit: AuditLogger = Depends(get_audit),
):
    if not webhooks.delete_webhook(webhook_id):
        raise HTTPException(status_code=404, detail="Webhook not found")
    audit.log_event(
        actor=owner,
        action="webhook.delete",
        resource_type="webhook",
        resource_id=webhook_id,
    )
    return {"detail": "Webhook deleted"}


@router.get("/{webhook_id}/deliveries", response_model=list[WebhookDeliveryResponse])
async def list_deliveries(
    webhook_id: str,
    limit: int = Query(100, ge=1, le=1000),
    owner: str = Depends(get_owner),
    webhooks: WebhookManager = Depends(get_webhooks),
):
    """Delivery attempts for one webhook, newest first."""
    return [
        WebhookDeliveryResponse(**asdict(d))
        for d in webhooks.get_deliveries(webhook_id, limit=limit)
    ]
