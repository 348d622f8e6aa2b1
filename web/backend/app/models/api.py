"""Pydantic models for API request/response serialization.

These models mirror the ledger dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Compliments
# ---------------------------------------------------------------------------


class ComplimentResponse(BaseModel):
    """Mirrors kudos.ledger.models.Compliment."""

    id: int
    giver: str
    recipient: str
    message: str
    created_at: datetime
    like_count: int = 0
    active: bool = True


class ComplimentPageResponse(BaseModel):
    """One page of a filtered compliment listing."""

    items: list[ComplimentResponse] = Field(default_factory=list)
    total_count: int = 0
    offset: int = 0
    limit: int = 0


class GiveRequest(BaseModel):
    recipient: str
    message: str


class GiveResponse(BaseModel):
    id: int
    balance: int = 0


class LikeResponse(BaseModel):
    id: int
    like_count: int


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserStatsResponse(BaseModel):
    """Mirrors kudos.ledger.models.UserStats plus the token balance."""

    identity: str
    given: int = 0
    received: int = 0
    reputation: int = 0
    rate_window_start: datetime
    rate_window_count: int = 0
    is_moderator: bool = False
    is_blacklisted: bool = False
    balance: int = 0


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class SupplyResponse(BaseModel):
    total_issued: int
    max_supply: int
    total_compliments: int


class BalanceResponse(BaseModel):
    identity: str
    balance: int


class AmountRequest(BaseModel):
    amount: int


class TransferRequest(BaseModel):
    recipient: str
    amount: int


class ApproveRequest(BaseModel):
    spender: str
    amount: int


class TransferFromRequest(BaseModel):
    owner: str
    recipient: str
    amount: int


class BurnFromRequest(BaseModel):
    owner: str
    amount: int


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


class IdentityRequest(BaseModel):
    identity: str


class MintRequest(BaseModel):
    identity: str
    amount: int


class AuditEntryResponse(BaseModel):
    """Mirrors kudos.security.audit_log.AuditEntry."""

    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict = Field(default_factory=dict)
    success: bool = True


class AuditExportResponse(BaseModel):
    """Exported audit log content."""

    format: str
    content: str
    record_count: int = 0


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


class WebhookResponse(BaseModel):
    """Public representation of a webhook; the secret is never returned."""

    id: str
    url: str
    events: list[str] = Field(default_factory=list)
    active: bool = True
    created_at: str = ""


class CreateWebhookRequest(BaseModel):
    url: str
    events: list[str] = Field(default_factory=list)
    secret: str = ""


class ToggleWebhookRequest(BaseModel):
    active: bool


class WebhookDeliveryResponse(BaseModel):
    """Record of a webhook delivery attempt."""

    id: str
    webhook_id: str
    event: str
    response_status: int = 0
    error: str = ""
    success: bool = False
    delivered_at: str = ""
    duration_ms: int = 0


class ErrorResponse(BaseModel):
    code: str
    detail: str
