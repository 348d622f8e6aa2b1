"""Assemble a persistent ledger with its notification consumers attached."""

from __future__ import annotations

import atexit
from typing import Optional

from kudos.config import Settings, get_settings
from kudos.ledger.service import ComplimentLedger
from kudos.security.audit_log import AuditLogger
from kudos.security.webhook_manager import WebhookManager
from kudos.utils.logger import setup_logger


def build_ledger(settings: Optional[Settings] = None) -> ComplimentLedger:
    """Open the ledger under ``settings.home`` and attach the audit trail and webhooks."""
    settings = settings or get_settings()
    setup_logger(settings.log_level)

    ledger = ComplimentLedger.open(settings)
    AuditLogger(settings.home / "audit_logs").attach(ledger.bus)

    webhooks = WebhookManager(settings.home / "webhooks")
    webhooks.attach(ledger.bus)
    # Let queued deliveries finish before a short-lived CLI process exits
    atexit.register(webhooks.wait)
    return ledger
