"""Audit trail of administrative ledger actions.

Moderator and blacklist changes, deactivations, emergency mints and
ownership transfers are appended as newline-delimited JSON to daily files
under ``~/.kudos/audit_logs/``. The logger subscribes to an
:class:`~kudos.events.EventBus` and writes one entry per notification.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from kudos.events import (
    COMPLIMENT_DEACTIVATED,
    MODERATOR_ADDED,
    MODERATOR_REMOVED,
    OWNERSHIP_TRANSFERRED,
    TOKENS_MINTED,
    USER_BLACKLISTED,
    USER_WHITELISTED,
    EventBus,
    Notification,
)
from kudos.utils.logger import get_logger

logger = get_logger(__name__)

# event -> (resource_type, payload key holding the resource id)
AUDITED_EVENTS: dict[str, tuple[str, str]] = {
    MODERATOR_ADDED: ("user", "identity"),
    MODERATOR_REMOVED: ("user", "identity"),
    USER_BLACKLISTED: ("user", "identity"),
    USER_WHITELISTED: ("user", "identity"),
    COMPLIMENT_DEACTIVATED: ("compliment", "id"),
    OWNERSHIP_TRANSFERRED: ("ledger", "owner"),
    TOKENS_MINTED: ("balance", "to"),
}


@dataclass
class AuditEntry:
    """A single audit log entry."""

    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict[str, Any] = field(default_factory=dict)
    success: bool = True


class AuditLogger:
    """File-based JSONL audit logger."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".kudos" / "audit_logs"
        self._base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_file_for_date(self, dt: datetime) -> Path:
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def _read_all_entries(self) -> list[AuditEntry]:
        entries: list[AuditEntry] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            try:
                text = path.read_text(encoding="utf-8")
            except OSError:
                logger.warning("Skipping unreadable audit file %s", path)
                continue
            for line in text.strip().splitlines():
                if not line.strip():
                    continue
                try:
                    entries.append(AuditEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    logger.warning("Skipping malformed audit line in %s", path)
        return entries

    # ------------------------------------------------------------------
    # Event bus integration
    # ------------------------------------------------------------------

    def attach(self, bus: EventBus) -> None:
        """Subscribe to every audited ledger event on *bus*."""
        for event in AUDITED_EVENTS:
            bus.subscribe(event, self.handle)

    def handle(self, notification: Notification) -> Optional[AuditEntry]:
        """Record *notification*; reward mints (no actor) are ignored."""
        actor = notification.payload.get("actor")
        if not actor:
            return None
        resource_type, key = AUDITED_EVENTS[notification.event]
        details = {
            k: v for k, v in notification.payload.items() if k not in ("actor", key)
        }
        return self.log_event(
            actor=actor,
            action=notification.event,
            resource_type=resource_type,
            resource_id=str(notification.payload.get(key, "")),
            details=details,
            timestamp=notification.timestamp,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def log_event(
        self,
        actor: str,
        action: str,
        resource_type: str,
        resource_id: str,
        details: Optional[dict[str, Any]] = None,
        success: bool = True,
        timestamp: str = "",
    ) -> AuditEntry:
        """Record an audit event and return the created entry."""
        now = datetime.now(timezone.utc)
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=timestamp or now.isoformat(),
            actor=actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
            success=success,
        )
        with self._log_file_for_date(now).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry)) + "\n")
        return entry

    def get_events(
        self,
        *,
        actor: Optional[str] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Return filtered audit events, newest first."""
        entries = self._read_all_entries()

        if actor:
            entries = [e for e in entries if e.actor == actor]
        if action:
            entries = [e for e in entries if e.action == action]
        if resource_type:
            entries = [e for e in entries if e.resource_type == resource_type]
        if resource_id:
            entries = [e for e in entries if e.resource_id == resource_id]

        # Stable sort keeps append order for equal timestamps
        entries.reverse()
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    def export_events(self, fmt: str = "json", **filters: Any) -> str:
        """Export audit events as ``json`` or ``csv``."""
        entries = self.get_events(limit=filters.pop("limit", 10000), **filters)

        if fmt == "csv":
            lines = ["id,timestamp,actor,action,resource_type,resource_id,success"]
            for e in entries:
                lines.append(
                    f"{e.id},{e.timestamp},{e.actor},{e.action},"
                    f"{e.resource_type},{e.resource_id},{e.success}"
                )
            return "\n".join(lines)

        return json.dumps([asdict(e) for e in entries], indent=2)
