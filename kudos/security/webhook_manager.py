"""Outbound webhooks for ledger notifications.

Consumers register a URL and the events they care about; every matching
notification is POSTed as JSON, signed with HMAC-SHA256 when a secret is set,
and delivered via ``urllib.request`` from a background worker, one
notification at a time in publish order. Failed deliveries are recorded,
never raised.

Storage is file-based JSON in ``~/.kudos/webhooks/``.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import queue
import threading
import time
import urllib.request
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from kudos.events import LEDGER_EVENTS, EventBus, Notification
from kudos.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Webhook:
    """A registered outbound webhook."""

    id: str
    url: str
    events: list[str] = field(default_factory=list)
    secret: str = ""
    active: bool = True
    created_at: str = ""


@dataclass
class WebhookDelivery:
    """Record of a single delivery attempt."""

    id: str
    webhook_id: str
    event: str
    response_status: int = 0
    error: str = ""
    success: bool = False
    delivered_at: str = ""
    duration_ms: int = 0


class WebhookManager:
    """Registers webhooks and fans ledger notifications out to them."""

    def __init__(self, base_dir: Optional[Path] = None, timeout: float = 10.0) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".kudos" / "webhooks"
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._hooks_file = self._base_dir / "webhooks.json"
        self._deliveries_file = self._base_dir / "deliveries.json"
        self._timeout = timeout
        self._queue: queue.Queue[Notification] = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._worker_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _load(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, list) else []
        except (json.JSONDecodeError, OSError):
            return []

    def _save(self, path: Path, data: list[dict[str, Any]]) -> None:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def register_webhook(self, url: str, events: list[str], secret: str = "") -> Webhook:
        unknown = [e for e in events if e not in LEDGER_EVENTS]
        if unknown:
            raise ValueError(f"Unknown events: {', '.join(unknown)}")
        wh = Webhook(
            id=uuid.uuid4().hex[:16],
            url=url,
            events=list(events),
            secret=secret,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        hooks = self._load(self._hooks_file)
        hooks.append(asdict(wh))
        self._save(self._hooks_file, hooks)
        return wh

    def list_webhooks(self) -> list[Webhook]:
        return [
            Webhook(**{k: v for k, v in d.items() if k in Webhook.__dataclass_fields__})
            for d in self._load(self._hooks_file)
        ]

    def toggle_webhook(self, webhook_id: str, active: bool) -> Webhook:
        hooks = self._load(self._hooks_file)
        for d in hooks:
            if d.get("id") == webhook_id:
                d["active"] = active
                self._save(self._hooks_file, hooks)
                return Webhook(**d)
        raise ValueError(f"Webhook {webhook_id} not found")

    def delete_webhook(self, webhook_id: str) -> bool:
        hooks = self._load(self._hooks_file)
        kept = [d for d in hooks if d.get("id") != webhook_id]
        if len(kept) == len(hooks):
            return False
        self._save(self._hooks_file, kept)
        return True

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def attach(self, bus: EventBus) -> None:
        bus.subscribe_all(self.enqueue)

    def enqueue(self, notification: Notification) -> None:
        """Queue *notification* for the delivery worker and return at once."""
        with self._worker_lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._run, name="kudos-webhooks", daemon=True
                )
                self._worker.start()
        self._queue.put(notification)

    def wait(self) -> None:
        """Block until every queued notification has been handled."""
        self._queue.join()

    def _run(self) -> None:
        while True:
            notification = self._queue.get()
            try:
                self.handle(notification)
            except Exception:
                logger.exception("Webhook dispatch of %s failed", notification.event)
            finally:
                self._queue.task_done()

    def handle(self, notification: Notification) -> list[WebhookDelivery]:
        """Deliver *notification* to every active webhook subscribed to it."""
        hooks = [
            w for w in self.list_webhooks() if w.active and notification.event in w.events
        ]
        if not hooks:
            return []
        results = [self._deliver(wh, notification) for wh in hooks]
        deliveries = self._load(self._deliveries_file)
        deliveries.extend(asdict(d) for d in results)
        self._save(self._deliveries_file, deliveries)
        return results

    @staticmethod
    def compute_signature(body: bytes, secret: str) -> str:
        mac = hmac.new(secret.encode("utf-8"), body, hashlib.sha256)
        return f"sha256={mac.hexdigest()}"

    def _deliver(self, wh: Webhook, notification: Notification) -> WebhookDelivery:
        body = json.dumps(asdict(notification)).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "X-Kudos-Event": notification.event,
        }
        if wh.secret:
            headers["X-Kudos-Signature"] = self.compute_signature(body, wh.secret)

        start = time.monotonic()
        status = 0
        error = ""
        try:
            req = urllib.request.Request(wh.url, data=body, headers=headers, method="POST")
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                status = resp.status
        except Exception as exc:
            error = str(exc)[:500]
            logger.warning("Webhook %s delivery of %s failed: %s", wh.id, notification.event, error)

        return WebhookDelivery(
            id=uuid.uuid4().hex[:16],
            webhook_id=wh.id,
            event=notification.event,
            response_status=status,
            error=error,
            success=200 <= status < 300,
            delivered_at=datetime.now(timezone.utc).isoformat(),
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    def get_deliveries(self, webhook_id: Optional[str] = None, limit: int = 100) -> list[WebhookDelivery]:
        """Delivery records, optionally for one webhook, newest first."""
        deliveries = [WebhookDelivery(**d) for d in self._load(self._deliveries_file)]
        if webhook_id:
            deliveries = [d for d in deliveries if d.webhook_id == webhook_id]
        deliveries.reverse()
        return deliveries[:limit]
