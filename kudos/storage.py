"""File-based JSON snapshot of the ledger state.

Storage path: ``~/.kudos/`` (or the configured home) with:
- ``ledger.json`` -- every ledger table plus the supply scalar
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from kudos.ledger.models import EPOCH, Compliment, LedgerState, UserStats
from kudos.utils.logger import get_logger

logger = get_logger(__name__)

SNAPSHOT_VERSION = 1


class LedgerStore:
    """Loads and saves a :class:`LedgerState` as one JSON document."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        if base_dir is None:
            self._base = Path.home() / ".kudos"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._ledger_path = self._base / "ledger.json"

    @property
    def path(self) -> Path:
        return self._ledger_path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self, path: Path) -> dict:
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text())
            return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, OSError):
            logger.warning("Ignoring unreadable ledger snapshot at %s", path)
            return {}

    def _write_json(self, path: Path, data: dict) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._base, prefix=".ledger-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    @staticmethod
    def _parse_time(value: str) -> datetime:
        return datetime.fromisoformat(value) if value else EPOCH

    @staticmethod
    def _compliment_to_dict(c: Compliment) -> dict:
        return {
            "id": c.id,
            "giver": c.giver,
            "recipient": c.recipient,
            "message": c.message,
            "created_at": c.created_at.isoformat(),
            "like_count": c.like_count,
            "active": c.active,
        }

    @classmethod
    def _compliment_from_dict(cls, d: dict) -> Compliment:
        return Compliment(
            id=int(d["id"]),
            giver=d["giver"],
            recipient=d["recipient"],
            message=d["message"],
            created_at=cls._parse_time(d.get("created_at", "")),
            like_count=d.get("like_count", 0),
            active=d.get("active", True),
        )

    @staticmethod
    def _user_to_dict(u: UserStats) -> dict:
        return {
            "identity": u.identity,
            "given": u.given,
            "received": u.received,
            "reputation": u.reputation,
            "rate_window_start": u.rate_window_start.isoformat(),
            "rate_window_count": u.rate_window_count,
            "is_moderator": u.is_moderator,
        }

    @classmethod
    def _user_from_dict(cls, d: dict) -> UserStats:
        return UserStats(
            identity=d["identity"],
            given=d.get("given", 0),
            received=d.get("received", 0),
            reputation=d.get("reputation", 0),
            rate_window_start=cls._parse_time(d.get("rate_window_start", "")),
            rate_window_count=d.get("rate_window_count", 0),
            is_moderator=d.get("is_moderator", False),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, owner: str = "") -> LedgerState:
        """Return the saved state, or an empty one owned by *owner*."""
        data = self._read_json(self._ledger_path)
        if not data:
            return LedgerState(owner=owner)

        compliments = [self._compliment_from_dict(d) for d in data.get("compliments", [])]
        users = [self._user_from_dict(d) for d in data.get("users", [])]
        return LedgerState(
            owner=data.get("owner") or owner,
            compliments={c.id: c for c in compliments},
            next_id=data.get("next_id", max((c.id for c in compliments), default=0) + 1),
            users={u.identity: u for u in users},
            likes={(int(cid), liker) for cid, liker in data.get("likes", [])},
            blacklist=set(data.get("blacklist", [])),
            total_issued=data.get("total_issued", 0),
            balances=dict(data.get("balances", {})),
            allowances={
                (a["owner"], a["spender"]): a["amount"]
                for a in data.get("allowances", [])
            },
        )

    def save(self, state: LedgerState) -> None:
        with state.lock:
            data = {
                "version": SNAPSHOT_VERSION,
                "owner": state.owner,
                "next_id": state.next_id,
                "total_issued": state.total_issued,
                "compliments": [
                    self._compliment_to_dict(state.compliments[cid])
                    for cid in sorted(state.compliments)
                ],
                "users": [self._user_to_dict(u) for u in state.users.values()],
                "likes": sorted([cid, liker] for cid, liker in state.likes),
                "blacklist": sorted(state.blacklist),
                "balances": dict(state.balances),
                "allowances": [
                    {"owner": o, "spender": s, "amount": amount}
                    for (o, s), amount in state.allowances.items()
                ],
            }
        self._write_json(self._ledger_path, data)
