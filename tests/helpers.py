"""Shared builders for ledger tests."""

from datetime import datetime, timedelta, timezone

from kudos.config import Settings
from kudos.ledger.service import ComplimentLedger

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_ledger(tmpdir: str = "", **overrides) -> tuple[ComplimentLedger, FakeClock]:
    """Build an in-memory ledger owned by ``owner`` with a fake clock."""
    settings_kwargs = {"owner": "owner"}
    if tmpdir:
        settings_kwargs["home"] = tmpdir
    settings_kwargs.update(overrides)
    clock = FakeClock()
    ledger = ComplimentLedger(settings=Settings(**settings_kwargs), clock=clock)
    return ledger, clock
