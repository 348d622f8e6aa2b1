"""Ledger core — supply, users, compliments, likes and the two user actions.

Every component reads and writes one shared :class:`LedgerState`; the
:class:`ComplimentLedger` facade wires them together and is the entry point
for callers.
"""

from kudos.ledger.compliments import ComplimentStore
from kudos.ledger.likes import LikeRegistry
from kudos.ledger.models import Compliment, LedgerState, UserStats
from kudos.ledger.processor import ActionProcessor
from kudos.ledger.service import ComplimentLedger
from kudos.ledger.supply import SupplyLedger
from kudos.ledger.users import UserRegistry

__all__ = [
    "ActionProcessor",
    "Compliment",
    "ComplimentLedger",
    "ComplimentStore",
    "LedgerState",
    "LikeRegistry",
    "SupplyLedger",
    "UserRegistry",
    "UserStats",
]
