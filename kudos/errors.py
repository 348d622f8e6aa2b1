"""Error kinds raised by the ledger.

Every error carries a stable ``code`` string so the CLI and the HTTP layer
can report it without matching on class names.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all ledger failures."""

    code = "ledger_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class Blacklisted(LedgerError):
    code = "blacklisted"


class InvalidRecipient(LedgerError):
    code = "invalid_recipient"


class InvalidMessage(LedgerError):
    code = "invalid_message"


class RateLimitExceeded(LedgerError):
    code = "rate_limit_exceeded"


class NotFound(LedgerError):
    code = "not_found"


class AlreadyLiked(LedgerError):
    code = "already_liked"


class SelfLike(LedgerError):
    code = "self_like"


class InvalidArgument(LedgerError):
    code = "invalid_argument"


class InsufficientBalance(LedgerError):
    code = "insufficient_balance"


class InsufficientAllowance(LedgerError):
    code = "insufficient_allowance"


class Unauthorized(LedgerError):
    code = "unauthorized"


class SupplyCapExceeded(LedgerError):
    """Only raised by hard mints; reward mints skip instead."""

    code = "supply_cap_exceeded"
