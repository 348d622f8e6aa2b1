"""Consumers of ledger notifications: the audit trail and outbound webhooks."""
