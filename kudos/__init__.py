"""Kudos — a token-incentivized compliment ledger.

Users post short compliments to one another, earn reward units for giving
and receiving them, accumulate reputation, and like each other's posts.
"""

__version__ = "0.1.0"
