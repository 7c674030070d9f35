"""
The simulated ledger: transactions, call contexts and runtime settings.
"""

from tokenmigration.ledger.ledger import Clock, Ledger, utc_now
from tokenmigration.ledger.settings import LedgerSettings
from tokenmigration.ledger.transaction import CallContext, Transaction, rehydrate

__all__ = [
    "CallContext",
    "Clock",
    "Ledger",
    "LedgerSettings",
    "Transaction",
    "rehydrate",
    "utc_now",
]
