"""
Ledger Package

The ledger manager and the errors its operations raise.
"""

from pocketledger.ledger.errors import (
    InsufficientBalance,
    InvalidTransaction,
    LedgerError,
    LedgerLoadError,
    TransactionDeleteFailed,
    TransactionNotFound,
    TransactionSaveFailed,
)
from pocketledger.ledger.manager import LedgerManager

__all__ = [
    "LedgerManager",
    # Errors
    "InsufficientBalance",
    "InvalidTransaction",
    "LedgerError",
    "LedgerLoadError",
    "TransactionDeleteFailed",
    "TransactionNotFound",
    "TransactionSaveFailed",
]
