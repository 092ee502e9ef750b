"""
Ledger Errors

Every failed ledger operation raises one of these. Callers translate
them into their own transport format.

Storage failures use dedicated subclasses so "not found" and "store
failed" stay distinguishable internally, while a caller catching the
broader kind still handles both.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base exception for ledger operations."""

    is_storage_failure = False


class InvalidTransaction(LedgerError):
    """Transaction is missing, malformed or failed validation."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InsufficientBalance(LedgerError):
    """An expense would exceed the available balance."""

    def __init__(self, current_balance: Decimal, requested_amount: Decimal):
        self.current_balance = current_balance
        self.requested_amount = requested_amount
        super().__init__(
            f"Insufficient balance: current balance {current_balance:,.2f}, "
            f"requested {requested_amount:,.2f}"
        )


class TransactionNotFound(LedgerError):
    """No transaction with this ID in the ledger."""

    def __init__(self, transaction_id: str, message: str = ""):
        self.transaction_id = transaction_id
        super().__init__(message or f"Transaction not found: {transaction_id}")


class TransactionSaveFailed(InvalidTransaction):
    """Storage refused or failed to write the transaction."""

    is_storage_failure = True


class TransactionDeleteFailed(TransactionNotFound):
    """Storage failed to delete the transaction."""

    is_storage_failure = True


class LedgerLoadError(LedgerError):
    """Transactions could not be loaded from storage."""

    is_storage_failure = True
