"""
Ledger Manager

Owns the in-memory working set of one user's transactions and is the
only path through which they change.

DESIGN DECISION: Storage first, memory second.
Every mutation is written to storage before the in-memory set is
touched. If storage fails, memory is left exactly as it was, so
memory is never ahead of the durable store.

INVARIANTS:
- total_balance() == initial_balance + total_income() - total_expense()
- An expense is refused when it exceeds the balance at insertion time
- An update keeps the ID of the record it replaces
- No two transactions in the set share an ID
- Callers only ever receive copies of the records in the set

THREAD SAFETY: One coarse RLock per manager guards the set and every
mutation. There is no performance requirement, only correctness of
the balance under concurrent callers.
"""

import threading
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from pocketledger.activity import ActivityLogger
from pocketledger.ledger.errors import (
    InsufficientBalance,
    InvalidTransaction,
    LedgerLoadError,
    TransactionDeleteFailed,
    TransactionNotFound,
    TransactionSaveFailed,
)
from pocketledger.models.category import Category
from pocketledger.models.period import ReportPeriod
from pocketledger.models.transaction import (
    Transaction,
    TransactionBase,
    TransactionKind,
    parse_kind,
)
from pocketledger.reports import MonthlyReport
from pocketledger.services.storage import StorageError, TransactionStorageInterface
from pocketledger.services.storage.interface import DEFAULT_USER_ID, sort_newest_first
from pocketledger.validation import TransactionValidator


ZERO = Decimal("0")


class LedgerManager:
    """
    In-memory ledger backed by a transaction storage.

    Usage:
        with LedgerManager(InMemoryTransactionStorage(), Decimal("1000")) as ledger:
            ledger.add_transaction(Income(amount=Decimal("500"), ...))
            ledger.total_balance()
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        initial_balance: Decimal = ZERO,
        user_id: str = DEFAULT_USER_ID,
        validator: Optional[TransactionValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._initial_balance = Decimal(initial_balance)
        self._validator = validator or TransactionValidator()
        self._activity = activity_logger or ActivityLogger()
        self._lock = threading.RLock()
        self._transactions: list[Transaction] = []

        self._storage.set_user_id(user_id or DEFAULT_USER_ID)
        self._transactions = self._load()

    def __enter__(self) -> "LedgerManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the storage handle."""
        self._storage.close()

    def _load(self) -> list[Transaction]:
        """Read the current user's transactions from storage."""
        user_id = self._storage.user_id
        try:
            transactions = self._storage.find_all()
        except StorageError as e:
            self._activity.log_storage_failed(user_id, "find_all", str(e))
            raise LedgerLoadError(
                f"Failed to load transactions for {user_id}: {e}"
            ) from e

        self._activity.log_ledger_loaded(user_id, len(transactions))
        return [tx.model_copy(deep=True) for tx in transactions]

    @property
    def current_user_id(self) -> str:
        return self._storage.user_id

    def set_current_user(self, user_id: Optional[str]) -> None:
        """
        Switch the ledger to another user and reload from storage.

        Does nothing when `user_id` is None or already current. If the
        reload fails, the previous user and transactions stay active.

        Raises:
            LedgerLoadError: If the new user's transactions can't be read
        """
        with self._lock:
            previous_user_id = self._storage.user_id
            if user_id is None or user_id == previous_user_id:
                return

            self._storage.set_user_id(user_id)
            try:
                transactions = self._load()
            except LedgerLoadError:
                self._storage.set_user_id(previous_user_id)
                raise

            self._transactions = transactions
            self._activity.log_user_switched(previous_user_id, user_id)

    @property
    def initial_balance(self) -> Decimal:
        return self._initial_balance

    @initial_balance.setter
    def initial_balance(self, value: Decimal) -> None:
        with self._lock:
            self._initial_balance = Decimal(value)

    def _check_valid(self, tx: Optional[Transaction]) -> None:
        """Raise InvalidTransaction unless `tx` passes the validator."""
        user_id = self._storage.user_id

        if tx is None or not isinstance(tx, TransactionBase):
            reason = "Transaction must not be None"
            self._activity.log_transaction_rejected(user_id, None, reason)
            raise InvalidTransaction(reason)

        result = self._validator.validate(tx)
        if not result.is_valid:
            reason = "; ".join(result.error_messages)
            self._activity.log_transaction_rejected(user_id, tx.id, reason)
            raise InvalidTransaction(reason)

        if result.warnings:
            self._activity.log_validation_warnings(user_id, tx.id, result.warnings)

    def _check_balance(self, tx: Transaction, available: Decimal) -> None:
        if tx.kind is TransactionKind.EXPENSE and available < tx.amount:
            self._activity.log_insufficient_balance(
                self._storage.user_id, available, tx.amount, tx.id
            )
            raise InsufficientBalance(available, tx.amount)

    def _index_of(self, transaction_id: str) -> int:
        for idx, tx in enumerate(self._transactions):
            if tx.id == transaction_id:
                return idx
        raise TransactionNotFound(transaction_id)

    def add_transaction(self, tx: Transaction) -> Transaction:
        """
        Validate, persist and then record a new transaction.

        Raises:
            InvalidTransaction: If tx is None, invalid or its ID is taken
            InsufficientBalance: If an expense exceeds the current balance
            TransactionSaveFailed: If storage fails to save it
        """
        with self._lock:
            # Records in the set are never shared with callers
            if isinstance(tx, TransactionBase):
                tx = tx.model_copy(deep=True)
            self._check_valid(tx)
            user_id = self._storage.user_id

            if any(existing.id == tx.id for existing in self._transactions):
                reason = f"Duplicate transaction ID: {tx.id}"
                self._activity.log_transaction_rejected(user_id, tx.id, reason)
                raise InvalidTransaction(reason)

            self._check_balance(tx, self._balance())

            try:
                self._storage.save(tx)
            except StorageError as e:
                self._activity.log_storage_failed(user_id, "save", str(e), tx.id)
                raise TransactionSaveFailed(f"Failed to save transaction: {e}") from e

            self._transactions.append(tx)
            self._activity.log_transaction_added(user_id, tx.id, tx.kind.value, tx.amount)
            return tx.model_copy(deep=True)

    def delete_transaction(self, transaction_id: str) -> None:
        """
        Remove a transaction from storage and then from memory.

        Raises:
            TransactionNotFound: If no transaction has this ID
            TransactionDeleteFailed: If storage fails to delete it
        """
        with self._lock:
            user_id = self._storage.user_id
            idx = self._index_of(transaction_id)

            try:
                self._storage.delete(transaction_id)
            except StorageError as e:
                self._activity.log_storage_failed(user_id, "delete", str(e), transaction_id)
                raise TransactionDeleteFailed(
                    transaction_id, f"Failed to delete transaction {transaction_id}: {e}"
                ) from e

            del self._transactions[idx]
            self._activity.log_transaction_deleted(user_id, transaction_id)

    def update_transaction(self, transaction_id: str, new_tx: Transaction) -> Transaction:
        """
        Replace a transaction, keeping its ID.

        The replacement may change kind. The balance is checked as if
        the old record were already gone.

        Returns:
            The stored replacement (carrying `transaction_id`)

        Raises:
            InvalidTransaction: If new_tx is None or invalid
            TransactionNotFound: If no transaction has this ID
            InsufficientBalance: If the replacement expense exceeds the balance
            TransactionSaveFailed: If storage fails to update it
        """
        with self._lock:
            replacement = new_tx
            if isinstance(new_tx, TransactionBase):
                replacement = new_tx.with_id(transaction_id)
            self._check_valid(replacement)
            user_id = self._storage.user_id
            idx = self._index_of(transaction_id)

            old = self._transactions[idx]
            self._check_balance(replacement, self._balance() - old.signed_amount)

            try:
                self._storage.update(replacement)
            except StorageError as e:
                self._activity.log_storage_failed(user_id, "update", str(e), transaction_id)
                raise TransactionSaveFailed(f"Failed to update transaction: {e}") from e

            self._transactions[idx] = replacement
            self._activity.log_transaction_updated(
                user_id, transaction_id, replacement.kind.value, replacement.amount
            )
            return replacement.model_copy(deep=True)

    def find_by_id(self, transaction_id: str) -> Transaction:
        """
        Raises:
            TransactionNotFound: If no transaction has this ID
        """
        with self._lock:
            return self._transactions[self._index_of(transaction_id)].model_copy(deep=True)

    def list_all(self) -> list[Transaction]:
        """All transactions, newest first."""
        with self._lock:
            return [tx.model_copy(deep=True) for tx in sort_newest_first(self._transactions)]

    def list_by_kind(self, kind: Union[TransactionKind, str]) -> list[Transaction]:
        kind = parse_kind(kind)
        return [tx for tx in self.list_all() if tx.kind is kind]

    def list_by_category(self, category: Union[Category, str]) -> list[Transaction]:
        """Transactions whose category name matches, ignoring case."""
        if isinstance(category, Category):
            category = category.display_name
        wanted = category.strip().casefold()
        return [tx for tx in self.list_all() if tx.category.casefold() == wanted]

    def list_by_date(self, day: date) -> list[Transaction]:
        return [tx for tx in self.list_all() if tx.date == day]

    def list_by_month(self, period: ReportPeriod) -> list[Transaction]:
        return [tx for tx in self.list_all() if period.contains(tx.date)]

    def _sum(self, kind: TransactionKind) -> Decimal:
        return sum(
            (tx.amount for tx in self._transactions if tx.kind is kind),
            ZERO,
        )

    def _balance(self) -> Decimal:
        return (
            self._initial_balance
            + self._sum(TransactionKind.INCOME)
            - self._sum(TransactionKind.EXPENSE)
        )

    def total_income(self) -> Decimal:
        with self._lock:
            return self._sum(TransactionKind.INCOME)

    def total_expense(self) -> Decimal:
        with self._lock:
            return self._sum(TransactionKind.EXPENSE)

    def total_balance(self) -> Decimal:
        """initial_balance + total_income - total_expense."""
        with self._lock:
            return self._balance()

    def generate_monthly_report(
        self,
        period: Union[ReportPeriod, str, None] = None,
    ) -> MonthlyReport:
        """
        Build a report over a snapshot of the current transactions.

        `period` may be a ReportPeriod, a "YYYY-MM" / "MM/YYYY" string,
        or None for the current month.
        """
        if period is None:
            period = ReportPeriod.current()
        elif isinstance(period, str):
            period = ReportPeriod.parse(period)

        with self._lock:
            report = MonthlyReport(self._transactions, period)

        self._activity.log_report_generated(
            self._storage.user_id,
            str(period),
            len(report.transactions_in_period()),
        )
        return report

    def balance_summary(self) -> str:
        """Opening balance, totals and closing balance as a text block."""
        with self._lock:
            initial = self._initial_balance
            income = self._sum(TransactionKind.INCOME)
            expense = self._sum(TransactionKind.EXPENSE)

        lines = [
            "========== BALANCE SUMMARY ==========",
            f"Initial Balance  : {initial:>18,.2f}",
            f"Total Income     : {income:>18,.2f}",
            f"Total Expense    : {expense:>18,.2f}",
            "-------------------------------------",
            f"FINAL BALANCE    : {initial + income - expense:>18,.2f}",
            "=====================================",
        ]
        return "\n".join(lines)
