"""
Abstract Storage Interface

DESIGN DECISION: The ledger depends on an abstract interface for storage.
This allows us to:
1. Use in-memory storage for tests and local runs
2. Back the ledger with Google Sheets (or a SQL store) without changing it
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations the ledger needs.

SCOPING: Every operation is scoped to the storage's current user.
The implementation is responsible for filtering by `user_id`.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Union

from pocketledger.models.period import ReportPeriod
from pocketledger.models.transaction import Transaction, TransactionKind, parse_kind


DEFAULT_USER_ID = "DEFAULT_USER"


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Any storage implementation (Google Sheets, in-memory, SQL, ...)
    must implement these methods. All methods are synchronous and
    raise StorageError (or a subclass) on failure.
    """

    def __init__(self, user_id: str = DEFAULT_USER_ID):
        self._user_id = user_id

    @property
    def user_id(self) -> str:
        """The user every operation is scoped to."""
        return self._user_id

    def set_user_id(self, user_id: str) -> None:
        """Scope subsequent operations to `user_id`."""
        self._user_id = user_id or DEFAULT_USER_ID

    def open(self) -> None:
        """Acquire backend resources. No-op by default."""

    def close(self) -> None:
        """Release backend resources. No-op by default."""

    @abstractmethod
    def save(self, tx: Transaction) -> None:
        """
        Save a new transaction.

        Raises:
            DuplicateError: If a transaction with this ID already exists
            StorageError: If save fails
        """

    @abstractmethod
    def update(self, tx: Transaction) -> None:
        """
        Replace the stored transaction that has `tx.id`.

        Raises:
            NotFoundError: If the transaction doesn't exist
            StorageError: If update fails
        """

    @abstractmethod
    def delete(self, transaction_id: str) -> None:
        """
        Delete a transaction by ID. Deleting a missing ID is not an error.

        Raises:
            StorageError: If delete fails
        """

    @abstractmethod
    def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve a transaction by its ID.

        Returns:
            The transaction if found, None otherwise
        """

    @abstractmethod
    def find_all(self) -> list[Transaction]:
        """
        List every transaction of the current user.

        Returns:
            Transactions ordered by date, newest first
        """

    @abstractmethod
    def find_by_month(self, period: ReportPeriod) -> list[Transaction]:
        """
        List the current user's transactions dated within `period`.

        Returns:
            Transactions ordered by date, newest first
        """

    @abstractmethod
    def delete_all(self) -> None:
        """
        Delete every transaction of the current user.

        Raises:
            StorageError: If delete fails
        """

    def find_by_kind(self, kind: Union[TransactionKind, str]) -> list[Transaction]:
        """List the current user's transactions of one kind."""
        kind = parse_kind(kind)
        return [tx for tx in self.find_all() if tx.kind is kind]

    def find_by_date(self, day: date) -> list[Transaction]:
        """List the current user's transactions on one date."""
        return [tx for tx in self.find_all() if tx.date == day]


def sort_newest_first(transactions: list[Transaction]) -> list[Transaction]:
    """Order by date descending, keeping insertion order for ties."""
    return sorted(transactions, key=lambda tx: tx.date, reverse=True)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
