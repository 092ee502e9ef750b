"""
In-Memory Storage Implementation

Keeps transactions in per-user dictionaries. Used for tests, local
runs and as the fallback when no durable backend is configured.

Stored objects are deep copies, so callers mutating a transaction
after saving it cannot change what the store holds.
"""

from typing import Optional

from pocketledger.models.period import ReportPeriod
from pocketledger.models.transaction import Transaction
from pocketledger.services.storage.interface import (
    DEFAULT_USER_ID,
    DuplicateError,
    NotFoundError,
    TransactionStorageInterface,
    sort_newest_first,
)


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Dictionary-backed transaction storage, scoped by user."""

    def __init__(self, user_id: str = DEFAULT_USER_ID):
        super().__init__(user_id)
        self._rows: dict[str, dict[str, Transaction]] = {}

    def _user_rows(self) -> dict[str, Transaction]:
        return self._rows.setdefault(self.user_id, {})

    def save(self, tx: Transaction) -> None:
        rows = self._user_rows()
        if tx.id in rows:
            raise DuplicateError(f"Transaction already exists: {tx.id}")
        rows[tx.id] = tx.model_copy(deep=True)

    def update(self, tx: Transaction) -> None:
        rows = self._user_rows()
        if tx.id not in rows:
            raise NotFoundError(f"Transaction not found: {tx.id}")
        rows[tx.id] = tx.model_copy(deep=True)

    def delete(self, transaction_id: str) -> None:
        self._user_rows().pop(transaction_id, None)

    def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        tx = self._user_rows().get(transaction_id)
        return tx.model_copy(deep=True) if tx is not None else None

    def find_all(self) -> list[Transaction]:
        return sort_newest_first(
            [tx.model_copy(deep=True) for tx in self._user_rows().values()]
        )

    def find_by_month(self, period: ReportPeriod) -> list[Transaction]:
        return [tx for tx in self.find_all() if period.contains(tx.date)]

    def delete_all(self) -> None:
        self._user_rows().clear()
