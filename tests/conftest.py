"""
Shared fixtures for pocketledger tests.

No real API calls in tests: the Google Sheets adapter runs against
an in-process fake worksheet, and storage failures are injected with
a failing in-memory storage.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest
from tenacity import wait_none

from pocketledger.config import LedgerSettings
from pocketledger.ledger import LedgerManager
from pocketledger.models import Expense, Income
from pocketledger.services.storage import (
    InMemoryTransactionStorage,
    StorageError,
)
from pocketledger.services.storage.google_sheets import (
    TRANSACTION_COLUMNS,
    GoogleSheetsTransactionStorage,
)
from pocketledger.validation import TransactionValidator


def make_income(
    amount="500",
    description="salary",
    day: date = date(2024, 3, 1),
    category: Optional[str] = "SALARY",
    **kwargs,
) -> Income:
    return Income(
        amount=Decimal(amount),
        description=description,
        date=day,
        category=category,
        **kwargs,
    )


def make_expense(
    amount="200",
    description="food",
    day: date = date(2024, 3, 2),
    category: Optional[str] = "FOOD",
    **kwargs,
) -> Expense:
    return Expense(
        amount=Decimal(amount),
        description=description,
        date=day,
        category=category,
        **kwargs,
    )


class FailingStorage(InMemoryTransactionStorage):
    """In-memory storage whose operations can be told to fail."""

    def __init__(self, user_id: str = "DEFAULT_USER"):
        super().__init__(user_id)
        self.fail_save = False
        self.fail_update = False
        self.fail_delete = False
        self.fail_find_all = False
        self.closed = False

    def save(self, tx):
        if self.fail_save:
            raise StorageError("disk full")
        super().save(tx)

    def update(self, tx):
        if self.fail_update:
            raise StorageError("write timed out")
        super().update(tx)

    def delete(self, transaction_id):
        if self.fail_delete:
            raise StorageError("connection reset")
        super().delete(transaction_id)

    def find_all(self):
        if self.fail_find_all:
            raise StorageError("backend unavailable")
        return super().find_all()

    def close(self):
        self.closed = True


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the Sheets adapter."""

    def __init__(self, rows: Optional[list[list[str]]] = None):
        self.rows: list[list[str]] = [list(TRANSACTION_COLUMNS)]
        self.rows.extend(list(row) for row in rows or [])

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append([str(value) for value in values])

    def update(self, range_name=None, values=None, value_input_option=None):
        # Only single-row writes anchored at column A are supported
        row = int(range_name.lstrip("A"))
        self.rows[row - 1] = [str(value) for value in values[0]]

    def delete_rows(self, index: int):
        del self.rows[index - 1]


class FakeSheetsClient:
    """Stands in for GoogleSheetsClient, serving one FakeWorksheet."""

    def __init__(self, worksheet: Optional[FakeWorksheet] = None):
        self.worksheet = worksheet or FakeWorksheet()
        self.closed = False

    def get_transactions_sheet(self) -> FakeWorksheet:
        return self.worksheet

    def close(self):
        self.closed = True


@pytest.fixture
def ledger_settings():
    return LedgerSettings()


@pytest.fixture
def validator(ledger_settings):
    return TransactionValidator(ledger_settings)


@pytest.fixture
def storage():
    return InMemoryTransactionStorage()


@pytest.fixture
def failing_storage():
    return FailingStorage()


@pytest.fixture
def ledger(storage, validator):
    """A ledger opened with a balance of 1000."""
    return LedgerManager(storage, initial_balance=Decimal("1000"), validator=validator)


@pytest.fixture
def failing_ledger(failing_storage, validator):
    return LedgerManager(failing_storage, initial_balance=Decimal("1000"), validator=validator)


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Keep the Sheets retry policy but skip its backoff sleeps."""
    for method in (GoogleSheetsTransactionStorage.save, GoogleSheetsTransactionStorage.update):
        monkeypatch.setattr(method.retry, "wait", wait_none())
