"""
Tests for the storage implementations.

The Google Sheets storage runs against FakeWorksheet; no API calls.
"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import FakeSheetsClient, FakeWorksheet, make_expense, make_income
from pocketledger.ledger import LedgerManager, TransactionSaveFailed
from pocketledger.models import Expense, Income, ReportPeriod, TransactionKind
from pocketledger.services.storage import (
    DuplicateError,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
)


class TestInMemoryStorage:
    """Tests for the in-memory storage."""

    def test_save_and_find(self, storage):
        """Test that a saved transaction can be found again."""
        tx = make_income("10")
        storage.save(tx)
        assert storage.find_by_id(tx.id) == tx
        assert storage.find_by_id("TRX-MISSING") is None

    def test_save_duplicate(self, storage):
        """Test that saving the same ID twice fails."""
        tx = make_income("10")
        storage.save(tx)
        with pytest.raises(DuplicateError):
            storage.save(tx)

    def test_stores_copies(self, storage):
        """Test that later changes to the caller's object aren't stored."""
        tx = make_expense("10", description="original")
        storage.save(tx)
        tx.description = "changed"
        assert storage.find_by_id(tx.id).description == "original"

    def test_update(self, storage):
        """Test replacing an existing row."""
        tx = make_expense("10")
        storage.save(tx)
        storage.update(make_expense("99").with_id(tx.id))
        assert storage.find_by_id(tx.id).amount == Decimal("99")

    def test_update_missing(self, storage):
        """Test that updating an unknown ID fails."""
        with pytest.raises(NotFoundError):
            storage.update(make_expense("10"))

    def test_delete_and_delete_all(self, storage):
        """Test removing rows."""
        first, second = make_income("1"), make_income("2")
        storage.save(first)
        storage.save(second)

        storage.delete(first.id)
        storage.delete("TRX-MISSING")
        assert storage.find_all() == [second]

        storage.delete_all()
        assert storage.find_all() == []

    def test_user_scoping(self):
        """Test that each user only sees their own rows."""
        storage = InMemoryTransactionStorage(user_id="alice")
        storage.save(make_income("1"))
        storage.set_user_id("bob")
        assert storage.find_all() == []
        storage.save(make_income("2"))
        storage.delete_all()
        storage.set_user_id("alice")
        assert len(storage.find_all()) == 1

    def test_filters(self, storage):
        """Test kind, date and month filters with newest-first order."""
        storage.save(make_income("1", day=date(2024, 3, 1)))
        storage.save(make_expense("2", day=date(2024, 3, 15)))
        storage.save(make_expense("3", day=date(2024, 4, 1)))

        assert [tx.amount for tx in storage.find_all()] == [3, 2, 1]
        assert len(storage.find_by_kind(TransactionKind.EXPENSE)) == 2
        assert len(storage.find_by_kind("income")) == 1
        assert len(storage.find_by_date(date(2024, 3, 15))) == 1
        march = storage.find_by_month(ReportPeriod(year=2024, month=3))
        assert [tx.amount for tx in march] == [2, 1]


class TestGoogleSheetsStorage:
    """Tests for the Google Sheets storage against a fake worksheet."""

    @pytest.fixture
    def worksheet(self):
        return FakeWorksheet()

    @pytest.fixture
    def sheets(self, worksheet):
        return GoogleSheetsTransactionStorage(FakeSheetsClient(worksheet), user_id="alice")

    def test_save_writes_row(self, sheets, worksheet):
        """Test the row layout of a saved expense."""
        tx = make_expense(
            "12.50",
            description="Taxi",
            day=date(2024, 3, 9),
            category="TRANSPORTATION",
            payment_method="Credit",
            is_recurring=True,
        )
        sheets.save(tx)

        assert worksheet.rows[1] == [
            tx.id, "alice", "expense", "12.50", "Taxi", "2024-03-09",
            "Transportation", "", "Credit", "True",
        ]

    def test_income_row_roundtrip(self, sheets):
        """Test that an income comes back with its source."""
        tx = make_income("500", source="Employer")
        sheets.save(tx)

        loaded = sheets.find_by_id(tx.id)
        assert isinstance(loaded, Income)
        assert loaded == tx

    def test_save_duplicate(self, sheets):
        """Test that saving the same ID twice fails without retrying."""
        tx = make_income("10")
        sheets.save(tx)
        with pytest.raises(DuplicateError):
            sheets.save(tx)

    def test_update(self, sheets, worksheet):
        """Test that update rewrites the row in place."""
        tx = make_expense("10")
        sheets.save(tx)
        sheets.save(make_income("20"))

        sheets.update(make_expense("11", description="edited").with_id(tx.id))

        assert worksheet.rows[1][0] == tx.id
        assert worksheet.rows[1][3] == "11"
        assert worksheet.rows[1][4] == "edited"

    def test_failed_update_leaves_row_intact(self, no_retry_wait):
        """Test that a failing write never leaves a mixed old/new row."""
        class RejectingWorksheet(FakeWorksheet):
            writes = 0

            def update(self, range_name=None, values=None, value_input_option=None):
                self.writes += 1
                raise RuntimeError("quota exceeded")

        worksheet = RejectingWorksheet()
        sheets = GoogleSheetsTransactionStorage(FakeSheetsClient(worksheet))
        tx = make_expense("10", description="lunch")
        sheets.save(tx)

        with pytest.raises(StorageError, match="quota exceeded"):
            sheets.update(make_expense("999", description="dinner").with_id(tx.id))

        assert worksheet.writes == 3
        stored = sheets.find_by_id(tx.id)
        assert (stored.amount, stored.description) == (Decimal("10"), "lunch")

    def test_update_retries_transient_failure(self, no_retry_wait):
        """Test that a write failing once is retried as a whole row."""
        class FlakyWorksheet(FakeWorksheet):
            failed = False

            def update(self, range_name=None, values=None, value_input_option=None):
                if not self.failed:
                    self.failed = True
                    raise RuntimeError("connection reset")
                super().update(range_name, values, value_input_option)

        sheets = GoogleSheetsTransactionStorage(FakeSheetsClient(FlakyWorksheet()))
        tx = make_expense("10", description="lunch")
        sheets.save(tx)

        sheets.update(make_expense("999", description="dinner").with_id(tx.id))

        stored = sheets.find_by_id(tx.id)
        assert (stored.amount, stored.description) == (Decimal("999"), "dinner")

    def test_ledger_and_sheet_agree_after_failed_update(self, no_retry_wait, validator):
        """Test that memory and the sheet hold the same record after a failed update."""
        class RejectingWorksheet(FakeWorksheet):
            def update(self, range_name=None, values=None, value_input_option=None):
                raise RuntimeError("quota exceeded")

        sheets = GoogleSheetsTransactionStorage(FakeSheetsClient(RejectingWorksheet()))
        ledger = LedgerManager(sheets, Decimal("1000"), validator=validator)
        tx = ledger.add_transaction(make_expense("10", description="lunch"))

        with pytest.raises(TransactionSaveFailed):
            ledger.update_transaction(tx.id, make_expense("999", description="dinner"))

        assert ledger.find_by_id(tx.id) == sheets.find_by_id(tx.id) == tx

    def test_find_by_kind_ignores_case(self, sheets):
        """Test that kind tags are read the same way as everywhere else."""
        sheets.save(make_income("1"))
        sheets.save(make_expense("2"))
        assert len(sheets.find_by_kind("Income")) == 1
        assert len(sheets.find_by_kind(" EXPENSE ")) == 1

    def test_update_missing(self, sheets):
        """Test that updating an unknown ID fails."""
        with pytest.raises(NotFoundError):
            sheets.update(make_expense("10"))

    def test_delete(self, sheets, worksheet):
        """Test that delete removes the row."""
        tx = make_expense("10")
        sheets.save(tx)
        sheets.delete(tx.id)
        sheets.delete("TRX-MISSING")
        assert len(worksheet.rows) == 1

    def test_user_scoping(self, sheets, worksheet):
        """Test that rows of other users are invisible and untouched."""
        sheets.save(make_income("1"))
        sheets.set_user_id("bob")
        bob_tx = make_income("2")
        sheets.save(bob_tx)
        sheets.save(make_expense("1"))

        assert len(sheets.find_all()) == 2
        sheets.delete_all()
        assert sheets.find_all() == []

        sheets.set_user_id("alice")
        assert len(sheets.find_all()) == 1
        assert len(worksheet.rows) == 2

    def test_find_all_skips_malformed_rows(self, worksheet):
        """Test that unreadable rows are ignored."""
        worksheet.rows.append(["TRX-BAD", "alice", "expense", "not-a-number", "x", "2024-03-01"])
        worksheet.rows.append(["TRX-BAD2", "alice", "transfer", "1", "x", "2024-03-01"])
        worksheet.rows.append(["TRX-OK", "alice", "expense", "5", "ok", "2024-03-01", "Food"])
        sheets = GoogleSheetsTransactionStorage(FakeSheetsClient(worksheet), user_id="alice")

        transactions = sheets.find_all()

        assert [tx.id for tx in transactions] == ["TRX-OK"]
        assert isinstance(transactions[0], Expense)
        assert transactions[0].payment_method == "Cash"

    def test_find_by_month(self, sheets):
        """Test month filtering."""
        sheets.save(make_expense("1", day=date(2024, 3, 1)))
        sheets.save(make_expense("2", day=date(2024, 5, 1)))
        assert len(sheets.find_by_month(ReportPeriod(year=2024, month=5))) == 1

    def test_read_failure_is_storage_error(self):
        """Test that worksheet errors surface as StorageError."""
        class BrokenWorksheet(FakeWorksheet):
            def get_all_values(self):
                raise RuntimeError("quota exceeded")

        sheets = GoogleSheetsTransactionStorage(FakeSheetsClient(BrokenWorksheet()))
        with pytest.raises(StorageError, match="quota exceeded"):
            sheets.find_all()

    def test_close_closes_client(self, worksheet):
        """Test that close is forwarded to the client."""
        client = FakeSheetsClient(worksheet)
        GoogleSheetsTransactionStorage(client).close()
        assert client.closed


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
