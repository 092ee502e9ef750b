"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the durable storage backend because:
1. Users can view and fix their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for a personal ledger)
- No transactions (the ledger writes to storage before touching memory)
- Limited query capabilities (we filter in Python)

All users share one worksheet; rows are scoped by the `user_id` column.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocketledger.config import GoogleSheetsSettings, get_settings
from pocketledger.models.period import ReportPeriod
from pocketledger.models.transaction import (
    Expense,
    Income,
    Transaction,
    TransactionKind,
    variant_for,
)
from pocketledger.services.storage.interface import (
    DEFAULT_USER_ID,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
    sort_newest_first,
)


# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "transaction_id",
    "user_id",
    "kind",
    "amount",
    "description",
    "date",
    "category",
    "source",
    "payment_method",
    "is_recurring",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.transactions_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.transactions_sheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )
            sheet.append_row(TRANSACTION_COLUMNS)
        return sheet

    def close(self) -> None:
        """Drop the cached client so the next call reconnects."""
        self._spreadsheet = None
        self._client = None


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """
    Google Sheets implementation of transaction storage.

    One transaction per row. Variant-specific columns are left blank
    for the other variant.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        user_id: str = DEFAULT_USER_ID,
    ):
        super().__init__(user_id)
        self._client = client or GoogleSheetsClient()

    def open(self) -> None:
        self._client.get_transactions_sheet()

    def close(self) -> None:
        self._client.close()

    def _transaction_to_row(self, tx: Transaction) -> list:
        """Convert a transaction to a spreadsheet row."""
        is_income = tx.kind is TransactionKind.INCOME
        return [
            tx.id,
            self.user_id,
            tx.kind.value,
            str(tx.amount),
            tx.description,
            tx.date.isoformat(),
            tx.category,
            tx.source if is_income else "",
            "" if is_income else tx.payment_method,
            "" if is_income else str(tx.is_recurring),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a transaction."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        model = variant_for(safe_get(2))
        fields = dict(
            id=safe_get(0),
            amount=Decimal(safe_get(3, "0")),
            description=safe_get(4),
            date=date.fromisoformat(safe_get(5)),
            category=safe_get(6),
        )
        if model is Income:
            return Income(source=safe_get(7) or None, **fields)
        return Expense(
            payment_method=safe_get(8) or None,
            is_recurring=safe_get(9).lower() == "true",
            **fields,
        )

    def _user_rows(self, sheet: gspread.Worksheet) -> list[tuple[int, list]]:
        """(sheet row number, row) pairs belonging to the current user."""
        all_rows = sheet.get_all_values()
        # Start from 2 (row 1 is header)
        return [
            (idx, row)
            for idx, row in enumerate(all_rows[1:], start=2)
            if row and row[0] and len(row) > 1 and row[1] == self.user_id
        ]

    def _locate(self, sheet: gspread.Worksheet, transaction_id: str) -> Optional[int]:
        for idx, row in self._user_rows(sheet):
            if row[0] == transaction_id:
                return idx
        return None

    @retry(
        retry=retry_if_not_exception_type(DuplicateError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save(self, tx: Transaction) -> None:
        """Append a new transaction row."""
        try:
            sheet = self._client.get_transactions_sheet()
            if self._locate(sheet, tx.id) is not None:
                raise DuplicateError(f"Transaction already exists: {tx.id}")
            sheet.append_row(self._transaction_to_row(tx), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}") from e

    @retry(
        retry=retry_if_not_exception_type(NotFoundError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def update(self, tx: Transaction) -> None:
        """Rewrite the row of an existing transaction."""
        try:
            sheet = self._client.get_transactions_sheet()
            idx = self._locate(sheet, tx.id)
            if idx is None:
                raise NotFoundError(f"Transaction not found: {tx.id}")

            # One write per row, so a failure never leaves it half-updated
            sheet.update(
                range_name=f"A{idx}",
                values=[self._transaction_to_row(tx)],
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update transaction: {e}") from e

    def delete(self, transaction_id: str) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            idx = self._locate(sheet, transaction_id)
            if idx is not None:
                sheet.delete_rows(idx)
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}") from e

    def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        try:
            sheet = self._client.get_transactions_sheet()
            for _, row in self._user_rows(sheet):
                if row[0] == transaction_id:
                    return self._row_to_transaction(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get transaction: {e}") from e

    def find_all(self) -> list[Transaction]:
        try:
            sheet = self._client.get_transactions_sheet()
            transactions = []
            for _, row in self._user_rows(sheet):
                try:
                    transactions.append(self._row_to_transaction(row))
                except (ValueError, InvalidOperation):
                    continue  # Skip malformed rows
            return sort_newest_first(transactions)
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}") from e

    def find_by_month(self, period: ReportPeriod) -> list[Transaction]:
        return [tx for tx in self.find_all() if period.contains(tx.date)]

    def delete_all(self) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            # Bottom-up so earlier row numbers stay valid
            for idx, _ in reversed(self._user_rows(sheet)):
                sheet.delete_rows(idx)
        except Exception as e:
            raise StorageError(f"Failed to delete transactions: {e}") from e
