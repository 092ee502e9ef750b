"""
Data Models Package

This package contains all Pydantic models used in pocketledger.
All data flowing through the ledger must conform to these schemas.
"""

from pocketledger.models.category import (
    Category,
    CategorySide,
    expense_categories,
    income_categories,
    match_category,
    normalize_category,
    resolve_category,
)
from pocketledger.models.event import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerSeverity,
)
from pocketledger.models.period import ReportPeriod
from pocketledger.models.transaction import (
    Expense,
    Income,
    Transaction,
    TransactionBase,
    TransactionKind,
    new_transaction_id,
    parse_kind,
    parse_transaction,
    variant_for,
)
from pocketledger.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Categories
    "Category",
    "CategorySide",
    "expense_categories",
    "income_categories",
    "match_category",
    "normalize_category",
    "resolve_category",
    # Transactions
    "Expense",
    "Income",
    "Transaction",
    "TransactionBase",
    "TransactionKind",
    "new_transaction_id",
    "parse_kind",
    "parse_transaction",
    "variant_for",
    # Periods
    "ReportPeriod",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Events
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
    "LedgerSeverity",
]
