"""
Storage Services Package

Provides the abstract transaction storage interface and its concrete
implementations: in-memory and Google Sheets.
"""

from pocketledger.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from pocketledger.services.storage.memory import InMemoryTransactionStorage
from pocketledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
)

__all__ = [
    # Interfaces
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStorage",
    "InMemoryTransactionStorage",
]
