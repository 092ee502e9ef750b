"""
Main Orchestrator for pocketledger

Ties settings, storage, activity logging and the ledger manager
together so callers get a ready-to-use ledger from one call.

DESIGN DECISION: A misconfigured or unreachable Google Sheets backend
does not stop the ledger from starting. The orchestrator logs a
warning and falls back to in-memory storage.
"""

from typing import Optional

import structlog

from pocketledger.activity import ActivityLogger, configure_logging
from pocketledger.config import get_settings
from pocketledger.ledger import LedgerManager
from pocketledger.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    TransactionStorageInterface,
)
from pocketledger.validation import TransactionValidator


logger = structlog.get_logger(__name__)


def create_storage(backend: Optional[str] = None) -> TransactionStorageInterface:
    """
    Build the storage backend named by `backend` (or by settings).

    Falls back to in-memory storage if Google Sheets can't be opened.
    """
    ledger_settings = get_settings().ledger
    backend = (backend or ledger_settings.storage_backend).strip().lower()

    if backend == "google_sheets":
        try:
            storage = GoogleSheetsTransactionStorage(
                GoogleSheetsClient(get_settings().google_sheets),
                user_id=ledger_settings.default_user_id,
            )
            storage.open()
            return storage
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning(
                "storage_unavailable",
                backend=backend,
                error=str(e),
                fallback="memory",
            )
    elif backend != "memory":
        raise ValueError(f"Unsupported storage backend: {backend}")

    return InMemoryTransactionStorage(user_id=ledger_settings.default_user_id)


def create_ledger_manager(
    use_storage: bool = True,
) -> LedgerManager:
    """
    Factory function to create a configured ledger.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False for in-memory storage regardless of settings.
    """
    ledger_settings = get_settings().ledger
    configure_logging(ledger_settings.log_level)

    storage = create_storage() if use_storage else create_storage("memory")

    return LedgerManager(
        storage,
        initial_balance=ledger_settings.initial_balance,
        user_id=ledger_settings.default_user_id,
        validator=TransactionValidator(ledger_settings),
        activity_logger=ActivityLogger(),
    )
