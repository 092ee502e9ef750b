"""
Activity Logger

Every ledger mutation and rejection is logged as a structured event.
This provides:
1. Traceability of what the ledger did and why it refused
2. Debugging capability when storage misbehaves

The activity logger:
- Is synchronous, like the ledger it serves
- Never raises (a logging failure must not break a ledger operation)
- Only writes to the structured log; nothing is persisted
"""

import logging
from typing import Optional

import structlog

from pocketledger.models.event import LedgerEvent, LedgerEventBuilder, LedgerSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output through a stdlib handler at `level`.

    Safe to call more than once; only the level changes on later calls.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(message)s")
    root.setLevel(level.upper())


class ActivityLogger:
    """
    Central ledger event logger.

    Wraps a structlog logger and maps event severity onto log levels.
    """

    def __init__(self, logger_name: str = "pocketledger"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: LedgerEvent) -> bool:
        """
        Log a ledger event.

        Returns True if the event was written.
        """
        try:
            log_dict = event.to_log_dict()

            if event.severity is LedgerSeverity.ERROR:
                self._logger.error("ledger_event", **log_dict)
            elif event.severity is LedgerSeverity.WARNING:
                self._logger.warning("ledger_event", **log_dict)
            elif event.severity is LedgerSeverity.DEBUG:
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
            return True
        except Exception as e:
            # Never let logging break the ledger
            logging.getLogger(__name__).error(
                "Failed to write ledger event %s: %s", event.event_id, e
            )
            return False

    def log_transaction_added(self, user_id: str, transaction_id: str, kind: str, amount) -> None:
        """Log a successful add."""
        self.log(LedgerEventBuilder.transaction_added(
            user_id=user_id,
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
        ))

    def log_transaction_updated(self, user_id: str, transaction_id: str, kind: str, amount) -> None:
        """Log a successful update."""
        self.log(LedgerEventBuilder.transaction_updated(
            user_id=user_id,
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
        ))

    def log_transaction_deleted(self, user_id: str, transaction_id: str) -> None:
        """Log a successful delete."""
        self.log(LedgerEventBuilder.transaction_deleted(
            user_id=user_id,
            transaction_id=transaction_id,
        ))

    def log_transaction_rejected(
        self,
        user_id: str,
        transaction_id: Optional[str],
        reason: str,
    ) -> None:
        """Log a transaction refused by validation."""
        self.log(LedgerEventBuilder.transaction_rejected(
            user_id=user_id,
            transaction_id=transaction_id,
            reason=reason,
        ))

    def log_insufficient_balance(
        self,
        user_id: str,
        current_balance,
        requested_amount,
        transaction_id: Optional[str] = None,
    ) -> None:
        """Log an expense refused by the balance check."""
        self.log(LedgerEventBuilder.insufficient_balance(
            user_id=user_id,
            current_balance=current_balance,
            requested_amount=requested_amount,
            transaction_id=transaction_id,
        ))

    def log_validation_warnings(
        self,
        user_id: str,
        transaction_id: str,
        warnings: list[str],
    ) -> None:
        """Log non-blocking validation warnings."""
        self.log(LedgerEventBuilder.validation_warning(
            user_id=user_id,
            transaction_id=transaction_id,
            warnings=warnings,
        ))

    def log_storage_failed(
        self,
        user_id: str,
        operation: str,
        error_message: str,
        transaction_id: Optional[str] = None,
    ) -> None:
        """Log a storage failure."""
        self.log(LedgerEventBuilder.storage_failed(
            user_id=user_id,
            operation=operation,
            error_message=error_message,
            transaction_id=transaction_id,
        ))

    def log_ledger_loaded(self, user_id: str, transaction_count: int) -> None:
        """Log a (re)load from storage."""
        self.log(LedgerEventBuilder.ledger_loaded(
            user_id=user_id,
            transaction_count=transaction_count,
        ))

    def log_user_switched(self, previous_user_id: str, user_id: str) -> None:
        """Log a user context switch."""
        self.log(LedgerEventBuilder.user_switched(
            previous_user_id=previous_user_id,
            user_id=user_id,
        ))

    def log_report_generated(self, user_id: str, period: str, transaction_count: int) -> None:
        """Log report generation."""
        self.log(LedgerEventBuilder.report_generated(
            user_id=user_id,
            period=period,
            transaction_count=transaction_count,
        ))

