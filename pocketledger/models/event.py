"""
Ledger Event Models

Every ledger mutation and every rejected request produces one
structured event. Events go to the structured log only; they are not
persisted, so they are diagnostics rather than a history of the ledger.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger emits."""
    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Rejections
    TRANSACTION_REJECTED = "transaction_rejected"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    VALIDATION_WARNING = "validation_warning"

    # Storage
    STORAGE_FAILED = "storage_failed"
    LEDGER_LOADED = "ledger_loaded"
    USER_SWITCHED = "user_switched"

    # Reporting
    REPORT_GENERATED = "report_generated"


class LedgerSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType = Field(
        ...,
        description="Type of event"
    )
    severity: LedgerSeverity = Field(
        default=LedgerSeverity.INFO,
        description="Event severity"
    )

    user_id: Optional[str] = Field(
        default=None,
        description="Ledger owner the event relates to"
    )
    transaction_id: Optional[str] = Field(
        default=None,
        description="Transaction the event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "transaction_id": self.transaction_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.transaction_added(user_id, tx_id, "expense", amount)
        event = LedgerEventBuilder.insufficient_balance(user_id, balance, amount)
    """

    @staticmethod
    def transaction_added(
        user_id: str,
        transaction_id: str,
        kind: str,
        amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            user_id=user_id,
            transaction_id=transaction_id,
            description=f"Transaction added: {kind} {amount}",
            details={
                "kind": kind,
                "amount": str(amount),
            },
        )

    @staticmethod
    def transaction_updated(
        user_id: str,
        transaction_id: str,
        kind: str,
        amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_UPDATED,
            user_id=user_id,
            transaction_id=transaction_id,
            description=f"Transaction updated: {kind} {amount}",
            details={
                "kind": kind,
                "amount": str(amount),
            },
        )

    @staticmethod
    def transaction_deleted(
        user_id: str,
        transaction_id: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            user_id=user_id,
            transaction_id=transaction_id,
            description=f"Transaction deleted: {transaction_id}",
        )

    @staticmethod
    def transaction_rejected(
        user_id: str,
        transaction_id: Optional[str],
        reason: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_REJECTED,
            severity=LedgerSeverity.WARNING,
            user_id=user_id,
            transaction_id=transaction_id,
            description="Transaction rejected",
            error_message=reason,
        )

    @staticmethod
    def insufficient_balance(
        user_id: str,
        current_balance: Decimal,
        requested_amount: Decimal,
        transaction_id: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.INSUFFICIENT_BALANCE,
            severity=LedgerSeverity.WARNING,
            user_id=user_id,
            transaction_id=transaction_id,
            description=(
                f"Expense of {requested_amount} exceeds balance {current_balance}"
            ),
            details={
                "current_balance": str(current_balance),
                "requested_amount": str(requested_amount),
            },
        )

    @staticmethod
    def validation_warning(
        user_id: str,
        transaction_id: str,
        warnings: list[str],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_WARNING,
            severity=LedgerSeverity.WARNING,
            user_id=user_id,
            transaction_id=transaction_id,
            description=f"Transaction accepted with {len(warnings)} warnings",
            details={"warnings": warnings},
        )

    @staticmethod
    def storage_failed(
        user_id: str,
        operation: str,
        error_message: str,
        transaction_id: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORAGE_FAILED,
            severity=LedgerSeverity.ERROR,
            user_id=user_id,
            transaction_id=transaction_id,
            description=f"Storage operation failed: {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def ledger_loaded(
        user_id: str,
        transaction_count: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            user_id=user_id,
            description=f"Loaded {transaction_count} transactions",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def user_switched(
        previous_user_id: str,
        user_id: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.USER_SWITCHED,
            user_id=user_id,
            description=f"Switched ledger from {previous_user_id} to {user_id}",
            details={"previous_user_id": previous_user_id},
        )

    @staticmethod
    def report_generated(
        user_id: str,
        period: str,
        transaction_count: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.REPORT_GENERATED,
            user_id=user_id,
            description=f"Monthly report generated for {period}",
            details={
                "period": period,
                "transaction_count": transaction_count,
            },
        )
