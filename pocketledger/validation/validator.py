"""
Transaction Validation

DESIGN DECISION: Validation happens before any storage call and
produces a full list of issues rather than stopping at the first one.

ERRORS (block the mutation):
- Amount must be greater than zero
- Description must not be blank

WARNINGS (reported, never block):
- Date far in the future
- Unusually large amount

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the ledger decides what to do.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from pocketledger.config import LedgerSettings, get_settings
from pocketledger.models.transaction import TransactionBase
from pocketledger.models.validation import ValidationIssue, ValidationResult


class TransactionValidator:
    """
    Checks a transaction against the ledger's validity rules.

    The error checks are exactly the transaction's own validity
    predicate; the warning checks are driven by settings.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def _check_errors(self, tx: TransactionBase) -> list[ValidationIssue]:
        issues = []

        if tx.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter a positive amount",
            ))

        if not tx.description.strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description must not be empty",
                severity="error",
                suggested_fix="Describe what the transaction was for",
            ))

        return issues

    def _check_warnings(
        self,
        tx: TransactionBase,
        today: date,
    ) -> list[ValidationIssue]:
        issues = []

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if tx.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Transaction date ({tx.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        threshold = Decimal(self._settings.large_amount_warning)
        if tx.amount > threshold:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({tx.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return issues

    def validate(
        self,
        tx: TransactionBase,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run all checks on a transaction.

        Warnings are only computed for transactions that pass the
        error checks.
        """
        issues = self._check_errors(tx)
        is_valid = not issues

        if is_valid:
            issues.extend(self._check_warnings(tx, today or date.today()))

        return ValidationResult(
            transaction_id=tx.id,
            is_valid=is_valid,
            issues=issues,
            warnings=[issue.message for issue in issues if issue.severity == "warning"],
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a readable summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if not result.is_valid:
            lines.append("The transaction cannot be saved:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     ({issue.suggested_fix})")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   - {warning}")

        return "\n".join(lines)
