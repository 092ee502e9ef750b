"""
Monthly Report

Derives totals and per-category breakdowns for one calendar month.

The report works on a snapshot taken at construction. It never
touches storage and later ledger changes do not affect it.

NOTE: The period balance is income minus expense within the month.
It does NOT include the ledger's initial balance.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from pocketledger.models.period import ReportPeriod
from pocketledger.models.transaction import Transaction, TransactionKind, parse_kind


ZERO = Decimal("0")
ONE_DECIMAL = Decimal("0.1")
HUNDRED = Decimal("100")

RULE = "=" * 48
THIN_RULE = "-" * 48


class MonthlyReport:
    """Totals and category breakdowns for a single period."""

    def __init__(self, transactions: Iterable[Transaction], period: ReportPeriod):
        self.period = period
        self._transactions = [
            tx.model_copy(deep=True) for tx in transactions if period.contains(tx.date)
        ]

    def transactions_in_period(self) -> list[Transaction]:
        return [tx.model_copy(deep=True) for tx in self._transactions]

    def _of_kind(self, kind: TransactionKind) -> list[Transaction]:
        return [tx for tx in self._transactions if tx.kind is kind]

    def total_income(self) -> Decimal:
        return sum((tx.amount for tx in self._of_kind(TransactionKind.INCOME)), ZERO)

    def total_expense(self) -> Decimal:
        return sum((tx.amount for tx in self._of_kind(TransactionKind.EXPENSE)), ZERO)

    def balance(self) -> Decimal:
        return self.total_income() - self.total_expense()

    def _by_category(self, kind: TransactionKind) -> dict[str, Decimal]:
        totals: dict[str, Decimal] = {}
        for tx in self._of_kind(kind):
            totals[tx.category] = totals.get(tx.category, ZERO) + tx.amount
        return totals

    def expense_by_category(self) -> dict[str, Decimal]:
        return self._by_category(TransactionKind.EXPENSE)

    def income_by_category(self) -> dict[str, Decimal]:
        return self._by_category(TransactionKind.INCOME)

    def category_percentages(
        self,
        kind: Union[TransactionKind, str],
    ) -> dict[str, Decimal]:
        """
        Share of each category in the total of `kind`, in percent.

        Rounded to one decimal place. Empty when the total is zero.
        """
        totals = self._by_category(parse_kind(kind))
        grand_total = sum(totals.values(), ZERO)
        if grand_total == 0:
            return {}
        return {
            category: (amount * HUNDRED / grand_total).quantize(ONE_DECIMAL, ROUND_HALF_UP)
            for category, amount in totals.items()
        }

    def _breakdown(self, title: str, kind: TransactionKind) -> list[str]:
        totals = self._by_category(kind)
        if not totals:
            return []

        percentages = self.category_percentages(kind)
        lines = ["", title, THIN_RULE]
        for category, amount in sorted(totals.items(), key=lambda item: item[1], reverse=True):
            lines.append(f"{category:<20}: {amount:>15,.2f} ({percentages[category]}%)")
        return lines

    def summary(self) -> str:
        """Formatted text report for the period."""
        lines = [
            RULE,
            "MONTHLY FINANCIAL REPORT".center(len(RULE)).rstrip(),
            RULE,
            f"Period       : {self.period.label}",
            THIN_RULE,
            f"Total Income : {self.total_income():>18,.2f}",
            f"Total Expense: {self.total_expense():>18,.2f}",
            THIN_RULE,
            f"BALANCE      : {self.balance():>18,.2f}",
            RULE,
        ]
        lines.extend(self._breakdown("Expenses by Category:", TransactionKind.EXPENSE))
        lines.extend(self._breakdown("Income by Category:", TransactionKind.INCOME))
        lines.append(RULE)
        return "\n".join(lines)
