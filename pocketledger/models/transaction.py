"""
Transaction Models

A transaction is a tagged variant: Income or Expense, sharing the
common financial fields and dispatched on `kind`.

DESIGN DECISION: Identity is explicit. `id` is generated at
construction and is frozen afterwards. The only ways to give a
transaction an existing ID are the constructor (`id=...`, used when
loading from storage) and `with_id()`, used by the ledger when a
replacement must keep the ID of the record it replaces.

Amount and description are NOT constrained at construction. The
validity predicate (`is_valid`) checks them, so that bad input reaches
the ledger and is rejected there with a domain error rather than a
schema error.
"""

from datetime import date as Date
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from pocketledger.models.category import Category, normalize_category, resolve_category
from pocketledger.models.period import ReportPeriod


DEFAULT_INCOME_SOURCE = "unspecified"
DEFAULT_PAYMENT_METHOD = "Cash"


class TransactionKind(str, Enum):
    """Discriminator for the transaction variants."""
    INCOME = "income"
    EXPENSE = "expense"


def new_transaction_id() -> str:
    """Generate a transaction ID that stays unique across restarts."""
    return f"TRX-{uuid4().hex[:16].upper()}"


class TransactionBase(BaseModel):
    """Fields shared by every transaction variant."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    prefers_income_categories: ClassVar[bool] = False

    id: str = Field(
        default_factory=new_transaction_id,
        frozen=True,
        min_length=1,
        description="Unique transaction ID (immutable)"
    )
    amount: Decimal = Field(
        ...,
        description="Transaction amount, must be positive to be valid"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="What the transaction was for"
    )
    date: Date = Field(
        ...,
        description="Calendar date of the transaction"
    )
    category: str = Field(
        default="",
        max_length=100,
        validate_default=True,
        description="Category display name or free text"
    )

    @field_validator("category", mode="before")
    @classmethod
    def resolve_symbolic_category(cls, value: Any) -> str:
        """Map catalog identifiers/display names onto the canonical name."""
        return normalize_category(value, prefer_income=cls.prefers_income_categories)

    @field_validator("kind", check_fields=False)
    @classmethod
    def pin_kind(cls, value: TransactionKind) -> TransactionKind:
        """A variant only ever carries its own kind tag."""
        expected = cls.model_fields["kind"].default
        if value is not expected:
            raise ValueError(f"{cls.__name__} must have kind '{expected.value}'")
        return value

    def is_valid(self) -> bool:
        """The validity predicate: positive amount and non-empty description."""
        return self.amount > 0 and bool(self.description.strip())

    def with_id(self, transaction_id: str) -> "TransactionBase":
        """Return a copy of this transaction carrying `transaction_id`."""
        return self.model_copy(update={"id": transaction_id}, deep=True)

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this transaction on the balance."""
        if self.kind is TransactionKind.INCOME:
            return self.amount
        return -self.amount

    @property
    def year_month(self) -> ReportPeriod:
        return ReportPeriod.from_date(self.date)

    @property
    def resolved_category(self) -> Category:
        """Catalog entry for the category (misc when it is free text)."""
        return resolve_category(self.category, self.prefers_income_categories)

    def _details(self) -> str:
        return ""

    def __str__(self) -> str:
        return (
            f"[{self.id}] {self.kind.value.upper()} - "
            f"{self.date.strftime('%d/%m/%Y')}: {self.amount:,.2f} "
            f"({self.category}) - {self.description}{self._details()}"
        )


class Income(TransactionBase):
    """Money coming in."""

    prefers_income_categories: ClassVar[bool] = True

    kind: TransactionKind = Field(default=TransactionKind.INCOME, frozen=True)
    source: str = Field(
        default=DEFAULT_INCOME_SOURCE,
        max_length=200,
        description="Where the money came from"
    )

    @field_validator("source", mode="before")
    @classmethod
    def default_blank_source(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_INCOME_SOURCE
        return value

    def _details(self) -> str:
        return f" | Source: {self.source}"


class Expense(TransactionBase):
    """Money going out."""

    kind: TransactionKind = Field(default=TransactionKind.EXPENSE, frozen=True)
    payment_method: str = Field(
        default=DEFAULT_PAYMENT_METHOD,
        max_length=50,
        description="Cash, Debit, Credit, E-Wallet, ..."
    )
    is_recurring: bool = Field(
        default=False,
        description="Repeats every period (rent, subscriptions)"
    )

    @field_validator("payment_method", mode="before")
    @classmethod
    def default_blank_payment_method(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PAYMENT_METHOD
        return value

    def _details(self) -> str:
        recurring = " [RECURRING]" if self.is_recurring else ""
        return f" | Payment: {self.payment_method}{recurring}"


Transaction = Union[Income, Expense]

TRANSACTION_VARIANTS: dict[TransactionKind, type[TransactionBase]] = {
    TransactionKind.INCOME: Income,
    TransactionKind.EXPENSE: Expense,
}


def parse_kind(kind: Union[TransactionKind, str]) -> TransactionKind:
    """
    Read a kind tag, ignoring case and surrounding whitespace.

    Raises:
        ValueError: If the tag is not a known kind
    """
    if isinstance(kind, TransactionKind):
        return kind
    try:
        return TransactionKind(str(kind).strip().lower())
    except ValueError as e:
        raise ValueError(f"Unsupported transaction kind: {kind!r}") from e


def variant_for(kind: Union[TransactionKind, str]) -> type[TransactionBase]:
    """
    Model class for a kind tag.

    Raises:
        ValueError: If the tag is not a known kind
    """
    return TRANSACTION_VARIANTS[parse_kind(kind)]


def parse_transaction(data: dict[str, Any]) -> Transaction:
    """
    Build the right variant from a plain dict, dispatching on `kind`.

    Raises:
        ValueError: If `kind` is missing or unknown
        pydantic.ValidationError: If the payload is malformed
    """
    if "kind" not in data:
        raise ValueError("Transaction payload is missing 'kind'")
    model = variant_for(data["kind"])
    payload = {key: value for key, value in data.items() if key != "kind"}
    return model.model_validate(payload)
