"""
Category Catalog and Resolver

Every transaction carries a category label. Users type free text,
the API sends symbolic identifiers ("FOOD") and older rows hold display
names ("Food"). The resolver maps all of these onto one catalog.

DESIGN DECISION: Resolution is pure and total. Any input, including
None or an empty string, yields a Category. Unknown input falls back to
the "Miscellaneous" entry of the requested side, so a transaction
always ends up with a valid category.
"""

from enum import Enum
from typing import Optional, Union


class CategorySide(str, Enum):
    """Which kind of transaction a category belongs to."""
    INCOME = "income"
    EXPENSE = "expense"


class Category(str, Enum):
    """
    Known transaction categories.

    The value is the symbolic identifier, `display_name` is what users see.
    Both income and expense sides have their own "Miscellaneous" entry.
    """
    # Income
    SALARY = "SALARY"
    BONUS = "BONUS"
    INVESTMENT = "INVESTMENT"
    OTHER_INCOME = "OTHER_INCOME"

    # Expense
    FOOD = "FOOD"
    TRANSPORTATION = "TRANSPORTATION"
    ENTERTAINMENT = "ENTERTAINMENT"
    SHOPPING = "SHOPPING"
    BILLS = "BILLS"
    HEALTH = "HEALTH"
    EDUCATION = "EDUCATION"
    OTHER_EXPENSE = "OTHER_EXPENSE"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def side(self) -> CategorySide:
        if self in _INCOME_CATEGORIES:
            return CategorySide.INCOME
        return CategorySide.EXPENSE

    @property
    def is_income_category(self) -> bool:
        return self.side is CategorySide.INCOME

    @property
    def is_expense_category(self) -> bool:
        return self.side is CategorySide.EXPENSE

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    Category.SALARY: "Salary",
    Category.BONUS: "Bonus",
    Category.INVESTMENT: "Investment",
    Category.OTHER_INCOME: "Miscellaneous",
    Category.FOOD: "Food",
    Category.TRANSPORTATION: "Transportation",
    Category.ENTERTAINMENT: "Entertainment",
    Category.SHOPPING: "Shopping",
    Category.BILLS: "Bills",
    Category.HEALTH: "Health",
    Category.EDUCATION: "Education",
    Category.OTHER_EXPENSE: "Miscellaneous",
}

_INCOME_CATEGORIES = (
    Category.SALARY,
    Category.BONUS,
    Category.INVESTMENT,
    Category.OTHER_INCOME,
)

_EXPENSE_CATEGORIES = (
    Category.FOOD,
    Category.TRANSPORTATION,
    Category.ENTERTAINMENT,
    Category.SHOPPING,
    Category.BILLS,
    Category.HEALTH,
    Category.EDUCATION,
    Category.OTHER_EXPENSE,
)


CategoryInput = Union[Category, str, None]


def income_categories() -> list[Category]:
    """All income-side categories, in catalog order."""
    return list(_INCOME_CATEGORIES)


def expense_categories() -> list[Category]:
    """All expense-side categories, in catalog order."""
    return list(_EXPENSE_CATEGORIES)


def misc_category(prefer_income: bool) -> Category:
    """The fallback category for a side."""
    return Category.OTHER_INCOME if prefer_income else Category.OTHER_EXPENSE


def match_category(
    value: CategoryInput,
    prefer_income: bool = False,
) -> Optional[Category]:
    """
    Find the catalog entry matching `value`, or None.

    Matching is case-insensitive against both the identifier and the
    display name. The preferred side is searched first, so a shared
    display name ("Miscellaneous") resolves to the preferred side.
    """
    if isinstance(value, Category):
        return value
    if value is None:
        return None

    normalized = str(value).strip().lower()
    if not normalized:
        return None

    if prefer_income:
        search_order = _INCOME_CATEGORIES + _EXPENSE_CATEGORIES
    else:
        search_order = _EXPENSE_CATEGORIES + _INCOME_CATEGORIES

    for category in search_order:
        if (
            category.value.lower() == normalized
            or category.display_name.lower() == normalized
        ):
            return category

    return None


def resolve_category(value: CategoryInput, prefer_income: bool = False) -> Category:
    """
    Map any category input to a catalog entry. Never raises.

    Blank or unknown input resolves to the miscellaneous category of
    the preferred side.
    """
    return match_category(value, prefer_income) or misc_category(prefer_income)


def normalize_category(value: CategoryInput, prefer_income: bool = False) -> str:
    """
    Normalize a category value for storage on a transaction.

    Catalog matches become their display name, blank input becomes the
    side's "Miscellaneous", and any other free text is kept (stripped).
    """
    matched = match_category(value, prefer_income)
    if matched is not None:
        return matched.display_name

    text = "" if value is None else str(value).strip()
    if not text:
        return misc_category(prefer_income).display_name
    return text
