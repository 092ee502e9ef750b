"""
Report Period

A calendar year-month. Reports and month filters are scoped by it.
"""

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


_ISO_PATTERN = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")
_SLASH_PATTERN = re.compile(r"^\s*(\d{1,2})/(\d{4})\s*$")


class ReportPeriod(BaseModel):
    """An immutable (year, month) pair."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def from_date(cls, value: date) -> "ReportPeriod":
        return cls(year=value.year, month=value.month)

    @classmethod
    def current(cls, today: Optional[date] = None) -> "ReportPeriod":
        return cls.from_date(today or date.today())

    @classmethod
    def parse(cls, value: str) -> "ReportPeriod":
        """
        Parse "YYYY-MM" or "MM/YYYY".

        Raises:
            ValueError: If the string matches neither format
        """
        match = _ISO_PATTERN.match(value)
        if match:
            return cls(year=int(match.group(1)), month=int(match.group(2)))

        match = _SLASH_PATTERN.match(value)
        if match:
            return cls(year=int(match.group(2)), month=int(match.group(1)))

        raise ValueError(f"Invalid period: {value!r} (expected YYYY-MM or MM/YYYY)")

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def label(self) -> str:
        """Human-readable label, e.g. 'March 2024'."""
        return self.first_day.strftime("%B %Y")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
