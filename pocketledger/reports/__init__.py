"""Reporting package."""

from pocketledger.reports.monthly import MonthlyReport

__all__ = ["MonthlyReport"]
