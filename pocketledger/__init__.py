"""
pocketledger - Source Package

A personal income/expense ledger that keeps a running balance
and derives monthly reports with category breakdowns.

DESIGN PRINCIPLES:
1. Validate before touching storage
2. Persist first, then mutate memory
3. Balance never goes negative on an expense
4. Storage errors never leak past the ledger boundary
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "pocketledger Team"
