"""
Budget Tracker - Source Package

A personal finance ledger: income and expense transactions (immediate or
planned), categories, a running wallet balance and monthly budget status.

DESIGN PRINCIPLES:
1. The wallet balance is a stored accumulator, kept exact by every mutation
2. Write first, then reflect in memory
3. Queries are pure functions of in-memory state
4. Storage and notifications are swappable collaborators
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
