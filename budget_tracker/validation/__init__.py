"""Input validation package."""

from budget_tracker.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
