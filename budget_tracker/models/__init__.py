"""
Data Models Package

All Pydantic models used by the ledger. Stored documents round-trip
through the key-value store in camelCase; derived views are never stored.
"""

from budget_tracker.models.ledger import (
    BudgetStatus,
    BudgetWarning,
    Category,
    CategoryTotal,
    MonthlyData,
    PlannedSummary,
    Transaction,
    TransactionDraft,
    TransactionType,
    UserSettings,
    ValidationIssue,
    ValidationResult,
    Wallet,
)
from budget_tracker.models.defaults import (
    CURRENCY_SYMBOLS,
    DEFAULT_CATEGORIES,
    INCOME_CATEGORY_ID,
    currency_symbol,
    default_settings,
    default_wallet,
)

__all__ = [
    # Stored documents
    "Category",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "UserSettings",
    "Wallet",
    # Derived views
    "BudgetStatus",
    "BudgetWarning",
    "CategoryTotal",
    "MonthlyData",
    "PlannedSummary",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Defaults
    "CURRENCY_SYMBOLS",
    "DEFAULT_CATEGORIES",
    "INCOME_CATEGORY_ID",
    "currency_symbol",
    "default_settings",
    "default_wallet",
]
