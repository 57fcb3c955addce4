"""Ledger query and report package."""

from budget_tracker.queries.aggregations import (
    budget_usage_percent,
    current_month_expenses,
    current_month_income,
    monthly_data,
    planned_transactions,
    transactions_by_category,
)
from budget_tracker.queries.reports import (
    budget_status,
    categories_for,
    format_amount,
    planned_summary,
    recent_transactions,
    sorted_by_date_desc,
    top_categories,
)

__all__ = [
    # Aggregations
    "budget_usage_percent",
    "current_month_expenses",
    "current_month_income",
    "monthly_data",
    "planned_transactions",
    "transactions_by_category",
    # Reports
    "budget_status",
    "categories_for",
    "format_amount",
    "planned_summary",
    "recent_transactions",
    "sorted_by_date_desc",
    "top_categories",
]
