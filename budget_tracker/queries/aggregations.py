"""
Ledger Aggregations

Pure functions over a transaction collection. Nothing here reads the
store or the clock: "now" is always passed in, so the same inputs give
the same answer.

Month/year membership is decided in local time. Aware timestamps are
converted to the local zone first; naive timestamps are taken as local.
"""

import calendar
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from budget_tracker.models.ledger import MonthlyData, Transaction, TransactionType


def as_local(moment: datetime) -> datetime:
    """Naive local-time view of a timestamp."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def in_month(moment: datetime, month: int, year: int) -> bool:
    local = as_local(moment)
    return local.month == month and local.year == year


def sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0"))


def month_transactions(
    transactions: Iterable[Transaction],
    month: int,
    year: int,
    transaction_type: Optional[TransactionType] = None,
) -> list[Transaction]:
    """Non-planned transactions dated in (month, year), optionally of one type."""
    return [
        t for t in transactions
        if not t.is_planned
        and in_month(t.date, month, year)
        and (transaction_type is None or t.type == transaction_type)
    ]


def current_month_expenses(
    transactions: Iterable[Transaction],
    now: datetime,
) -> Decimal:
    local_now = as_local(now)
    return sum_amounts(month_transactions(
        transactions, local_now.month, local_now.year, TransactionType.EXPENSE
    ))


def current_month_income(
    transactions: Iterable[Transaction],
    now: datetime,
) -> Decimal:
    local_now = as_local(now)
    return sum_amounts(month_transactions(
        transactions, local_now.month, local_now.year, TransactionType.INCOME
    ))


def planned_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """All planned transactions, whatever their date."""
    return [t for t in transactions if t.is_planned]


def transactions_by_category(
    transactions: Iterable[Transaction],
    category_id: str,
) -> list[Transaction]:
    """Non-planned transactions filed under one category."""
    return [
        t for t in transactions
        if t.category == category_id and not t.is_planned
    ]


def monthly_data(
    transactions: Iterable[Transaction],
    month: int,
    year: int,
) -> MonthlyData:
    """
    Totals and transactions for one calendar month.
    
    Args:
        month: 1 (January) to 12 (December)
        year: Four-digit year
        
    Raises:
        ValueError: If month is outside 1..12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    
    selected = month_transactions(transactions, month, year)
    
    return MonthlyData(
        month=calendar.month_name[month],
        year=year,
        total_income=sum_amounts(
            t for t in selected if t.type == TransactionType.INCOME
        ),
        total_expenses=sum_amounts(
            t for t in selected if t.type == TransactionType.EXPENSE
        ),
        transactions=selected,
    )


def budget_usage_percent(expenses: Decimal, monthly_budget: Decimal) -> float:
    """
    Expenses as a percent of the monthly budget.
    
    A budget of zero (or less) means no budget is set: usage is 0.
    """
    if monthly_budget <= 0:
        return 0.0
    return float(expenses / monthly_budget * 100)
