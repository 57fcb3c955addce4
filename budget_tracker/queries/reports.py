"""
Dashboard Reports

Views the home, plans and wallet screens are built from. Like the
aggregations, these are pure functions of ledger state.

Ordering rules:
- top categories: descending expense total, ties in category order
- recent transactions: insertion order, newest first (not date order)
- planned: upcoming soonest first, past most recent first
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence

from budget_tracker.models.defaults import currency_symbol
from budget_tracker.models.ledger import (
    BudgetStatus,
    Category,
    CategoryTotal,
    PlannedSummary,
    Transaction,
    TransactionType,
    UserSettings,
    Wallet,
)
from budget_tracker.queries.aggregations import (
    as_local,
    budget_usage_percent,
    current_month_expenses,
    current_month_income,
    planned_transactions,
    sum_amounts,
    transactions_by_category,
)


def budget_status(
    transactions: Sequence[Transaction],
    wallet: Wallet,
    settings: UserSettings,
    now: datetime,
) -> BudgetStatus:
    expenses = current_month_expenses(transactions, now)
    return BudgetStatus(
        month_expenses=expenses,
        month_income=current_month_income(transactions, now),
        monthly_budget=wallet.monthly_budget,
        remaining=wallet.monthly_budget - expenses,
        usage_percent=budget_usage_percent(expenses, wallet.monthly_budget),
        warning_threshold=settings.budget_warning_threshold,
    )


def top_categories(
    transactions: Sequence[Transaction],
    categories: Iterable[Category],
    limit: int = 5,
) -> list[CategoryTotal]:
    """Categories with the largest all-time non-planned expense totals."""
    totals = []
    for category in categories:
        total = sum_amounts(
            t for t in transactions_by_category(transactions, category.id)
            if t.type == TransactionType.EXPENSE
        )
        if total > 0:
            totals.append(CategoryTotal(category=category, total=total))
    
    # sorted() is stable, so equal totals keep category order
    totals = sorted(totals, key=lambda ct: ct.total, reverse=True)
    return totals[:limit]


def recent_transactions(
    transactions: Sequence[Transaction],
    limit: int = 3,
) -> list[Transaction]:
    """The last `limit` transactions added, newest first."""
    if limit <= 0:
        return []
    return list(reversed(transactions[-limit:]))


def planned_summary(
    transactions: Iterable[Transaction],
    now: datetime,
) -> PlannedSummary:
    local_now = as_local(now)
    planned = planned_transactions(transactions)
    
    upcoming = sorted(
        (t for t in planned if as_local(t.date) >= local_now),
        key=lambda t: as_local(t.date),
    )
    past = sorted(
        (t for t in planned if as_local(t.date) < local_now),
        key=lambda t: as_local(t.date),
        reverse=True,
    )
    
    return PlannedSummary(
        upcoming=upcoming,
        past=past,
        upcoming_expenses=sum_amounts(
            t for t in upcoming if t.type == TransactionType.EXPENSE
        ),
        upcoming_income=sum_amounts(
            t for t in upcoming if t.type == TransactionType.INCOME
        ),
    )


def sorted_by_date_desc(transactions: Iterable[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: as_local(t.date), reverse=True)


def categories_for(
    categories: Iterable[Category],
    transaction_type: TransactionType,
) -> list[Category]:
    """Categories a transaction of this type may be filed under."""
    return [c for c in categories if c.accepts(transaction_type)]


def format_amount(amount: Decimal, currency: str) -> str:
    """e.g. format_amount(Decimal('-5'), 'EUR') -> '-€5.00'"""
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(amount):.2f}"
