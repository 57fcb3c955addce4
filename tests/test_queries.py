"""
Tests for aggregations and dashboard reports.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from budget_tracker.models import (
    DEFAULT_CATEGORIES,
    Transaction,
    TransactionType,
    UserSettings,
    Wallet,
)
from budget_tracker.queries import (
    budget_status,
    budget_usage_percent,
    categories_for,
    current_month_expenses,
    current_month_income,
    format_amount,
    monthly_data,
    planned_summary,
    planned_transactions,
    recent_transactions,
    sorted_by_date_desc,
    top_categories,
    transactions_by_category,
)
from budget_tracker.queries.aggregations import as_local, in_month

from conftest import NOW


def tx(
    id: str,
    amount: str,
    category: str = "1",
    transaction_type: TransactionType = TransactionType.EXPENSE,
    date: datetime = NOW,
    is_planned: bool = False,
) -> Transaction:
    return Transaction(
        id=id,
        amount=Decimal(amount),
        category=category,
        description=f"tx {id}",
        date=date,
        type=transaction_type,
        is_planned=is_planned,
    )


INCOME = TransactionType.INCOME


class TestMonthMembership:
    """Tests for local-time month filtering."""
    
    def test_naive_is_taken_as_local(self):
        """Test naive timestamps are left as they are."""
        assert as_local(NOW) == NOW
        assert in_month(NOW, 3, 2026)
        assert not in_month(NOW, 3, 2025)
    
    def test_aware_is_converted_to_local(self):
        """Test aware timestamps become naive local time."""
        moment = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
        local = as_local(moment)
        assert local.tzinfo is None
        assert local == moment.astimezone().replace(tzinfo=None)


class TestAggregations:
    """Tests for current-month totals and filters."""
    
    def test_current_month_totals(self):
        """Test only this month's non-planned transactions count."""
        transactions = [
            tx("1", "10"),
            tx("2", "5.25"),
            tx("3", "100", category="9", transaction_type=INCOME),
            tx("4", "40", date=NOW - timedelta(days=40)),
            tx("5", "70", date=NOW + timedelta(days=2), is_planned=True),
        ]
        assert current_month_expenses(transactions, NOW) == Decimal("15.25")
        assert current_month_income(transactions, NOW) == Decimal("100")
    
    def test_empty_ledger_totals_zero(self):
        """Test sums over nothing."""
        assert current_month_expenses([], NOW) == Decimal("0")
        assert current_month_income([], NOW) == Decimal("0")
    
    def test_planned_transactions_ignore_date(self):
        """Test planned filter returns past and future plans."""
        transactions = [
            tx("1", "1"),
            tx("2", "2", is_planned=True, date=NOW - timedelta(days=3)),
            tx("3", "3", is_planned=True, date=NOW + timedelta(days=3)),
        ]
        assert [t.id for t in planned_transactions(transactions)] == ["2", "3"]
    
    def test_transactions_by_category(self):
        """Test category filter excludes planned entries."""
        transactions = [
            tx("1", "1", category="2"),
            tx("2", "2", category="3"),
            tx("3", "3", category="2", is_planned=True),
        ]
        assert [t.id for t in transactions_by_category(transactions, "2")] == ["1"]
        assert transactions_by_category(transactions, "8") == []
    
    def test_monthly_data(self):
        """Test month label, totals and membership."""
        transactions = [
            tx("1", "20", date=datetime(2026, 1, 5)),
            tx("2", "500", category="9", transaction_type=INCOME, date=datetime(2026, 1, 31, 23, 59)),
            tx("3", "7", date=datetime(2026, 2, 1)),
            tx("4", "9", date=datetime(2026, 1, 20), is_planned=True),
        ]
        data = monthly_data(transactions, 1, 2026)
        
        assert data.month == "January"
        assert data.year == 2026
        assert data.total_expenses == Decimal("20")
        assert data.total_income == Decimal("500")
        assert data.net == Decimal("480")
        assert [t.id for t in data.transactions] == ["1", "2"]
    
    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_monthly_data_rejects_bad_month(self, month):
        """Test months are 1-based."""
        with pytest.raises(ValueError):
            monthly_data([], month, 2026)
    
    def test_budget_usage_percent(self):
        """Test usage and the zero-budget rule."""
        assert budget_usage_percent(Decimal("45"), Decimal("100")) == pytest.approx(45.0)
        assert budget_usage_percent(Decimal("150"), Decimal("100")) == pytest.approx(150.0)
        assert budget_usage_percent(Decimal("10"), Decimal("0")) == 0.0


class TestReports:
    """Tests for dashboard reports."""
    
    def test_budget_status(self):
        """Test remaining and usage against the wallet budget."""
        status = budget_status(
            [tx("1", "120")],
            Wallet(monthly_budget=Decimal("100")),
            UserSettings(),
            NOW,
        )
        assert status.remaining == Decimal("-20")
        assert status.usage_percent == pytest.approx(120.0)
        assert status.is_over_budget
        assert status.is_near_limit
    
    def test_top_categories_order_and_limit(self):
        """Test descending totals, stable ties, zero totals dropped."""
        transactions = [
            tx("1", "10", category="1"),
            tx("2", "30", category="2"),
            tx("3", "10", category="3"),
            tx("4", "999", category="4", is_planned=True),
            tx("5", "50", category="9", transaction_type=INCOME),
        ]
        top = top_categories(transactions, DEFAULT_CATEGORIES, limit=5)
        assert [(ct.category.id, ct.total) for ct in top] == [
            ("2", Decimal("30")),
            ("1", Decimal("10")),
            ("3", Decimal("10")),
        ]
        
        assert len(top_categories(transactions, DEFAULT_CATEGORIES, limit=1)) == 1
    
    def test_top_categories_all_time(self):
        """Test older months still count toward category totals."""
        transactions = [tx("1", "10", date=NOW - timedelta(days=400))]
        top = top_categories(transactions, DEFAULT_CATEGORIES)
        assert top[0].total == Decimal("10")
    
    def test_recent_transactions_use_insertion_order(self):
        """Test newest-added first, regardless of date."""
        transactions = [
            tx("1", "1"),
            tx("2", "1", date=NOW - timedelta(days=10)),
            tx("3", "1", date=NOW + timedelta(days=10), is_planned=True),
            tx("4", "1", date=NOW - timedelta(days=100)),
        ]
        assert [t.id for t in recent_transactions(transactions, 3)] == ["4", "3", "2"]
        assert [t.id for t in recent_transactions(transactions[:2], 3)] == ["2", "1"]
        assert recent_transactions(transactions, 0) == []
    
    def test_planned_summary(self):
        """Test upcoming soonest first, past most recent first."""
        transactions = [
            tx("1", "5", date=NOW + timedelta(days=9), is_planned=True),
            tx("2", "8", date=NOW + timedelta(days=1), is_planned=True),
            tx("3", "20", category="9", transaction_type=INCOME,
               date=NOW + timedelta(days=4), is_planned=True),
            tx("4", "3", date=NOW - timedelta(days=6), is_planned=True),
            tx("5", "4", date=NOW - timedelta(days=2), is_planned=True),
            tx("6", "100"),
        ]
        summary = planned_summary(transactions, NOW)
        
        assert [t.id for t in summary.upcoming] == ["2", "3", "1"]
        assert [t.id for t in summary.past] == ["5", "4"]
        assert summary.upcoming_expenses == Decimal("13")
        assert summary.upcoming_income == Decimal("20")
    
    def test_sorted_by_date_desc(self):
        """Test newest date first."""
        transactions = [
            tx("1", "1", date=NOW - timedelta(days=1)),
            tx("2", "1", date=NOW),
            tx("3", "1", date=NOW - timedelta(days=5)),
        ]
        assert [t.id for t in sorted_by_date_desc(transactions)] == ["2", "1", "3"]
    
    def test_categories_for(self):
        """Test the income category is offered only for income."""
        income = categories_for(DEFAULT_CATEGORIES, INCOME)
        expense = categories_for(DEFAULT_CATEGORIES, TransactionType.EXPENSE)
        
        assert [c.id for c in income] == ["9"]
        assert len(expense) == 9
        assert "9" not in {c.id for c in expense}
    
    @pytest.mark.parametrize("amount,currency,expected", [
        (Decimal("1234.5"), "USD", "$1234.50"),
        (Decimal("-5"), "EUR", "-€5.00"),
        (Decimal("0"), "INR", "₹0.00"),
        (Decimal("3.999"), "XYZ", "$4.00"),
    ])
    def test_format_amount(self, amount, currency, expected):
        """Test symbol lookup and two-decimal formatting."""
        assert format_amount(amount, currency) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
