"""
Seed data and fallbacks.

These are the values the ledger uses when a key is missing from the store
or cannot be parsed.
"""

from decimal import Decimal

from budget_tracker.models.ledger import Category, UserSettings, Wallet


INCOME_CATEGORY_ID = "9"

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="1", name="Food & Dining", icon="UtensilsCrossed", color="#FF6B6B"),
    Category(id="2", name="Shopping", icon="ShoppingBag", color="#4ECDC4"),
    Category(id="3", name="Transport", icon="Car", color="#45B7D1"),
    Category(id="4", name="Entertainment", icon="Film", color="#96CEB4"),
    Category(id="5", name="Bills & Utilities", icon="Receipt", color="#FFEAA7"),
    Category(id="6", name="Healthcare", icon="Heart", color="#DDA0DD"),
    Category(id="7", name="Education", icon="GraduationCap", color="#98D8C8"),
    Category(id="8", name="Savings", icon="PiggyBank", color="#6C5CE7"),
    Category(
        id=INCOME_CATEGORY_ID,
        name="Income",
        icon="TrendingUp",
        color="#00B894",
        is_income_category=True,
    ),
    Category(id="10", name="Other", icon="MoreHorizontal", color="#B2BEC3"),
)

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
}


def default_wallet(currency: str = "USD") -> Wallet:
    return Wallet(
        total_balance=Decimal("0"),
        monthly_budget=Decimal("0"),
        currency=currency,
    )


def default_settings(
    currency: str = "USD",
    budget_warning_threshold: float = 80.0,
) -> UserSettings:
    return UserSettings(
        currency=currency,
        notifications=True,
        budget_warning_threshold=budget_warning_threshold,
    )


def currency_symbol(currency: str) -> str:
    """Symbol for a currency label; unknown labels fall back to '$'."""
    return CURRENCY_SYMBOLS.get(currency, "$")
