"""
Core Data Models for Budget Tracker

These models define the schemas for everything the ledger holds or derives.
They are designed to:
1. Round-trip through the key-value store as camelCase JSON documents
2. Keep money exact (Decimal in memory, JSON numbers on disk)
3. Be immutable once built; state changes by replacing whole values

Stored documents: Transaction, Category, Wallet, UserSettings.
Derived (never stored): MonthlyData, BudgetStatus, CategoryTotal,
PlannedSummary, BudgetWarning.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel


def _to_decimal(value: Any) -> Any:
    """Read floats through their shortest repr so 0.1 stays 0.1."""
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


Money = Annotated[
    Decimal,
    BeforeValidator(_to_decimal),
    PlainSerializer(float, return_type=float, when_used="json"),
]


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction relative to the wallet."""
    EXPENSE = "expense"
    INCOME = "income"


class LedgerModel(BaseModel):
    """Base for stored documents: camelCase on disk, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_document(self) -> dict:
        """JSON-ready dict in the persisted (camelCase) shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# STORED DOCUMENTS
# =============================================================================

class Transaction(LedgerModel):
    """
    A single income or expense.

    Immutable: there is no update operation, only add and delete.
    Planned transactions never touch the wallet balance.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique id, assigned at creation"
    )
    amount: Money = Field(
        ...,
        description="Positive by convention; direction comes from type"
    )
    category: str = Field(
        ...,
        description="Category id"
    )
    description: str = ""
    date: datetime = Field(
        ...,
        description="When the transaction happened (or is planned for)"
    )
    type: TransactionType
    is_planned: bool = False

    @field_validator('is_planned', mode='before')
    @classmethod
    def missing_flag_means_immediate(cls, v: Any) -> Any:
        """Older documents store null or omit the flag."""
        return False if v is None else v

    @property
    def signed_amount(self) -> Decimal:
        """Effect on the wallet balance if this transaction is not planned."""
        if self.type == TransactionType.EXPENSE:
            return -self.amount
        return self.amount


class TransactionDraft(LedgerModel):
    """
    Everything needed to create a Transaction except its id.

    Shape checks only; business rules live in TransactionValidator.
    """
    model_config = ConfigDict(frozen=True)

    amount: Money
    description: str = ""
    category: str
    type: TransactionType = TransactionType.EXPENSE
    date: datetime
    is_planned: bool = False

    def to_transaction(self, transaction_id: str) -> Transaction:
        return Transaction(
            id=transaction_id,
            amount=self.amount,
            category=self.category,
            description=self.description,
            date=self.date,
            type=self.type,
            is_planned=self.is_planned,
        )


class Category(LedgerModel):
    """
    A spending or income category.

    is_income_category replaces the old "id 9 means income" convention.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(
        default="MoreHorizontal",
        description="Symbolic icon name, rendered by the UI"
    )
    color: str = Field(
        default="#B2BEC3",
        description="Display color (hex)"
    )
    budget: Optional[Money] = None
    is_income_category: bool = False

    def accepts(self, transaction_type: TransactionType) -> bool:
        """Can a transaction of this type be filed under this category?"""
        if transaction_type == TransactionType.INCOME:
            return self.is_income_category
        return not self.is_income_category


class Wallet(LedgerModel):
    """
    The running balance and monthly budget target.

    total_balance is a stored accumulator, adjusted by every non-planned
    add and delete. It is never recomputed from history.
    """
    model_config = ConfigDict(frozen=True)

    total_balance: Money = Decimal("0")
    monthly_budget: Money = Decimal("0")
    currency: str = "USD"


class UserSettings(LedgerModel):
    """User preferences for display and budget warnings."""
    model_config = ConfigDict(frozen=True)

    currency: str = "USD"
    notifications: bool = True
    budget_warning_threshold: float = Field(
        default=80.0,
        description="Usage percent (0-100) at which a warning is emitted"
    )


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class MonthlyData(LedgerModel):
    """Non-planned transactions and totals for one calendar month."""

    month: str = Field(..., description="Month label, e.g. 'January'")
    year: int
    total_income: Money = Decimal("0")
    total_expenses: Money = Decimal("0")
    transactions: list[Transaction] = Field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses


class CategoryTotal(LedgerModel):
    """A category with its accumulated non-planned expense total."""

    category: Category
    total: Money


class BudgetStatus(LedgerModel):
    """Current-month spending against the wallet's monthly budget."""

    month_expenses: Money
    month_income: Money
    monthly_budget: Money
    remaining: Money = Field(
        ...,
        description="Budget minus expenses; negative when over budget"
    )
    usage_percent: float = Field(
        ...,
        ge=0.0,
        description="Expenses as a percent of budget (0 when budget is 0)"
    )
    warning_threshold: float

    @property
    def is_over_budget(self) -> bool:
        return self.usage_percent > 100

    @property
    def is_near_limit(self) -> bool:
        return self.monthly_budget > 0 and self.usage_percent >= self.warning_threshold


class PlannedSummary(LedgerModel):
    """Planned transactions split around "now"."""

    upcoming: list[Transaction] = Field(
        default_factory=list,
        description="Dated now or later, soonest first"
    )
    past: list[Transaction] = Field(
        default_factory=list,
        description="Dated before now, most recent first"
    )
    upcoming_expenses: Money = Decimal("0")
    upcoming_income: Money = Decimal("0")


class BudgetWarning(LedgerModel):
    """Emitted to the presentation layer when budget usage crosses the threshold."""

    created_at: datetime
    usage_percent: float
    month_expenses: Money
    monthly_budget: Money
    threshold: float
    currency: str
    transaction_id: Optional[str] = None

    @property
    def message(self) -> str:
        return f"You've used {self.usage_percent:.0f}% of your monthly budget!"


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of validating user input.

    Only error-level issues block a mutation; warnings are shown but allowed.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
