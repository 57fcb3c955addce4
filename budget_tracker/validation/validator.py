"""
Two-Stage Input Validation

Validation runs before any mutation, so a rejected input never leaves
partial state behind.

STAGE 1 - SCHEMA VALIDATION:
- Amount present, numeric, finite, greater than zero, at most max_amount
- Description not blank
- Transaction type known
- Category id known

STAGE 2 - SEMANTIC VALIDATION:
- Income goes to an income category, expenses to any other
- Planned transactions are not dated in the past
- Unusually large amounts (warning only)

Stage 2 only runs when stage 1 passes.

Validation never silently fixes input. It reports issues for the user.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from budget_tracker.config import AppSettings, get_settings
from budget_tracker.models.defaults import CURRENCY_SYMBOLS
from budget_tracker.models.ledger import (
    Category,
    TransactionDraft,
    TransactionType,
    UserSettings,
    ValidationIssue,
    ValidationResult,
)
from budget_tracker.queries.aggregations import as_local


def _error(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
    )


def _warning(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="warning",
    )


def _parse_amount(raw: Any) -> Optional[Decimal]:
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, float):
        return Decimal(repr(raw))
    try:
        return Decimal(str(raw).strip())
    except InvalidOperation:
        return None


class TransactionValidator:
    """
    Validates user input for transactions, wallet edits and settings.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app
        self._max_amount = Decimal(str(self._settings.max_amount))

    def build_draft(
        self,
        amount: Any,
        description: str,
        category: str,
        transaction_type: Union[TransactionType, str],
        date: Union[datetime, str],
        is_planned: bool = False,
    ) -> tuple[Optional[TransactionDraft], ValidationResult]:
        """
        Turn raw form values into a TransactionDraft.

        Returns:
            (draft, result) - draft is None when the values cannot be
            parsed at all; result carries the reasons
        """
        issues = []

        parsed_amount = _parse_amount(amount)
        if parsed_amount is None:
            issues.append(_error(
                "amount", "invalid_format", "Amount must be a number"
            ))
        elif not parsed_amount.is_finite():
            issues.append(_error(
                "amount", "invalid_value", "Amount must be a finite number"
            ))

        try:
            parsed_type = TransactionType(transaction_type)
        except ValueError:
            parsed_type = None
            issues.append(_error(
                "type", "invalid_value",
                f"Unknown transaction type: {transaction_type}",
            ))

        if isinstance(date, datetime):
            parsed_date = date
        else:
            try:
                parsed_date = datetime.fromisoformat(str(date).strip())
            except ValueError:
                parsed_date = None
                issues.append(_error(
                    "date", "invalid_format",
                    "Date must be in YYYY-MM-DD format",
                ))

        if issues:
            return None, ValidationResult(issues=issues)

        try:
            draft = TransactionDraft(
                amount=parsed_amount,
                description=description or "",
                category=category or "",
                type=parsed_type,
                date=parsed_date,
                is_planned=is_planned,
            )
        except ValidationError as e:
            for err in e.errors():
                field = ".".join(str(part) for part in err["loc"]) or "draft"
                issues.append(_error(field, "invalid_value", err["msg"]))
            return None, ValidationResult(issues=issues)

        return draft, ValidationResult()

    def _validate_schema(
        self,
        draft: TransactionDraft,
        categories: dict[str, Category],
    ) -> list[ValidationIssue]:
        """Stage 1: presence, format and range checks."""
        issues = []

        if not draft.amount.is_finite():
            issues.append(_error(
                "amount", "invalid_value", "Amount must be a finite number"
            ))
        elif draft.amount <= 0:
            issues.append(_error(
                "amount", "invalid_value", "Amount must be greater than zero"
            ))
        elif draft.amount > self._max_amount:
            issues.append(_error(
                "amount", "out_of_range",
                f"Amount must not exceed {self._max_amount:,.2f}",
            ))

        if not draft.description.strip():
            issues.append(_error(
                "description", "missing", "Description is required"
            ))

        if not draft.category:
            issues.append(_error(
                "category", "missing", "Please choose a category"
            ))
        elif draft.category not in categories:
            issues.append(_error(
                "category", "invalid_value",
                f"Unknown category: {draft.category}",
            ))

        return issues

    def _validate_semantic(
        self,
        draft: TransactionDraft,
        categories: dict[str, Category],
        now: datetime,
    ) -> list[ValidationIssue]:
        """Stage 2: rules that need the category set or the clock."""
        issues = []
        category = categories[draft.category]

        if not category.accepts(draft.type):
            if draft.type == TransactionType.INCOME:
                message = f"'{category.name}' is not an income category"
            else:
                message = f"'{category.name}' can only be used for income"
            issues.append(_error("category", "mismatch", message))

        if draft.is_planned and as_local(draft.date) < as_local(now):
            issues.append(_error(
                "date", "past_date", "Please select a future date"
            ))

        warn_above = Decimal(str(self._settings.large_amount_warning))
        if draft.amount > warn_above:
            issues.append(_warning(
                "amount", "suspicious_value",
                f"Amount ({draft.amount:,.2f}) seems unusually high",
            ))

        return issues

    def validate(
        self,
        draft: TransactionDraft,
        categories: Iterable[Category],
        now: datetime,
    ) -> ValidationResult:
        """
        Run both stages against a draft.

        Args:
            draft: The transaction to be added
            categories: The ledger's current categories
            now: Current time, for the planned-date rule
        """
        by_id = {c.id: c for c in categories}

        issues = self._validate_schema(draft, by_id)
        if not any(issue.severity == "error" for issue in issues):
            issues.extend(self._validate_semantic(draft, by_id, now))

        return ValidationResult(issues=issues)

    def validate_wallet(
        self,
        total_balance: Any,
        monthly_budget: Any,
    ) -> ValidationResult:
        """Wallet edits must be numbers, not negative and within max_amount."""
        issues = []
        for field, raw in (
            ("total_balance", total_balance),
            ("monthly_budget", monthly_budget),
        ):
            value = _parse_amount(raw)
            if value is None or not value.is_finite():
                issues.append(_error(field, "invalid_format", "Please enter a valid amount"))
            elif value < 0:
                issues.append(_error(field, "invalid_value", "Please enter valid positive amounts"))
            elif value > self._max_amount:
                issues.append(_error(
                    field, "out_of_range",
                    f"Amount must not exceed {self._max_amount:,.2f}",
                ))
        return ValidationResult(issues=issues)

    def validate_settings(self, settings: UserSettings) -> ValidationResult:
        issues = []
        if not 0 <= settings.budget_warning_threshold <= 100:
            issues.append(_error(
                "budget_warning_threshold", "invalid_value",
                "Warning threshold must be between 0 and 100",
            ))
        if settings.currency not in CURRENCY_SYMBOLS:
            issues.append(_error(
                "currency", "invalid_value",
                f"Unsupported currency: {settings.currency}",
            ))
        return ValidationResult(issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """The message shown to the user for a validation result."""
        if result.is_valid and not result.warnings:
            return "✅ All good."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
