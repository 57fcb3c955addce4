"""
Ledger: State, Mutations and Queries

This module ties the models, the store and the notification hook together.
It owns the four top-level documents and enforces the rules that keep
them consistent:

- The wallet balance is an accumulator. Every non-planned add moves it by
  the transaction's signed amount; every non-planned delete moves it back
  by exactly the same amount. Planned transactions never touch it.
- Write, then reflect. A mutation persists every document it changes
  before in-memory state is replaced, so memory never holds a value that
  is not durable. If the second write of a mutation fails, the first
  document is written back and the error is raised.
- One mutation at a time. Mutations hold an asyncio.Lock across their
  read-modify-write, so concurrent callers cannot lose balance updates.

Queries are synchronous and read in-memory state only.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter

from budget_tracker.config import AppSettings, get_settings
from budget_tracker.logs import LedgerLogger, configure_logging, create_correlation_id
from budget_tracker.models.defaults import (
    DEFAULT_CATEGORIES,
    INCOME_CATEGORY_ID,
    default_settings,
    default_wallet,
)
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
    ValidationResult,
    Wallet,
)
from budget_tracker.queries import aggregations, reports
from budget_tracker.services.notifications import NotificationHookInterface
from budget_tracker.services.storage import (
    CorruptValueError,
    KeyValueStoreInterface,
    StorageError,
    create_store,
)
from budget_tracker.validation import TransactionValidator


Clock = Callable[[], datetime]

_TRANSACTION_LIST = TypeAdapter(list[Transaction])
_CATEGORY_LIST = TypeAdapter(list[Category])


class StorageKey(str, Enum):
    """Logical keys of the four persisted documents."""
    TRANSACTIONS = "transactions"
    WALLET = "wallet"
    CATEGORIES = "categories"
    SETTINGS = "settings"


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class PersistenceError(LedgerError):
    """A mutation could not be written; in-memory state is unchanged."""

    def __init__(self, key: str, cause: Exception):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to persist '{key}': {cause}")


class TransactionValidationError(LedgerError):
    """A draft was rejected before any state changed."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid transaction: {messages}")


class LedgerState(BaseModel):
    """Snapshot of the four documents. Replaced whole, never mutated."""
    model_config = ConfigDict(frozen=True)

    transactions: tuple[Transaction, ...] = ()
    wallet: Wallet
    categories: tuple[Category, ...]
    settings: UserSettings


def _parse_categories(raw: Any) -> tuple[Category, ...]:
    categories = tuple(_CATEGORY_LIST.validate_python(raw))
    if not categories:
        raise ValueError("category list is empty")

    # Lists saved before categories carried the income flag
    if not any(c.is_income_category for c in categories):
        categories = tuple(
            c.model_copy(update={"is_income_category": True})
            if c.id == INCOME_CATEGORY_ID else c
            for c in categories
        )
    return categories


class Ledger:
    """
    The personal finance ledger.

    Usage:
        ledger = Ledger(store)
        await ledger.load()
        tx = await ledger.add_transaction(draft)
        ledger.current_month_expenses()
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        notification_hook: Optional[NotificationHookInterface] = None,
        validator: Optional[TransactionValidator] = None,
        logger: Optional[LedgerLogger] = None,
        clock: Clock = datetime.now,
        app_settings: Optional[AppSettings] = None,
    ):
        self._store = store
        self._notification_hook = notification_hook
        self._app_settings = app_settings or get_settings().app
        self._validator = validator or TransactionValidator(self._app_settings)
        self._logger = logger or LedgerLogger()
        self._clock = clock
        self._lock = asyncio.Lock()
        self._loaded = False
        self._last_issued_id = 0
        self._state = self._default_state()

    # =========================================================================
    # STATE
    # =========================================================================

    def _default_state(self) -> LedgerState:
        return LedgerState(
            transactions=(),
            wallet=self._default_wallet(),
            categories=DEFAULT_CATEGORIES,
            settings=self._default_settings(),
        )

    def _default_wallet(self) -> Wallet:
        return default_wallet(self._app_settings.default_currency)

    def _default_settings(self) -> UserSettings:
        return default_settings(
            currency=self._app_settings.default_currency,
            budget_warning_threshold=self._app_settings.default_warning_threshold,
        )

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._state.transactions

    @property
    def wallet(self) -> Wallet:
        return self._state.wallet

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._state.categories

    @property
    def settings(self) -> UserSettings:
        return self._state.settings

    def category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self._state.categories if c.id == category_id), None)

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(self) -> LedgerState:
        """
        Load all four documents from the store.

        Never raises: a key that is absent, corrupt or unreadable is
        replaced by its default and the reason is logged.
        """
        async with self._lock:
            await self._load_unlocked()
        return self._state

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self._load_unlocked()

    async def _load_unlocked(self) -> None:
        log = self._logger.bind(correlation_id=str(create_correlation_id()))

        transactions, wallet, categories, settings = await asyncio.gather(
            self._load_key(
                StorageKey.TRANSACTIONS,
                lambda raw: tuple(_TRANSACTION_LIST.validate_python(raw)),
                (),
                log,
            ),
            self._load_key(
                StorageKey.WALLET, Wallet.model_validate, self._default_wallet(), log
            ),
            self._load_key(
                StorageKey.CATEGORIES, _parse_categories, DEFAULT_CATEGORIES, log
            ),
            self._load_key(
                StorageKey.SETTINGS,
                UserSettings.model_validate,
                self._default_settings(),
                log,
            ),
        )

        self._state = LedgerState(
            transactions=transactions,
            wallet=wallet,
            categories=categories,
            settings=settings,
        )
        self._loaded = True

    async def _load_key(
        self,
        key: StorageKey,
        parse: Callable[[Any], Any],
        default: Any,
        log: LedgerLogger,
    ) -> Any:
        try:
            raw = await self._store.get(key.value)
        except CorruptValueError as e:
            log.load_fallback(key.value, "corrupt", str(e))
            return default
        except StorageError as e:
            log.load_fallback(key.value, "unreadable", str(e))
            return default

        if raw is None:
            log.load_fallback(key.value, "absent")
            return default

        try:
            return parse(raw)
        except ValueError as e:
            # pydantic's ValidationError is a ValueError
            log.load_fallback(key.value, "invalid", str(e))
            return default

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    async def _write(self, key: StorageKey, document: Any, log: LedgerLogger) -> None:
        try:
            await self._store.set(key.value, document)
        except StorageError as e:
            log.persistence_failed(key.value, str(e))
            raise PersistenceError(key.value, e) from e

    async def _restore(self, key: StorageKey, document: Any, log: LedgerLogger) -> None:
        """Best-effort rewrite of a document after a later write failed."""
        try:
            await self._store.set(key.value, document)
        except StorageError as e:
            log.rollback_failed(key.value, str(e))

    @staticmethod
    def _transactions_document(transactions: Iterable[Transaction]) -> list[dict]:
        return [t.to_document() for t in transactions]

    async def _write_transactions_and_wallet(
        self,
        previous: tuple[Transaction, ...],
        updated: tuple[Transaction, ...],
        wallet: Optional[Wallet],
        log: LedgerLogger,
    ) -> None:
        """Persist a new transaction list and, if given, a new wallet."""
        await self._write(
            StorageKey.TRANSACTIONS, self._transactions_document(updated), log
        )
        if wallet is None:
            return
        try:
            await self._write(StorageKey.WALLET, wallet.to_document(), log)
        except PersistenceError:
            await self._restore(
                StorageKey.TRANSACTIONS, self._transactions_document(previous), log
            )
            raise

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def _next_id(self) -> str:
        """Millisecond timestamp, bumped past any id already in use."""
        taken = {t.id for t in self._state.transactions}
        candidate = max(
            int(self._clock().timestamp() * 1000),
            self._last_issued_id + 1,
        )
        while str(candidate) in taken:
            candidate += 1
        self._last_issued_id = candidate
        return str(candidate)

    async def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """
        Validate, persist and apply a new transaction.

        Non-planned transactions move the wallet balance (expense down,
        income up). A non-planned expense may trigger a budget warning.

        Raises:
            TransactionValidationError: If the draft is rejected
            PersistenceError: If a write fails (nothing is applied)
        """
        async with self._lock:
            await self._ensure_loaded()
            log = self._logger.bind(correlation_id=str(create_correlation_id()))
            now = self._clock()

            result = self._validator.validate(draft, self._state.categories, now)
            if result.has_errors:
                log.validation_failed([issue.model_dump() for issue in result.issues])
                raise TransactionValidationError(result)

            transaction = draft.to_transaction(self._next_id())
            previous = self._state.transactions
            updated = previous + (transaction,)

            wallet = None
            if not transaction.is_planned:
                wallet = self._state.wallet.model_copy(update={
                    "total_balance": self._state.wallet.total_balance + transaction.signed_amount,
                })

            await self._write_transactions_and_wallet(previous, updated, wallet, log)
            self._state = self._state.model_copy(update={
                "transactions": updated,
                "wallet": wallet if wallet is not None else self._state.wallet,
            })

            log.transaction_added(
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=transaction.amount,
                is_planned=transaction.is_planned,
                balance=self._state.wallet.total_balance,
            )
            warning = self._budget_warning_for(transaction, now)

        # Outside the lock so a hook may call back into the ledger
        if warning is not None:
            await self._emit_budget_warning(warning, log)

        return transaction

    async def delete_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """
        Remove a transaction and reverse its balance effect.

        Unknown ids are ignored, so deleting twice is the same as
        deleting once.

        Returns:
            The removed transaction, or None if the id was not found

        Raises:
            PersistenceError: If a write fails (nothing is applied)
        """
        async with self._lock:
            await self._ensure_loaded()
            log = self._logger.bind(correlation_id=str(create_correlation_id()))

            target = next(
                (t for t in self._state.transactions if t.id == transaction_id),
                None,
            )
            if target is None:
                log.delete_ignored(transaction_id)
                return None

            previous = self._state.transactions
            remaining = tuple(t for t in previous if t.id != transaction_id)

            wallet = None
            if not target.is_planned:
                wallet = self._state.wallet.model_copy(update={
                    "total_balance": self._state.wallet.total_balance - target.signed_amount,
                })

            await self._write_transactions_and_wallet(previous, remaining, wallet, log)
            self._state = self._state.model_copy(update={
                "transactions": remaining,
                "wallet": wallet if wallet is not None else self._state.wallet,
            })

            log.transaction_deleted(
                transaction_id=target.id,
                transaction_type=target.type.value,
                amount=target.amount,
                is_planned=target.is_planned,
                balance=self._state.wallet.total_balance,
            )
            return target

    async def save_wallet(self, wallet: Wallet) -> Wallet:
        """Overwrite the wallet. No validation beyond the model itself."""
        async with self._lock:
            await self._ensure_loaded()
            log = self._logger.bind(correlation_id=str(create_correlation_id()))
            await self._write(StorageKey.WALLET, wallet.to_document(), log)
            self._state = self._state.model_copy(update={"wallet": wallet})
            log.wallet_saved(wallet.total_balance, wallet.monthly_budget)
            return wallet

    async def save_settings(self, settings: UserSettings) -> UserSettings:
        """Overwrite the user settings. No validation beyond the model itself."""
        async with self._lock:
            await self._ensure_loaded()
            log = self._logger.bind(correlation_id=str(create_correlation_id()))
            await self._write(StorageKey.SETTINGS, settings.to_document(), log)
            self._state = self._state.model_copy(update={"settings": settings})
            log.settings_saved(
                settings.currency,
                settings.notifications,
                settings.budget_warning_threshold,
            )
            return settings

    async def save_categories(self, categories: Iterable[Category]) -> tuple[Category, ...]:
        """Overwrite the category list (e.g. to set per-category budgets)."""
        categories = tuple(categories)
        if not categories:
            raise LedgerError("At least one category is required")
        async with self._lock:
            await self._ensure_loaded()
            log = self._logger.bind(correlation_id=str(create_correlation_id()))
            await self._write(
                StorageKey.CATEGORIES, [c.to_document() for c in categories], log
            )
            self._state = self._state.model_copy(update={"categories": categories})
            log.categories_saved(len(categories))
            return categories

    # =========================================================================
    # BUDGET WARNINGS
    # =========================================================================

    def _budget_warning_for(
        self,
        transaction: Transaction,
        now: datetime,
    ) -> Optional[BudgetWarning]:
        """
        Warning due after adding `transaction`, if any.

        Only non-planned expenses with notifications on can warn, and only
        when a monthly budget is set (a zero budget never warns).
        """
        settings = self._state.settings
        wallet = self._state.wallet

        if transaction.type != TransactionType.EXPENSE or transaction.is_planned:
            return None
        if not settings.notifications or wallet.monthly_budget <= 0:
            return None

        expenses = aggregations.current_month_expenses(self._state.transactions, now)
        usage = aggregations.budget_usage_percent(expenses, wallet.monthly_budget)
        if usage < settings.budget_warning_threshold:
            return None

        return BudgetWarning(
            created_at=now,
            usage_percent=usage,
            month_expenses=expenses,
            monthly_budget=wallet.monthly_budget,
            threshold=settings.budget_warning_threshold,
            currency=settings.currency,
            transaction_id=transaction.id,
        )

    async def _emit_budget_warning(self, warning: BudgetWarning, log: LedgerLogger) -> None:
        log.budget_warning(
            usage_percent=warning.usage_percent,
            threshold=warning.threshold,
            month_expenses=warning.month_expenses,
            monthly_budget=warning.monthly_budget,
        )
        if self._notification_hook is None:
            return
        try:
            await self._notification_hook.budget_warning(warning)
        except Exception as e:
            # The mutation is already durable; a broken hook must not undo it
            log.notification_failed(type(self._notification_hook).__name__, str(e))

    # =========================================================================
    # QUERIES
    # =========================================================================

    def current_month_expenses(self) -> Decimal:
        return aggregations.current_month_expenses(self._state.transactions, self._clock())

    def current_month_income(self) -> Decimal:
        return aggregations.current_month_income(self._state.transactions, self._clock())

    def planned_transactions(self) -> list[Transaction]:
        return aggregations.planned_transactions(self._state.transactions)

    def transactions_by_category(self, category_id: str) -> list[Transaction]:
        return aggregations.transactions_by_category(self._state.transactions, category_id)

    def monthly_data(self, month: int, year: int) -> MonthlyData:
        """Month is 1-based (1 = January)."""
        return aggregations.monthly_data(self._state.transactions, month, year)

    def budget_status(self) -> BudgetStatus:
        return reports.budget_status(
            self._state.transactions,
            self._state.wallet,
            self._state.settings,
            self._clock(),
        )

    def top_categories(self, limit: Optional[int] = None) -> list[CategoryTotal]:
        return reports.top_categories(
            self._state.transactions,
            self._state.categories,
            limit or self._app_settings.top_categories_limit,
        )

    def recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        return reports.recent_transactions(
            self._state.transactions,
            limit or self._app_settings.recent_transactions_limit,
        )

    def planned_summary(self) -> PlannedSummary:
        return reports.planned_summary(self._state.transactions, self._clock())

    def categories_for(self, transaction_type: TransactionType) -> list[Category]:
        return reports.categories_for(self._state.categories, transaction_type)

    def format_amount(self, amount: Decimal) -> str:
        return reports.format_amount(amount, self._state.settings.currency)


def create_ledger(
    store: Optional[KeyValueStoreInterface] = None,
    notification_hook: Optional[NotificationHookInterface] = None,
) -> Ledger:
    """
    Factory function to build a ledger from settings.

    Args:
        store: Store to use; defaults to the backend in StorageSettings
        notification_hook: Receiver for budget warnings; the ledger logs
            every warning either way

    The ledger still needs `await ledger.load()` (mutations load lazily).
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    return Ledger(
        store=store or create_store(settings.storage),
        notification_hook=notification_hook,
        app_settings=settings.app,
    )
