"""
Shared fixtures.

Tests never touch the network or the real clock: the ledger runs on an
in-memory store with a fixed "now" and a collecting notification hook.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import pytest

from budget_tracker.config import AppSettings
from budget_tracker.ledger import Ledger
from budget_tracker.models import TransactionDraft, TransactionType
from budget_tracker.services.notifications import CollectingNotificationHook
from budget_tracker.services.storage import InMemoryKeyValueStore, StorageError


NOW = datetime(2026, 3, 15, 12, 0, 0)


class FixedClock:
    """Callable clock that tests can move."""
    
    def __init__(self, now: datetime = NOW):
        self.now = now
    
    def __call__(self) -> datetime:
        return self.now


class FailingStore(InMemoryKeyValueStore):
    """In-memory store whose writes fail for chosen keys."""
    
    def __init__(self, fail_keys: Optional[set[str]] = None):
        super().__init__()
        self.fail_keys = fail_keys or set()
        self.writes: list[str] = []
    
    async def set(self, key: str, value: Any) -> bool:
        self.writes.append(key)
        if key in self.fail_keys:
            raise StorageError(f"disk full while writing {key}")
        return await super().set(key, value)


class YieldingStore(InMemoryKeyValueStore):
    """Gives control back to the event loop on every call, like real I/O."""
    
    async def get(self, key: str) -> Optional[Any]:
        await asyncio.sleep(0)
        return await super().get(key)
    
    async def set(self, key: str, value: Any) -> bool:
        await asyncio.sleep(0)
        return await super().set(key, value)


def make_draft(
    amount: Any = "10",
    category: str = "1",
    transaction_type: TransactionType = TransactionType.EXPENSE,
    description: str = "Groceries",
    date: datetime = NOW,
    is_planned: bool = False,
) -> TransactionDraft:
    return TransactionDraft(
        amount=Decimal(str(amount)),
        description=description,
        category=category,
        type=transaction_type,
        date=date,
        is_planned=is_planned,
    )


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def hook() -> CollectingNotificationHook:
    return CollectingNotificationHook()


@pytest.fixture
def ledger(store, hook, clock, app_settings) -> Ledger:
    return Ledger(
        store=store,
        notification_hook=hook,
        clock=clock,
        app_settings=app_settings,
    )
