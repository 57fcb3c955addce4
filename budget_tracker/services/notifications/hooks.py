"""Notification hook implementations."""

from budget_tracker.models.ledger import BudgetWarning
from budget_tracker.services.notifications.interface import NotificationHookInterface


class CollectingNotificationHook(NotificationHookInterface):
    """
    Keeps emitted warnings until the UI drains them.
    
    Used by the Streamlit session and by tests.
    """
    
    def __init__(self):
        self._warnings: list[BudgetWarning] = []
    
    @property
    def warnings(self) -> list[BudgetWarning]:
        return list(self._warnings)
    
    async def budget_warning(self, warning: BudgetWarning) -> None:
        self._warnings.append(warning)
    
    def drain(self) -> list[BudgetWarning]:
        """Return pending warnings and forget them."""
        pending, self._warnings = self._warnings, []
        return pending

