"""
Notification Hook Interface

The ledger decides *when* a budget warning is due; how it reaches the
user (a dialog, a toast, a push message) belongs to the presentation layer.
"""

from abc import ABC, abstractmethod

from budget_tracker.models.ledger import BudgetWarning


class NotificationHookInterface(ABC):
    """Receives budget warnings from the ledger."""
    
    @abstractmethod
    async def budget_warning(self, warning: BudgetWarning) -> None:
        """
        Deliver a budget warning.
        
        Called after the mutation that crossed the threshold is persisted.
        Exceptions raised here are logged by the ledger and do not undo
        the mutation.
        """
        pass
