"""
Ledger Logger

Every mutation and every recovered failure in the ledger is logged as a
structured event. This provides:
1. Traceability of balance changes while debugging
2. A record of load fallbacks and write failures, which are never
   shown to the user
3. Correlation IDs to group the log lines of one mutation

Logs are local only. Logging never raises into the ledger.
"""

import logging
import sys
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output to stderr at the given level.
    
    Without this the stdlib root logger drops everything below WARNING.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


def _money(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


class LedgerLogger:
    """
    Central logging service for ledger events.
    
    Wraps a structlog logger; bind() returns a copy carrying extra
    context (usually a correlation id) on every line.
    """
    
    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or structlog.get_logger("budget_tracker")
    
    def bind(self, **context: Any) -> "LedgerLogger":
        return LedgerLogger(self._logger.bind(**context))
    
    def transaction_added(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        is_planned: bool,
        balance: Decimal,
    ) -> None:
        self._logger.info(
            "transaction_added",
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=_money(amount),
            is_planned=is_planned,
            balance=_money(balance),
        )
    
    def transaction_deleted(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        is_planned: bool,
        balance: Decimal,
    ) -> None:
        self._logger.info(
            "transaction_deleted",
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=_money(amount),
            is_planned=is_planned,
            balance=_money(balance),
        )
    
    def delete_ignored(self, transaction_id: str) -> None:
        """Delete of an id that is not in the ledger."""
        self._logger.info("delete_ignored", transaction_id=transaction_id)
    
    def wallet_saved(self, balance: Decimal, monthly_budget: Decimal) -> None:
        self._logger.info(
            "wallet_saved",
            balance=_money(balance),
            monthly_budget=_money(monthly_budget),
        )
    
    def settings_saved(
        self,
        currency: str,
        notifications: bool,
        threshold: float,
    ) -> None:
        self._logger.info(
            "settings_saved",
            currency=currency,
            notifications=notifications,
            threshold=threshold,
        )
    
    def categories_saved(self, count: int) -> None:
        self._logger.info("categories_saved", count=count)
    
    def budget_warning(
        self,
        usage_percent: float,
        threshold: float,
        month_expenses: Decimal,
        monthly_budget: Decimal,
    ) -> None:
        self._logger.warning(
            "budget_warning",
            usage_percent=round(usage_percent, 2),
            threshold=threshold,
            month_expenses=_money(month_expenses),
            monthly_budget=_money(monthly_budget),
        )
    
    def load_fallback(self, key: str, reason: str, error: Optional[str] = None) -> None:
        """A stored key was absent or unreadable; the default is used instead."""
        if error is None:
            self._logger.info("load_fallback", key=key, reason=reason)
        else:
            self._logger.warning("load_fallback", key=key, reason=reason, error=error)
    
    def persistence_failed(self, key: str, error: str) -> None:
        self._logger.error("persistence_failed", key=key, error=error)
    
    def rollback_failed(self, key: str, error: str) -> None:
        """Restoring a previous document after a failed mutation also failed."""
        self._logger.critical("rollback_failed", key=key, error=error)
    
    def validation_failed(self, issues: list[dict]) -> None:
        self._logger.info("validation_failed", issues=issues)
    
    def notification_failed(self, hook: str, error: str) -> None:
        self._logger.error("notification_failed", hook=hook, error=error)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related log lines.
    
    Use this at the start of a mutation and bind it to the logger.
    """
    return uuid4()
