"""Structured logging package."""

from budget_tracker.logs.logger import (
    LedgerLogger,
    configure_logging,
    create_correlation_id,
)

__all__ = ["LedgerLogger", "configure_logging", "create_correlation_id"]
