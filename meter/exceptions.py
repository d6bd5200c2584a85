"""
Exception hierarchy for expense-meter.

The aggregation engine never raises; these cover the Store's side of the
application (configuration and snapshot persistence).
"""

from typing import Optional


class ExpenseMeterError(Exception):
    """
    Base exception for all expense-meter errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
        original_error: Optional original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None,
        original_error: Optional[Exception] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        msg = self.message
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            msg = f"{msg} ({detail_str})"
        return msg


class ConfigError(ExpenseMeterError):
    """Raised when configuration loading or validation fails."""
    pass


class StorageError(ExpenseMeterError):
    """Raised when the state snapshot cannot be written."""
    pass
