"""Expense meter: monthly budgets, rollover and target tracking."""

from meter.metrics import compute_month_summaries

__all__ = ["compute_month_summaries"]
