from datetime import date, datetime
from typing import Callable

from meter.domain import Entry


def month_key(d: date) -> str:
    """Canonical ``YYYY-MM`` bucket for a calendar date (or datetime)."""
    return f"{d.year:04d}-{d.month:02d}"


def month_start(key: str) -> date:
    return datetime.strptime(key, "%Y-%m").date()


def month_label(key: str) -> str:
    # "2024-01" -> "January 2024"
    return month_start(key).strftime("%B %Y")


def by_month(key: str) -> Callable[[Entry], bool]:
    def _filter(e: Entry) -> bool:
        return month_key(e.date) == key

    return _filter


def by_category(category_id: str) -> Callable[[Entry], bool]:
    def _filter(e: Entry) -> bool:
        return e.category_id == category_id

    return _filter
