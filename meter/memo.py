from datetime import date
from functools import lru_cache

from meter.domain import Category, Entry, MonthSummary
from meter.metrics import compute_month_summaries


@lru_cache(maxsize=32)
def cached_month_summaries(
    categories: tuple[Category, ...],
    entries: tuple[Entry, ...],
    today: date,
) -> tuple[MonthSummary, ...]:
    # tuples of frozen dataclasses only; a list argument fails to hash
    return compute_month_summaries(categories, entries, today)
