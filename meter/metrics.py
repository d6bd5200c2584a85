"""Monthly aggregation and budget-rollover engine.

Turns a flat list of categories and entries into month summaries, newest
month first. Expense categories carry their unused budget (or overspend)
into the following bucketed month; quantity and custom categories report
progress against their monthly target.
"""

import logging
from collections import defaultdict
from datetime import date
from functools import partial, reduce
from typing import Callable, Iterable, NamedTuple, Sequence, assert_never

from meter.domain import Category, CategoryBreakdown, CategoryType, Entry, MonthSummary
from meter.functional import Maybe, Nothing, Some
from meter.months import month_key, month_label

logger = logging.getLogger(__name__)


class _Fold(NamedTuple):
    carry: dict[str, float]              # running carryover per expense category
    summaries: tuple[MonthSummary, ...]  # oldest first


def _bucket_totals(
    category_ids: set[str], entries: Iterable[Entry]
) -> tuple[dict[tuple[str, str], float], dict[str, str]]:
    """Sum entry values per (month key, category id).

    Also returns the earliest month each category has an entry in.
    """
    totals: dict[tuple[str, str], float] = defaultdict(float)
    first_seen: dict[str, str] = {}

    for e in entries:
        if e.category_id not in category_ids:
            logger.debug("Skipping entry %s: category %s does not exist", e.id, e.category_id)
            continue
        if not isinstance(e.date, date):
            logger.warning("Skipping entry %s: %r is not a calendar date", e.id, e.date)
            continue
        key = month_key(e.date)
        totals[(key, e.category_id)] += e.value
        if e.category_id not in first_seen or key < first_seen[e.category_id]:
            first_seen[e.category_id] = key

    return totals, first_seen


def _active_from(category: Category, first_seen: dict[str, str]) -> Maybe[str]:
    # Nothing() means the category counts as present in every month.
    def _start(created: date) -> str:
        created_key = month_key(created)
        return min(created_key, first_seen.get(category.id, created_key))

    return category.created_at.map(_start)


def _progress(value: float) -> Callable[[float], Maybe[float]]:
    def _ratio(target: float) -> Maybe[float]:
        return Some(value / target) if target > 0 else Nothing()

    return _ratio


def _summarize_month(
    categories: tuple[Category, ...],
    totals: dict[tuple[str, str], float],
    active_from: dict[str, Maybe[str]],
    state: _Fold,
    key: str,
) -> _Fold:
    carry = dict(state.carry)
    breakdowns: list[CategoryBreakdown] = []

    for category in categories:
        value = totals.get((key, category.id), 0.0)
        active = active_from[category.id].map(lambda start: key >= start).get_or_else(True)

        match category.type:
            case CategoryType.EXPENSE:
                if not active:
                    breakdowns.append(CategoryBreakdown(category, value))
                    continue
                available = category.base_budget.get_or_else(0.0) + carry.get(category.id, 0.0)
                carry[category.id] = available - value
                breakdowns.append(
                    CategoryBreakdown(
                        category,
                        value,
                        available_budget=Some(available),
                        carryover=Some(carry[category.id]),
                    )
                )
            case CategoryType.QUANTITY | CategoryType.CUSTOM:
                progress = category.monthly_target.bind(_progress(value)) if active else Nothing()
                breakdowns.append(CategoryBreakdown(category, value, progress=progress))
            case _:
                assert_never(category.type)

    expense = [b for b in breakdowns if b.category.type is CategoryType.EXPENSE]
    total_expense = sum((b.value for b in expense), 0.0)
    base_budget = sum(
        (b.category.base_budget.get_or_else(0.0) for b in expense if b.available_budget.is_some()),
        0.0,
    )
    available = sum((b.available_budget.get_or_else(0.0) for b in expense), 0.0)

    summary = MonthSummary(
        key=key,
        label=month_label(key),
        total_expense=total_expense,
        base_budget=base_budget,
        carryover=available - total_expense,
        available=available,
        categories=tuple(breakdowns),
    )
    return _Fold(carry, state.summaries + (summary,))


def compute_month_summaries(
    categories: Sequence[Category],
    entries: Iterable[Entry],
    today: date | None = None,
) -> tuple[MonthSummary, ...]:
    """Build one summary per bucketed month, most recent month first.

    Buckets are the months of all entries whose category exists plus the
    month of ``today`` (defaults to the wall-clock date), so the result is
    never empty. Entries pointing at a missing category are ignored.

    The rollover recurrence walks the buckets oldest to newest; the returned
    order is a separate descending sort of the same keys.
    """
    today = today or date.today()
    categories = tuple(categories)

    totals, first_seen = _bucket_totals({c.id for c in categories}, entries)
    active_from = {c.id: _active_from(c, first_seen) for c in categories}

    keys = {month_key(today)} | {key for key, _ in totals}
    ascending = sorted(keys)
    descending = sorted(keys, reverse=True)

    step = partial(_summarize_month, categories, totals, active_from)
    folded = reduce(step, ascending, _Fold(carry={}, summaries=()))

    by_key = {s.key: s for s in folded.summaries}
    return tuple(by_key[key] for key in descending)
