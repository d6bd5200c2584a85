import random
from dataclasses import replace
from datetime import date, datetime
from typing import Literal, Sequence, Tuple
from uuid import uuid4

from meter.domain import Category, CategoryType, Entry
from meter.functional import Maybe, Nothing, Some
from meter.validation import parse_number

DEFAULT_CURRENCY = "USD"
DEFAULT_UNIT = "units"

CATEGORY_COLORS = (
    "blue",
    "emerald",
    "purple",
    "amber",
    "rose",
    "sky",
    "lime",
)

NumericField = Literal["base_budget", "monthly_target"]


def generate_id() -> str:
    return str(uuid4())


def sort_entries_by_date_desc(entries: Sequence[Entry]) -> Tuple[Entry, ...]:
    # newest date first; same-day entries by creation time, newest first
    return tuple(sorted(entries, key=lambda e: (e.date, e.created_at), reverse=True))


def currency_code(categories: Sequence[Category], default: str = DEFAULT_CURRENCY) -> str:
    return next(
        (c.unit for c in categories if c.type is CategoryType.EXPENSE and c.unit),
        default,
    )


def pick_color(existing: Sequence[Category], palette: Sequence[str] = CATEGORY_COLORS) -> str:
    used = {c.color for c in existing}
    for color in palette:
        if color not in used:
            return color
    return random.choice(palette)


def build_entry(
    category: Category,
    on: date,
    raw_value: str | float,
    note: str = "",
    now: datetime | None = None,
) -> Maybe[Entry]:
    """Create an entry from form input, or Nothing() if the value is not positive."""
    return parse_number(raw_value).bind(
        lambda value: Some(
            Entry(
                id=generate_id(),
                category_id=category.id,
                date=on,
                value=value,
                created_at=now or datetime.now(),
                note=note.strip(),
            )
        )
        if value > 0
        else Nothing()
    )


def _positive(raw: str | float | None) -> Maybe[float]:
    return parse_number(raw).bind(lambda v: Some(v) if v > 0 else Nothing())


def build_category(
    name: str,
    type: CategoryType,
    unit: str,
    raw_budget: str | float | None,
    raw_target: str | float | None,
    existing: Sequence[Category],
    now: datetime | None = None,
) -> Maybe[Category]:
    """Create a category from form input, or Nothing() if the name is blank.

    Only the numeric field that matters for the type is kept.
    """
    name = name.strip()
    if not name:
        return Nothing()

    is_expense = type is CategoryType.EXPENSE
    default_unit = currency_code(existing) if is_expense else DEFAULT_UNIT

    return Some(
        Category(
            id=generate_id(),
            name=name,
            type=type,
            unit=unit.strip() or default_unit,
            base_budget=_positive(raw_budget) if is_expense else Nothing(),
            monthly_target=Nothing() if is_expense else _positive(raw_target),
            color=pick_color(existing),
            created_at=Some(now or datetime.now()),
        )
    )


def add_entry(entries: Tuple[Entry, ...], e: Entry) -> Tuple[Entry, ...]:
    return sort_entries_by_date_desc((e,) + entries)


def delete_entry(entries: Tuple[Entry, ...], entry_id: str) -> Tuple[Entry, ...]:
    return tuple(filter(lambda e: e.id != entry_id, entries))


def add_category(categories: Tuple[Category, ...], c: Category) -> Tuple[Category, ...]:
    return (c,) + categories


def remove_category(
    categories: Tuple[Category, ...],
    entries: Tuple[Entry, ...],
    category_id: str,
) -> Tuple[Tuple[Category, ...], Tuple[Entry, ...]]:
    """Drop a category together with every entry logged against it."""
    return (
        tuple(c for c in categories if c.id != category_id),
        tuple(e for e in entries if e.category_id != category_id),
    )


def update_numeric_field(
    categories: Tuple[Category, ...],
    category_id: str,
    field: NumericField,
    raw: str,
) -> Tuple[Category, ...]:
    """Apply an inline budget/target edit.

    Blank input clears the field; a finite non-negative number replaces it;
    anything else leaves the category unchanged.
    """
    def _apply(c: Category) -> Category:
        if c.id != category_id:
            return c
        if not raw.strip():
            return replace(c, **{field: Nothing()})
        parsed = parse_number(raw)
        if parsed.map(lambda v: v >= 0).get_or_else(False):
            return replace(c, **{field: parsed})
        return c

    return tuple(map(_apply, categories))
