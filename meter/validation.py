import math
from datetime import date

from meter.domain import Category, CategoryType, Entry
from meter.functional import Either, Left, Maybe, Nothing, Right, Some
from meter.months import month_key


def safe_category(cats: tuple[Category, ...], cat_id: str) -> Maybe[Category]:
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def parse_number(raw: str | float | int | None) -> Maybe[float]:
    """Parse user input into a finite float; blank or garbage is Nothing()."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return Nothing()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return Nothing()
    return Some(value) if math.isfinite(value) else Nothing()


def _is_valid_amount(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value >= 0


def validate_entry(
    e: Entry,
    cats: tuple[Category, ...],
    today: date,
) -> Either[dict, Entry]:

    if safe_category(cats, e.category_id).is_none():
        return Left({
            "error": "category_not_found",
            "message": f"Category with ID {e.category_id} does not exist",
            "category_id": e.category_id
        })

    if not _is_valid_amount(e.value) or e.value == 0:
        return Left({
            "error": "invalid_value",
            "message": f"Entry value must be a positive number, got {e.value}",
            "value": e.value
        })

    if month_key(e.date) > month_key(today):
        return Left({
            "error": "future_date",
            "message": f"Entry date {e.date.isoformat()} is past the current month",
            "date": e.date.isoformat()
        })

    return Right(e)


def validate_category(c: Category) -> Either[dict, Category]:

    if not c.name.strip():
        return Left({
            "error": "empty_name",
            "message": "Category name must not be empty",
        })

    if c.type is CategoryType.EXPENSE:
        budget = c.base_budget.get_or_else(0.0)
        if not _is_valid_amount(budget):
            return Left({
                "error": "invalid_budget",
                "message": f"Budget for {c.name} must be a non-negative number",
                "base_budget": budget
            })
    else:
        target = c.monthly_target.get_or_else(0.0)
        if not _is_valid_amount(target):
            return Left({
                "error": "invalid_target",
                "message": f"Target for {c.name} must be a non-negative number",
                "monthly_target": target
            })

    return Right(c)
