from datetime import date, datetime

from meter.domain import Category, CategoryType, Entry
from meter.functional import Nothing, Some
from meter.transforms import (
    CATEGORY_COLORS,
    add_category,
    add_entry,
    build_category,
    build_entry,
    currency_code,
    delete_entry,
    pick_color,
    remove_category,
    sort_entries_by_date_desc,
    update_numeric_field,
)


def make_categories():
    return (
        Category("c1", "Food", CategoryType.EXPENSE, "EUR", base_budget=Some(300), color="blue"),
        Category("q1", "Rides", CategoryType.QUANTITY, "rides", monthly_target=Some(10), color="emerald"),
    )


def make_entry(id, cat_id, on, created=datetime(2024, 1, 1)):
    return Entry(id=id, category_id=cat_id, date=on, value=10.0, created_at=created)


def test_add_entry_keeps_newest_first():
    e1 = make_entry("e1", "c1", date(2024, 1, 5))
    e2 = make_entry("e2", "c1", date(2024, 1, 9))
    e3 = make_entry("e3", "c1", date(2024, 1, 7))

    entries = add_entry(add_entry(add_entry((), e1), e2), e3)

    assert [e.id for e in entries] == ["e2", "e3", "e1"]


def test_add_entry_immutability():
    e1 = make_entry("e1", "c1", date(2024, 1, 5))
    entries = (e1,)

    new_entries = add_entry(entries, make_entry("e2", "c1", date(2024, 1, 6)))

    assert new_entries is not entries
    assert len(new_entries) == 2
    assert len(entries) == 1


def test_same_day_entries_ordered_by_creation_time():
    early = make_entry("early", "c1", date(2024, 1, 5), created=datetime(2024, 1, 5, 8))
    late = make_entry("late", "c1", date(2024, 1, 5), created=datetime(2024, 1, 5, 20))

    assert [e.id for e in sort_entries_by_date_desc([early, late])] == ["late", "early"]


def test_delete_entry():
    entries = (make_entry("e1", "c1", date(2024, 1, 5)), make_entry("e2", "c1", date(2024, 1, 6)))

    result = delete_entry(entries, "e1")

    assert [e.id for e in result] == ["e2"]
    assert len(entries) == 2


def test_remove_category_cascades_entries():
    categories = make_categories()
    entries = (
        make_entry("e1", "c1", date(2024, 1, 5)),
        make_entry("e2", "q1", date(2024, 1, 6)),
        make_entry("e3", "c1", date(2024, 1, 7)),
    )

    new_categories, new_entries = remove_category(categories, entries, "c1")

    assert [c.id for c in new_categories] == ["q1"]
    assert [e.id for e in new_entries] == ["e2"]
    assert len(categories) == 2


def test_add_category_goes_first():
    categories = make_categories()
    new = Category("n1", "Coffee", CategoryType.CUSTOM, "cups")

    assert add_category(categories, new)[0] is new


def test_build_entry():
    category = make_categories()[0]
    now = datetime(2024, 2, 2, 10, 0)

    entry = build_entry(category, date(2024, 2, 1), "12.50", "  lunch  ", now=now)

    assert entry.is_some()
    e = entry.get_or_else(None)
    assert e.category_id == "c1"
    assert e.value == 12.5
    assert e.note == "lunch"
    assert e.created_at == now
    assert e.id


def test_build_entry_rejects_bad_values():
    category = make_categories()[0]
    for raw in ("", "0", "-3", "abc", "inf"):
        assert build_entry(category, date(2024, 2, 1), raw).is_none()


def test_build_expense_category_keeps_only_budget():
    now = datetime(2024, 2, 2)

    built = build_category("  Groceries ", CategoryType.EXPENSE, "", "250", "9", make_categories(), now=now)

    c = built.get_or_else(None)
    assert c.name == "Groceries"
    assert c.unit == "EUR"
    assert c.base_budget == Some(250.0)
    assert c.monthly_target == Nothing()
    assert c.created_at == Some(now)
    assert c.color not in {"blue", "emerald"}


def test_build_quantity_category_keeps_only_target():
    built = build_category("Cups", CategoryType.CUSTOM, "", "250", "8", ())

    c = built.get_or_else(None)
    assert c.unit == "units"
    assert c.base_budget == Nothing()
    assert c.monthly_target == Some(8.0)


def test_build_category_drops_zero_budget():
    built = build_category("Fun", CategoryType.EXPENSE, "USD", "0", "", ())

    assert built.get_or_else(None).base_budget == Nothing()


def test_build_category_requires_name():
    assert build_category("   ", CategoryType.EXPENSE, "USD", "10", "", ()).is_none()


def test_update_numeric_field():
    categories = make_categories()

    updated = update_numeric_field(categories, "c1", "base_budget", "450")
    assert updated[0].base_budget == Some(450.0)
    assert categories[0].base_budget == Some(300)

    cleared = update_numeric_field(categories, "q1", "monthly_target", "")
    assert cleared[1].monthly_target == Nothing()

    zero = update_numeric_field(categories, "q1", "monthly_target", "0")
    assert zero[1].monthly_target == Some(0.0)


def test_update_numeric_field_keeps_previous_on_bad_input():
    categories = make_categories()

    for raw in ("-1", "abc", "nan"):
        assert update_numeric_field(categories, "c1", "base_budget", raw) == categories


def test_pick_color():
    assert pick_color(()) == CATEGORY_COLORS[0]
    assert pick_color(make_categories()) == CATEGORY_COLORS[2]

    everything = tuple(
        Category(str(i), "x", CategoryType.CUSTOM, "u", color=color)
        for i, color in enumerate(CATEGORY_COLORS)
    )
    assert pick_color(everything) in CATEGORY_COLORS


def test_currency_code():
    assert currency_code(make_categories()) == "EUR"
    assert currency_code(make_categories()[1:]) == "USD"
    assert currency_code((), default="KZT") == "KZT"
