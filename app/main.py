import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from meter.config import load_config, setup_logging
from meter.domain import CategoryType
from meter.events import (
    EventBus,
    ENTRY_ADDED,
    ENTRY_DELETED,
    CATEGORY_ADDED,
    CATEGORY_REMOVED,
    CATEGORY_UPDATED,
    BUDGET_ALERT,
    register_default_handlers,
)
from meter.exceptions import StorageError
from meter.formatting import format_currency, format_number, format_progress
from meter.memo import cached_month_summaries
from meter.months import by_category, by_month, month_key
from meter.storage import State, load_state, restore_state
from meter.transforms import (
    add_category,
    add_entry,
    build_category,
    build_entry,
    currency_code,
    delete_entry,
    remove_category,
    update_numeric_field,
)
from meter.validation import safe_category, validate_category, validate_entry

logger = logging.getLogger(__name__)

CATEGORY_TYPES = {
    CategoryType.EXPENSE: (
        "Expense",
        "Tracks spending in your main currency and rolls leftover budget into next month.",
    ),
    CategoryType.QUANTITY: (
        "Quantity",
        "Counts things like rides or deliveries where the unit is fixed.",
    ),
    CategoryType.CUSTOM: (
        "Custom",
        "Any other metric you want to meter (minutes, cups, tickets, etc.).",
    ),
}

st.set_page_config(page_title="Expense Meter", layout="wide")

if "config" not in st.session_state:
    config = load_config()
    setup_logging(config)
    st.session_state.config = config
config = st.session_state.config
state_path = Path(config["storage"]["state_path"])

if "bus" not in st.session_state:
    bus = EventBus()
    register_default_handlers(bus, state_path)
    st.session_state.bus = bus
bus: EventBus = st.session_state.bus

if "meter_state" not in st.session_state:
    st.session_state.meter_state = restore_state(load_state(state_path))


def commit(event_name: str, new_state: State, **payload) -> None:
    """Swap in the new snapshot and notify subscribers (autosave)."""
    st.session_state.meter_state = new_state
    try:
        bus.publish(event_name, {"state": new_state, **payload})
    except StorageError as e:
        logger.error("Could not persist change: %s", e)
        st.session_state.storage_error = str(e)


state: State = st.session_state.meter_state
categories, entries = state.categories, state.entries
today = date.today()
currency = currency_code(categories, config.get("currency", "USD"))

summaries = cached_month_summaries(categories, entries, today)
current = summaries[0]

st.caption("EXPENSE METER")
st.title("Track your days, carry your wins")
st.write(
    "Monitor daily spending, track alternative metrics like rides or cups, "
    "and automatically roll unused budget into the next month."
)

if st.session_state.get("storage_error"):
    st.error(f"Changes are not being saved: {st.session_state.pop('storage_error')}")

for result in bus.publish(BUDGET_ALERT, {"summary": current}):
    if result.get("alert"):
        st.warning(f"⚠️ {result['alert']}")

k1, k2, k3, k4 = st.columns(4)
with k1:
    st.metric("Current Month", current.label)
    st.metric("Budget Available", format_currency(current.available, currency))
with k2:
    st.metric("Spent so far", format_currency(current.total_expense, currency))
    st.caption(f"Base budget: {format_currency(current.base_budget, currency)}")
with k3:
    st.metric(
        "Carryover ready",
        format_currency(current.carryover, currency),
        delta="surplus" if current.carryover >= 0 else "overspent",
        delta_color="normal" if current.carryover >= 0 else "inverse",
    )
    st.caption("Rolls into next month automatically")
with k4:
    st.metric("Entries logged", len(entries))
    st.caption(f"Stored locally in {state_path}")

st.divider()

form_col, cat_col = st.columns([2, 1])

with form_col:
    st.subheader("➕ Log new entry")
    if not categories:
        st.info("No categories yet. Add one to start logging.")
    else:
        with st.form("entry_form", clear_on_submit=True):
            c1, c2 = st.columns(2)
            with c1:
                selected = st.selectbox("Category", categories, format_func=lambda c: c.name)
                on = st.date_input("Date", value=today)
            with c2:
                label = "Amount" if selected.type is CategoryType.EXPENSE else f"How many {selected.unit}?"
                raw_value = st.text_input(label, placeholder=f"0 {selected.unit}")
                note = st.text_input("Note (optional)", placeholder="What was this for?")
            submitted = st.form_submit_button("Save entry")

        if submitted:
            maybe_entry = build_entry(selected, on, raw_value, note)
            if maybe_entry.is_none():
                st.error("Enter a positive number.")
            else:
                checked = validate_entry(maybe_entry.get_or_else(None), categories, today)
                if checked.is_left():
                    st.error(checked.get_error()["message"])
                else:
                    new_entry = checked.get_or_else(None)
                    commit(ENTRY_ADDED, State(categories, add_entry(entries, new_entry)), entry=new_entry)
                    st.rerun()

with cat_col:
    st.subheader("🗂 Categories")
    with st.expander("Add category"):
        with st.form("category_form", clear_on_submit=True):
            name = st.text_input("Name", placeholder="Transportation, Drinks, etc.")
            cat_type = st.selectbox(
                "Type",
                list(CATEGORY_TYPES),
                format_func=lambda t: CATEGORY_TYPES[t][0],
            )
            st.caption(" / ".join(desc for _, desc in CATEGORY_TYPES.values()))
            unit = st.text_input("Unit", value=currency, placeholder="USD, rides, cups...")
            raw_budget = st.text_input("Monthly budget (expense)", placeholder="0.00")
            raw_target = st.text_input("Monthly target (quantity / custom)", placeholder="0")
            created = st.form_submit_button("Save category")

        if created:
            maybe_category = build_category(name, cat_type, unit, raw_budget, raw_target, categories)
            checked = maybe_category.map(validate_category)
            if checked.is_none():
                st.error("Category name must not be empty.")
            elif checked.get_or_else(None).is_left():
                st.error(checked.get_or_else(None).get_error()["message"])
            else:
                new_category = maybe_category.get_or_else(None)
                commit(CATEGORY_ADDED, State(add_category(categories, new_category), entries), category=new_category)
                st.rerun()

    for category in categories:
        with st.container(border=True):
            top, remove = st.columns([4, 1])
            with top:
                st.markdown(f"**{category.name}** · `{category.type.value.upper()}`")
                st.caption(f"Unit: {category.unit}")
            with remove:
                if st.button("✕", key=f"rm_{category.id}", help="Remove category and its entries"):
                    new_categories, new_entries = remove_category(categories, entries, category.id)
                    commit(CATEGORY_REMOVED, State(new_categories, new_entries), category_id=category.id)
                    st.rerun()

            field = "base_budget" if category.type is CategoryType.EXPENSE else "monthly_target"
            current_value = getattr(category, field).map(lambda v: f"{v:g}").get_or_else("")
            raw = st.text_input(
                "Monthly budget" if field == "base_budget" else "Monthly target",
                value=current_value,
                key=f"edit_{category.id}",
            )
            if raw != current_value:
                updated = update_numeric_field(categories, category.id, field, raw)
                if updated != categories:
                    commit(CATEGORY_UPDATED, State(updated, entries), category_id=category.id)
                    st.rerun()

st.divider()

meters_col, recent_col = st.columns([3, 2])

with meters_col:
    st.subheader("📏 Category meters")
    st.caption("See how each category is performing this month.")
    for b in current.categories:
        cat = b.category
        with st.container(border=True):
            left, right = st.columns([3, 2])
            with left:
                st.markdown(f"**{cat.name}**")
                st.caption("Budget" if cat.type is CategoryType.EXPENSE else "Target")
            with right:
                if cat.type is CategoryType.EXPENSE:
                    st.write(format_currency(b.value, cat.unit or currency))
                    st.caption(f"spent of {format_currency(b.available_budget.get_or_else(0.0), cat.unit or currency)}")
                else:
                    st.write(f"{format_number(b.value)} {cat.unit}")
                    st.caption(
                        cat.monthly_target
                        .map(lambda t: f"target {format_number(t)} {cat.unit}")
                        .get_or_else("no target set")
                    )
            if b.progress.is_some():
                progress = b.progress.get_or_else(0.0)
                st.progress(float(np.clip(progress, 0.0, 1.0)), text=format_progress(progress))
            if cat.type is CategoryType.EXPENSE:
                carry = b.carryover.get_or_else(0.0)
                label = "Carryover" if carry >= 0 else "Overspent"
                color = "green" if carry >= 0 else "red"
                st.markdown(f":{color}[{label}: {format_currency(carry, cat.unit or currency)}]")

    st.subheader("🗓 Monthly timeline")
    st.caption("Balances roll forward automatically when you end the month with a surplus.")

    timeline = pd.DataFrame(
        [
            {
                "Month": s.label,
                "Spent": s.total_expense,
                "Available": s.available,
                "Base budget": s.base_budget,
                "Carryover": s.carryover,
            }
            for s in summaries
        ]
    )
    chrono = timeline.iloc[::-1]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=chrono["Month"], y=chrono["Available"], name="Available"))
    fig.add_trace(go.Bar(x=chrono["Month"], y=chrono["Spent"], name="Spent"))
    fig.add_trace(go.Scatter(x=chrono["Month"], y=chrono["Carryover"], mode="lines+markers", name="Carryover"))
    fig.update_layout(barmode="group", margin=dict(t=30, b=10, l=10, r=10), height=320)
    st.plotly_chart(fig, use_container_width=True)

    display = timeline.assign(
        **{col: timeline[col].map(lambda v: format_currency(v, currency))
           for col in ("Spent", "Available", "Base budget", "Carryover")}
    )
    st.dataframe(display, hide_index=True, use_container_width=True)

with recent_col:
    st.subheader("🧾 Recent entries")
    st.caption("Log your daily movements and clean them up if needed.")

    labels = {s.key: s.label for s in summaries}
    names = {c.id: c.name for c in categories}
    f1, f2 = st.columns(2)
    with f1:
        month_filter = st.selectbox(
            "Month",
            ["All"] + list(labels),
            format_func=lambda k: labels.get(k, k),
        )
    with f2:
        category_filter = st.selectbox(
            "Category",
            ["All"] + list(names),
            format_func=lambda k: names.get(k, k),
        )

    shown = entries
    if month_filter != "All":
        shown = tuple(filter(by_month(month_filter), shown))
    if category_filter != "All":
        shown = tuple(filter(by_category(category_filter), shown))

    if not shown:
        st.info(
            "Start tracking your first expense entry using the form above. "
            "All data is stored locally on this machine."
        )

    for e in shown:
        maybe_cat = safe_category(categories, e.category_id)
        if maybe_cat.is_none():
            continue
        cat = maybe_cat.get_or_else(None)
        amount = (
            format_currency(e.value, cat.unit or currency)
            if cat.type is CategoryType.EXPENSE
            else f"{format_number(e.value)} {cat.unit}"
        )
        with st.container(border=True):
            info, value_col, delete = st.columns([3, 2, 1])
            with info:
                st.write(cat.name)
                st.caption(e.date.strftime("%d %b %Y"))
                if e.note:
                    st.caption(e.note)
            with value_col:
                st.write(f"**{amount}**")
            with delete:
                if st.button("Delete", key=f"del_{e.id}"):
                    commit(ENTRY_DELETED, State(categories, delete_entry(entries, e.id)), entry_id=e.id)
                    st.rerun()

    if entries:
        export = pd.DataFrame(
            [
                {
                    "date": e.date.isoformat(),
                    "month": month_key(e.date),
                    "category": safe_category(categories, e.category_id).map(lambda c: c.name).get_or_else(""),
                    "value": e.value,
                    "note": e.note,
                }
                for e in entries
            ]
        )
        st.download_button(
            "⬇️ Download entries CSV",
            export.to_csv(index=False),
            file_name="entries.csv",
            mime="text/csv",
        )
