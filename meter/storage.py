"""Opaque state snapshot: load and save categories and entries as one JSON blob."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Tuple

from meter.domain import Category, CategoryType, Entry
from meter.exceptions import StorageError
from meter.functional import Maybe, Nothing, Some
from meter.transforms import sort_entries_by_date_desc

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class State:
    categories: Tuple[Category, ...] = ()
    entries: Tuple[Entry, ...] = ()


DEFAULT_STATE = State(
    categories=(
        Category(
            id="everyday-spending",
            name="Everyday spending",
            type=CategoryType.EXPENSE,
            unit="USD",
            color="blue",
        ),
    ),
    entries=(),
)


def _optional_number(value: Maybe[float]) -> float | None:
    return value.get_or_else(None)


def _parse_timestamp(raw: Any) -> datetime:
    # ISO strings, or epoch milliseconds as written by browser builds
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw / 1000)
    return datetime.fromisoformat(raw)


def category_to_dict(c: Category) -> Dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "type": c.type.value,
        "unit": c.unit,
        "baseBudget": _optional_number(c.base_budget),
        "monthlyTarget": _optional_number(c.monthly_target),
        "color": c.color,
        "createdAt": c.created_at.map(lambda ts: ts.isoformat()).get_or_else(None),
    }


def category_from_dict(data: Dict[str, Any]) -> Category:
    return Category(
        id=data["id"],
        name=data["name"],
        type=CategoryType(data["type"]),
        unit=data.get("unit", ""),
        base_budget=Maybe.of(data.get("baseBudget")).map(float),
        monthly_target=Maybe.of(data.get("monthlyTarget")).map(float),
        color=data.get("color") or "",
        created_at=Maybe.of(data.get("createdAt")).map(_parse_timestamp),
    )


def entry_to_dict(e: Entry) -> Dict[str, Any]:
    return {
        "id": e.id,
        "categoryId": e.category_id,
        "date": e.date.isoformat(),
        "value": e.value,
        "note": e.note or None,
        "createdAt": e.created_at.isoformat(),
    }


def entry_from_dict(data: Dict[str, Any]) -> Entry:
    return Entry(
        id=data["id"],
        category_id=data["categoryId"],
        date=date.fromisoformat(data["date"]),
        value=float(data["value"]),
        created_at=_parse_timestamp(data["createdAt"]),
        note=data.get("note") or "",
    )


def state_to_dict(state: State) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "categories": [category_to_dict(c) for c in state.categories],
        "entries": [entry_to_dict(e) for e in state.entries],
    }


def state_from_dict(data: Dict[str, Any]) -> State:
    return State(
        categories=tuple(category_from_dict(c) for c in data.get("categories", [])),
        entries=tuple(entry_from_dict(e) for e in data.get("entries", [])),
    )


def restore_state(stored: Maybe[State]) -> State:
    """Pick the state to start from; a snapshot without categories gets the defaults."""
    state = stored.get_or_else(DEFAULT_STATE)
    return State(
        categories=state.categories or DEFAULT_STATE.categories,
        entries=sort_entries_by_date_desc(state.entries),
    )


def load_state(path: Path) -> Maybe[State]:
    """Read a snapshot; Nothing() if it is missing or unreadable."""
    if not path.exists():
        logger.info("No saved state at %s", path)
        return Nothing()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        state = state_from_dict(data)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning("Ignoring unreadable state file %s: %s", path, e)
        return Nothing()
    logger.info("Loaded %d categories and %d entries from %s",
                len(state.categories), len(state.entries), path)
    return Some(state)


def save_state(path: Path, state: State) -> None:
    """Write a snapshot atomically.

    Raises:
        StorageError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state_to_dict(state), f, indent=2)
            os.replace(tmp_name, path)
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
    except OSError as e:
        raise StorageError(
            "Failed to save state",
            details={"path": str(path)},
            original_error=e,
        ) from e
    logger.debug("Saved state to %s", path)
