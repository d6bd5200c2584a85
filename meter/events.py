import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple

from meter.domain import CategoryType, MonthSummary
from meter.storage import save_state

__all__ = [
    'Event', 'EventBus',
    'ENTRY_ADDED', 'ENTRY_DELETED', 'CATEGORY_ADDED', 'CATEGORY_REMOVED',
    'CATEGORY_UPDATED', 'BUDGET_ALERT', 'STATE_EVENTS',
    'make_autosave_handler', 'overspend_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in self._subscribers[name]:
            result = handler(event, payload)
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)


ENTRY_ADDED = "ENTRY_ADDED"
ENTRY_DELETED = "ENTRY_DELETED"
CATEGORY_ADDED = "CATEGORY_ADDED"
CATEGORY_REMOVED = "CATEGORY_REMOVED"
CATEGORY_UPDATED = "CATEGORY_UPDATED"
BUDGET_ALERT = "BUDGET_ALERT"

# every event that changes the persisted snapshot
STATE_EVENTS = (ENTRY_ADDED, ENTRY_DELETED, CATEGORY_ADDED, CATEGORY_REMOVED, CATEGORY_UPDATED)


def make_autosave_handler(path: Path) -> Callable[[Event, dict], dict]:
    """Handler that writes ``payload["state"]`` to ``path`` after each change."""
    def autosave_handler(event: Event, payload: dict) -> dict:
        state = payload.get("state")
        if state is None:
            return {}
        save_state(path, state)
        logger.debug("Autosaved after %s", event.name)
        return {"saved": str(path)}

    return autosave_handler


def overspend_handler(event: Event, payload: dict) -> dict:
    summary: MonthSummary | None = payload.get("summary")
    if summary is None:
        return {}

    overspent = [
        b for b in summary.categories
        if b.category.type is CategoryType.EXPENSE and b.carryover.get_or_else(0.0) < 0
    ]
    if not overspent:
        return {}

    alerts = [
        f"Overspent {b.category.name} in {summary.label}: "
        f"{-b.carryover.get_or_else(0.0):,.2f} {b.category.unit} over budget"
        for b in overspent
    ]
    return {
        "alert": "; ".join(alerts),
        "category_ids": [b.category.id for b in overspent],
        "month": summary.key,
    }


def register_default_handlers(bus: EventBus, state_path: Path) -> None:
    autosave = make_autosave_handler(state_path)
    for name in STATE_EVENTS:
        bus.subscribe(name, autosave)
    bus.subscribe(BUDGET_ALERT, overspend_handler)
