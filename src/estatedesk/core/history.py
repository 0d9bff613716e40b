"""
Append-only activity trail for Property, Deal, Lead and Task records.

Each model names its log column through ``__history_attr__`` (``history``,
``activity_log`` or ``communication_history``). Entries are plain dicts so
they embed directly in the JSON column.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from src.estatedesk.core.enums import HistoryAction

E = TypeVar("E")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def history_of(entity: Any) -> list:
    """Return the entity's activity log (empty list if never written)."""
    return list(getattr(entity, entity.__history_attr__) or [])


def build_history_entry(
    action: Union[HistoryAction, str],
    actor_id: Optional[int],
    details: str,
    changes: Optional[Dict[str, Any]] = None,
    clock: Callable[[], datetime] = utcnow,
) -> Dict[str, Any]:
    """
    Build a single history entry.

    Args:
        action: HistoryAction tag
        actor_id: Id of the acting user (None for system actions)
        details: Human-readable description
        changes: Optional structured payload
        clock: Timestamp source

    Returns:
        JSON-serialisable entry
    """
    entry = {
        "action": HistoryAction(action).value,
        "timestamp": clock().isoformat(),
        "user_id": actor_id,
        "details": details,
    }
    if changes:
        entry["changes"] = changes
    return entry


def append_history(
    entity: E,
    action: Union[HistoryAction, str],
    actor_id: Optional[int],
    details: str,
    changes: Optional[Dict[str, Any]] = None,
    clock: Callable[[], datetime] = utcnow,
) -> E:
    """
    Append one entry to an entity's activity log.

    The log is reassigned as a new list with the entry at the end, so prior
    entries keep their order and the ORM registers the change on the JSON
    column.

    Args:
        entity: Property, Deal, Lead or Task instance
        action: HistoryAction tag
        actor_id: Id of the acting user
        details: Human-readable description
        changes: Optional structured payload
        clock: Timestamp source

    Returns:
        The same entity, with one more entry
    """
    entry = build_history_entry(action, actor_id, details, changes, clock)
    setattr(entity, entity.__history_attr__, history_of(entity) + [entry])
    return entity
