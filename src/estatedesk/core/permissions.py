"""
Authorization gate.

One policy table decides every mutation: admins may do anything, a handful of
actions are admin-only regardless of ownership, and everything else requires
the actor to own (or be assigned to) the resource.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from src.estatedesk.core.enums import UserRole
from src.estatedesk.exceptions import ForbiddenError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Actor:
    """Identity of the user making a request."""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class Action(str, Enum):
    UPDATE = "update"
    DELETE = "delete"
    UPLOAD_DOCUMENT = "upload_document"
    VERIFY_DOCUMENT = "verify_document"
    OVERRIDE_VERIFICATION = "override_verification"
    UPDATE_STAGE = "update_stage"
    UPDATE_STATUS = "update_status"
    ADD_COMMUNICATION = "add_communication"
    ASSIGN = "assign"
    MANAGE_AGENT = "manage_agent"


ADMIN_ONLY = frozenset({UserRole.ADMIN.value})

# Roles required per action; None means "owner or admin".
POLICY: Dict[Action, Optional[FrozenSet[str]]] = {
    Action.UPDATE: None,
    Action.UPLOAD_DOCUMENT: None,
    Action.UPDATE_STAGE: None,
    Action.UPDATE_STATUS: None,
    Action.ADD_COMMUNICATION: None,
    Action.DELETE: ADMIN_ONLY,
    Action.VERIFY_DOCUMENT: ADMIN_ONLY,
    Action.OVERRIDE_VERIFICATION: ADMIN_ONLY,
    Action.ASSIGN: ADMIN_ONLY,
    Action.MANAGE_AGENT: ADMIN_ONLY,
}

# Columns holding the user ids that count as owner/assignee per model.
OWNER_FIELDS: Dict[str, Tuple[str, ...]] = {
    "Property": ("owner_id",),
    "Deal": ("agent_id",),
    "Lead": ("assigned_agent_id",),
    "Task": ("assigned_to_id", "assigned_by_id"),
    "CalendarEvent": ("created_by_id",),
    "Agent": ("user_id",),
}


def owner_refs(resource: Any) -> Tuple[int, ...]:
    """User ids that own or are assigned to a resource."""
    fields = OWNER_FIELDS[type(resource).__name__]
    return tuple(
        value for value in (getattr(resource, field) for field in fields)
        if value is not None
    )


def can_mutate(actor: Actor, resource_owner_refs: Iterable[int], action: Action) -> bool:
    """
    Decide whether an actor may perform an action on a resource.

    Args:
        actor: Requesting user
        resource_owner_refs: Owner/assignee user ids of the resource
        action: Action being attempted

    Returns:
        True if allowed
    """
    if actor.is_admin:
        return True

    required_roles = POLICY[Action(action)]
    if required_roles is not None and actor.role not in required_roles:
        return False

    return actor.id in set(resource_owner_refs)


def authorize(actor: Actor, resource: Any, action: Action, message: Optional[str] = None) -> None:
    """
    Enforce the policy for an existing resource.

    Args:
        actor: Requesting user
        resource: Model instance (already loaded, so existence is settled)
        action: Action being attempted
        message: Error message override

    Raises:
        ForbiddenError: If the actor may not perform the action
    """
    if can_mutate(actor, owner_refs(resource), action):
        return

    resource_name = type(resource).__name__
    logger.warning(
        "authorization_denied",
        actor_id=actor.id,
        role=actor.role,
        action=Action(action).value,
        resource=resource_name,
        resource_id=getattr(resource, "id", None),
    )
    raise ForbiddenError(message or f"Not authorized to {Action(action).value.replace('_', ' ')} this {resource_name.lower()}")


def require_admin(actor: Actor, action: Action, message: str) -> None:
    """
    Enforce an admin-only action that has no target resource yet (e.g. create).

    Raises:
        ForbiddenError: If the actor is not an admin
    """
    if not can_mutate(actor, (), action):
        raise ForbiddenError(message)
