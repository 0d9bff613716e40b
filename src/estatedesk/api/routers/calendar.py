"""
Calendar Router

Endpoints for viewings, meetings and inspections.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.estatedesk.api.auth import get_current_actor
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.schemas import (
    ApiResponse,
    CalendarEventBase,
    CalendarEventCreate,
    CalendarEventDetail,
    CalendarEventStatusUpdate,
    MessageResponse,
)
from src.estatedesk.core.enums import EventStatus, EventType
from src.estatedesk.core.permissions import Action, Actor, authorize
from src.estatedesk.db.models import CalendarEvent
from src.estatedesk.db.repository import CalendarEventRepository
from src.estatedesk.exceptions import NotFoundError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/calendar", tags=["calendar"])

event_repository = CalendarEventRepository()


def _get_event(db: Session, event_id: int) -> CalendarEvent:
    event = event_repository.get_by_id(db, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


@router.get("/", response_model=ApiResponse[List[CalendarEventDetail]])
def list_events(
    status: Optional[EventStatus] = Query(None, description="Filter by event status"),
    event_type: Optional[EventType] = Query(None, description="Filter by event type"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    List events soonest first. Non-admins only see events they created.
    """
    events = event_repository.list_for_user(
        db,
        user_id=None if actor.is_admin else actor.id,
        status=status.value if status else None,
        event_type=event_type.value if event_type else None,
    )
    return {"success": True, "data": events}


@router.get("/{event_id}", response_model=ApiResponse[CalendarEventDetail])
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return {"success": True, "data": _get_event(db, event_id)}


@router.post("/", response_model=ApiResponse[CalendarEventDetail], status_code=201)
def create_event(
    payload: CalendarEventCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Schedule an event created by the current user.
    """
    event = event_repository.create(
        db,
        **payload.model_dump(),
        created_by_id=actor.id,
        status=EventStatus.SCHEDULED.value,
    )
    db.commit()

    logger.info("calendar_event_created", event_id=event.id, event_type=event.event_type)
    return {"success": True, "data": event}


@router.put("/{event_id}", response_model=ApiResponse[CalendarEventDetail])
def update_event(
    event_id: int,
    payload: CalendarEventBase,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Reschedule or edit an event (creator or admin).
    """
    event = _get_event(db, event_id)
    authorize(actor, event, Action.UPDATE, "Not authorized to update this event")

    for key, value in payload.model_dump().items():
        setattr(event, key, value)
    db.commit()

    logger.info("calendar_event_updated", event_id=event.id)
    return {"success": True, "data": event}


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    event = _get_event(db, event_id)
    authorize(actor, event, Action.DELETE, "Not authorized to delete this event")

    event_repository.delete(db, event)
    db.commit()
    return {"success": True, "message": "Event deleted successfully"}


@router.put("/{event_id}/status", response_model=ApiResponse[CalendarEventDetail])
def update_event_status(
    event_id: int,
    payload: CalendarEventStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    event = _get_event(db, event_id)
    authorize(actor, event, Action.UPDATE_STATUS, "Not authorized to update this event")

    previous = event.status
    event.status = payload.status
    db.commit()

    logger.info("calendar_event_status_updated", event_id=event.id, previous_status=previous, status=event.status)
    return {"success": True, "data": event}
